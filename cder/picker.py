"""Directory picker assembly and extension registration.

``run`` wires the listing command, entry adapter, preview builder, and key
mappings into one ``Picker`` and hands it to the host. ``CderExtension``
keeps the current configuration as an explicit object.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping
from functools import partial

from .actions import attach_mappings
from .config import CderConfig, default_config, merge_config, resolve_title, setup
from .entries import DirectoryEntry
from .host import FUZZY_FILE_SORTER, Picker, PickerHost
from .preview import build_preview_command

logger = logging.getLogger(__name__)


def _entries(host: PickerHost, config: CderConfig) -> Iterator[DirectoryEntry]:
    for line in host.spawn_process(config.dir_command):
        if line:
            yield config.entry_maker(line)


def run(
    host: PickerHost,
    config: CderConfig,
    overrides: Mapping[str, object] | None = None,
) -> CderConfig:
    """Open the directory picker on ``host``.

    ``overrides`` apply to this invocation only. Returns the configuration
    the picker actually ran with.
    """
    config = merge_config(config, overrides)
    title = resolve_title(config.prompt_title)
    logger.debug("listing directories with %r", config.dir_command)
    picker = Picker(
        prompt_title=title,
        entries=_entries(host, config),
        preview_command=partial(build_preview_command, config=config),
        sorter=FUZZY_FILE_SORTER,
        host_args=config.host_args,
    )
    attach_mappings(host, config.mappings)
    host.show_list(picker)
    return config


class CderExtension:
    """The ``setup``/``cder`` pair exported to a host."""

    def __init__(self, host: PickerHost, config: CderConfig | None = None) -> None:
        self.host = host
        self.config = config if config is not None else default_config()

    def setup(self, overrides: Mapping[str, object] | None = None) -> CderConfig:
        self.config = setup(self.config, overrides)
        return self.config

    def cder(self, overrides: Mapping[str, object] | None = None) -> CderConfig:
        return run(self.host, self.config, overrides)


def register_extension(
    host: PickerHost,
    config: CderConfig | None = None,
) -> dict[str, object]:
    """Return the ``setup`` hook and exported ``cder`` operation for ``host``."""
    extension = CderExtension(host, config)
    exports: dict[str, Callable[..., CderConfig]] = {"cder": extension.cder}
    return {"setup": extension.setup, "exports": exports}
