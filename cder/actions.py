"""Trigger-to-handler wiring for an open picker.

Every action closes the picker first, then hands the highlighted directory
to its handler. A missing selection closes the picker and does nothing else.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from .config import DEFAULT_TRIGGER
from .handlers import DirectoryHandler
from .host import KEY_MODES, Action, PickerHost

logger = logging.getLogger(__name__)


def wrap(host: PickerHost, handler: DirectoryHandler) -> Action:
    def action() -> None:
        host.close_list()
        entry = host.get_selection()
        directory = entry.value if entry is not None else None
        if directory is None:
            logger.debug("no selection; %s not called", getattr(handler, "__name__", handler))
            return
        logger.debug("dispatching %s(%r)", getattr(handler, "__name__", handler), directory)
        handler(directory)

    return action


def attach_mappings(host: PickerHost, mappings: Mapping[str, DirectoryHandler]) -> None:
    """Register ``mappings`` on ``host``.

    ``default`` replaces the host's select action; any other trigger is bound
    in both insert and normal mode.
    """
    default_handler = mappings.get(DEFAULT_TRIGGER)
    if default_handler is not None:
        host.replace_default_action(wrap(host, default_handler))

    for key, handler in mappings.items():
        if key == DEFAULT_TRIGGER:
            continue
        for mode in KEY_MODES:
            host.register_key_binding(mode, key, wrap(host, handler))
