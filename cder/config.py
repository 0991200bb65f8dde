"""Picker configuration: defaults, overrides, and the persisted JSON file.

``CderConfig`` is immutable; ``setup``/``merge_config`` return a new object
instead of mutating shared state. The JSON config file only carries plain
values and handler names, resolved through ``HANDLERS``.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, fields, replace
from functools import partial
from pathlib import Path
from typing import Union

from platformdirs import user_config_dir

from .entries import DirectoryEntry, is_windows, make_entry
from .errors import ConfigError
from .handlers import HANDLERS, DirectoryHandler, change_directory, tab_change_directory
from .preview import quote_entry_value

APP_NAME = "cder"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

DEFAULT_TRIGGER = "default"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LiteralTitle:
    text: str


@dataclass(frozen=True)
class ProducerTitle:
    produce: Callable[[], str]


Title = Union[LiteralTitle, ProducerTitle]


def as_title(value: object) -> Title:
    """Coerce a string or zero-argument callable into a ``Title``."""
    if isinstance(value, (LiteralTitle, ProducerTitle)):
        return value
    if isinstance(value, str):
        return LiteralTitle(value)
    if callable(value):
        return ProducerTitle(value)
    raise ConfigError(f"prompt_title must be a string or a callable, got {type(value).__name__}")


def resolve_title(title: Title) -> str:
    """Return the prompt title text, calling the producer if there is one.

    Exceptions raised by a producer propagate to the caller.
    """
    if isinstance(title, ProducerTitle):
        return title.produce()
    return title.text


def _cwd_title() -> str:
    return "cwd: " + os.getcwd()


@dataclass(frozen=True)
class CderConfig:
    prompt_title: Title
    dir_command: tuple[str, ...]
    command_executer: tuple[str, ...]
    previewer_command: str
    entry_value_fn: Callable[[str], str]
    pager_command: str
    entry_maker: Callable[[str], DirectoryEntry]
    mappings: Mapping[str, DirectoryHandler] = field(default_factory=dict)
    host_args: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not callable(self.mappings.get(DEFAULT_TRIGGER)):
            raise ConfigError(f"mappings must bind a callable {DEFAULT_TRIGGER!r} handler")


def default_config(windows: bool | None = None) -> CderConfig:
    """Build the built-in configuration for the current (or given) platform."""
    if windows is None:
        windows = is_windows()
    if windows:
        profile = os.environ.get("USERPROFILE") or str(Path.home())
        dir_command: tuple[str, ...] = ("cmd.exe", "/c", "dir", "/B", "/S", "/AD", profile)
        command_executer: tuple[str, ...] = ("cmd.exe", "/c")
        previewer_command = "dir /B"
        pager_command = "more"
    else:
        home = os.environ.get("HOME") or str(Path.home())
        dir_command = ("fd", "--type=d", ".", home)
        command_executer = ("bash", "-c")
        previewer_command = "ls -a"
        pager_command = 'bat --plain --paging=always --pager="less -RS"'
    return CderConfig(
        prompt_title=ProducerTitle(_cwd_title),
        dir_command=dir_command,
        command_executer=command_executer,
        previewer_command=previewer_command,
        entry_value_fn=partial(quote_entry_value, windows=windows),
        pager_command=pager_command,
        entry_maker=partial(make_entry, windows=windows),
        mappings={
            DEFAULT_TRIGGER: change_directory,
            "<C-t>": tab_change_directory,
        },
    )


_FIELD_NAMES = frozenset(f.name for f in fields(CderConfig))
_ARGV_FIELDS = frozenset({"dir_command", "command_executer", "host_args"})
_STRING_FIELDS = frozenset({"previewer_command", "pager_command"})
_CALLABLE_FIELDS = frozenset({"entry_value_fn", "entry_maker"})


def _coerce_argv(key: str, value: object) -> tuple[str, ...]:
    if key == "host_args" and isinstance(value, (list, tuple)) and not value:
        return ()
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise ConfigError(f"{key} must be a list of strings")
    if not value or not all(isinstance(part, str) for part in value):
        raise ConfigError(f"{key} must be a non-empty list of strings")
    return tuple(value)


def _merge_mappings(
    base: Mapping[str, DirectoryHandler],
    overrides: object,
) -> dict[str, DirectoryHandler]:
    if not isinstance(overrides, Mapping):
        raise ConfigError("mappings must be a mapping of trigger to handler")
    merged = dict(base)
    for trigger, handler in overrides.items():
        if not isinstance(trigger, str) or not trigger:
            raise ConfigError(f"Invalid trigger: {trigger!r}")
        if not callable(handler):
            raise ConfigError(f"Handler for {trigger!r} is not callable")
        merged[trigger] = handler
    return merged


def merge_config(base: CderConfig, overrides: Mapping[str, object] | None) -> CderConfig:
    """Return ``base`` with ``overrides`` applied; ``base`` is left untouched.

    ``mappings`` merge trigger by trigger, every other key is replaced
    wholesale: an override ``dir_command`` or ``command_executer`` replaces
    the whole argument list rather than merging element by element, and so
    does ``host_args``. Unknown keys raise ``ConfigError``.
    """
    if not overrides:
        return base
    changes: dict[str, object] = {}
    for key, value in overrides.items():
        if key not in _FIELD_NAMES:
            raise ConfigError(f"Unknown configuration key: {key!r}")
        if key == "prompt_title":
            changes[key] = as_title(value)
        elif key == "mappings":
            changes[key] = _merge_mappings(base.mappings, value)
        elif key in _ARGV_FIELDS:
            changes[key] = _coerce_argv(key, value)
        elif key in _STRING_FIELDS:
            if not isinstance(value, str):
                raise ConfigError(f"{key} must be a string")
            changes[key] = value
        elif key in _CALLABLE_FIELDS:
            if not callable(value):
                raise ConfigError(f"{key} must be callable")
            changes[key] = value
    return replace(base, **changes)


def setup(config: CderConfig, overrides: Mapping[str, object] | None = None) -> CderConfig:
    """Merge ``overrides`` onto ``config`` and return the new configuration."""
    return merge_config(config, overrides)


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def overrides_from_file(
    data: Mapping[str, object],
    handlers: Mapping[str, DirectoryHandler] = HANDLERS,
) -> dict[str, object]:
    """Turn a decoded config file into ``merge_config`` overrides.

    Values of the wrong type and mappings naming unknown handlers are dropped
    so a bad file degrades to the defaults instead of failing the launch.
    """
    overrides: dict[str, object] = {}

    title = data.get("prompt_title")
    if isinstance(title, str):
        overrides["prompt_title"] = title

    for key in _ARGV_FIELDS:
        value = data.get(key)
        if isinstance(value, list) and value and all(isinstance(part, str) for part in value):
            overrides[key] = value

    for key in _STRING_FIELDS:
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            overrides[key] = value

    raw_mappings = data.get("mappings")
    if isinstance(raw_mappings, dict):
        mappings: dict[str, DirectoryHandler] = {}
        for trigger, name in raw_mappings.items():
            handler = handlers.get(name) if isinstance(name, str) else None
            if not trigger or handler is None:
                logger.debug("ignoring config mapping %r -> %r", trigger, name)
                continue
            mappings[trigger] = handler
        if mappings:
            overrides["mappings"] = mappings

    return overrides
