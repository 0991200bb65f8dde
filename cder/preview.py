"""Preview command construction.

Pipes a directory-listing command into a pager through the configured shell
executor, e.g. ``bash -c 'ls -a "/home/u/src" | bat ...'``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .entries import DirectoryEntry, is_windows
from .errors import UnsafePathError

if TYPE_CHECKING:
    from .config import CderConfig

logger = logging.getLogger(__name__)


def quote_entry_value(value: str, windows: bool | None = None) -> str:
    """Quote a directory path for the preview shell string.

    On Windows one trailing backslash is dropped first, since ``"C:\\dir\\"``
    would escape the closing quote for ``cmd.exe``.
    """
    if windows is None:
        windows = is_windows()
    if windows and value.endswith("\\"):
        value = value[:-1]
    return f'"{value}"'


def build_preview_command(entry: DirectoryEntry, config: CderConfig) -> list[str]:
    """Return the argv that previews ``entry`` through the configured pager.

    Raises ``UnsafePathError`` for paths holding a double quote: they cannot
    be spliced into the shell string without an escaping scheme.
    """
    if '"' in entry.value:
        raise UnsafePathError(entry.value)
    shell_string = (
        config.previewer_command
        + " "
        + config.entry_value_fn(entry.value)
        + " | "
        + config.pager_command
    )
    command = [*config.command_executer, shell_string]
    logger.debug("preview command for %s: %r", entry.value, command)
    return command
