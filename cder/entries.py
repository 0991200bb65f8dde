"""Directory entries built from listing-command output.

Each stdout line becomes one immutable ``DirectoryEntry``: the full path is
the value and sort key, the label drops the home prefix and gains an icon.
"""

from __future__ import annotations

import os
import platform
from dataclasses import dataclass

FOLDER_ICON = "\uf74a "
DIRECTORY_HIGHLIGHT: tuple[tuple[int, int], str] = ((1, 3), "Directory")


def is_windows() -> bool:
    return platform.system() == "Windows"


@dataclass(frozen=True)
class DirectoryEntry:
    value: str
    display: str
    ordinal: str
    highlights: tuple[tuple[tuple[int, int], str], ...] = (DIRECTORY_HIGHLIGHT,)


def home_prefix(windows: bool | None = None) -> str | None:
    """Return the prefix stripped from labels (``HOME`` or ``USERPROFILE``)."""
    if windows is None:
        windows = is_windows()
    value = os.environ.get("USERPROFILE" if windows else "HOME", "")
    return value or None


def strip_prefix(line: str, prefix: str | None, sep: str) -> str:
    """Drop a leading ``prefix + sep`` from ``line``; other lines pass through."""
    if not prefix:
        return line
    lead = prefix + sep
    if line.startswith(lead):
        return line[len(lead):]
    return line


def make_entry(line: str, windows: bool | None = None) -> DirectoryEntry:
    """Build the picker entry for one line of listing output.

    The prefix is read from the environment on every call so a changed
    ``HOME`` is honoured without rebuilding the configuration.
    """
    if windows is None:
        windows = is_windows()
    sep = "\\" if windows else "/"
    label = strip_prefix(line, home_prefix(windows), sep)
    return DirectoryEntry(value=line, display=FOLDER_ICON + label, ordinal=line)
