"""Capabilities cder needs from a fuzzy-finder host.

The picker glue only talks to a ``PickerHost``; matching, rendering, and
process plumbing stay on the host side.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import Protocol

from .entries import DirectoryEntry

INSERT_MODE = "i"
NORMAL_MODE = "n"
KEY_MODES = (INSERT_MODE, NORMAL_MODE)

FUZZY_FILE_SORTER = "fuzzy_file"

Action = Callable[[], None]


@dataclass(frozen=True)
class Picker:
    """Everything a host needs to show one directory picker."""

    prompt_title: str
    entries: Iterable[DirectoryEntry]
    preview_command: Callable[[DirectoryEntry], list[str]]
    sorter: str = FUZZY_FILE_SORTER
    host_args: tuple[str, ...] = ()


class PickerHost(Protocol):
    def spawn_process(self, argv: Sequence[str]) -> Iterator[str]:
        """Start ``argv`` and yield its stdout lines as they arrive."""
        ...

    def register_key_binding(self, mode: str, key: str, callback: Action) -> None:
        """Bind ``key`` in ``mode`` for the next ``show_list`` call."""
        ...

    def replace_default_action(self, callback: Action) -> None:
        """Replace the host's built-in select action."""
        ...

    def show_list(self, picker: Picker) -> None:
        """Run the picker until the user selects or cancels."""
        ...

    def close_list(self) -> None:
        ...

    def get_selection(self) -> DirectoryEntry | None:
        ...
