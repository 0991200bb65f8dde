"""Built-in directory handlers bound to picker triggers.

A handler takes the selected directory path and performs one side effect.
``HANDLERS`` names them for the JSON config file.
"""

from __future__ import annotations

import os
import shlex
import subprocess
import sys
from collections.abc import Callable

from .entries import is_windows
from .errors import CderError

DirectoryHandler = Callable[[str], None]


def print_directory(directory: str) -> None:
    sys.stdout.write(directory + "\n")
    sys.stdout.flush()


def change_directory(directory: str) -> None:
    """Make ``directory`` the working directory and report it on stdout.

    A child process cannot move its parent shell, so the path is printed for
    a wrapper such as ``cd "$(cder)"`` to follow.
    """
    os.chdir(directory)
    print_directory(directory)


def _interactive_shell() -> list[str]:
    if is_windows():
        return [os.environ.get("COMSPEC", "cmd.exe")]
    return shlex.split(os.environ.get("SHELL", "").strip()) or ["/bin/sh"]


def tab_change_directory(directory: str) -> None:
    """Open a new interactive shell whose working directory is ``directory``."""
    try:
        subprocess.run(_interactive_shell(), cwd=directory, check=False)
    except OSError as exc:
        raise CderError(f"Failed to launch shell: {exc}") from exc


def open_in_editor(directory: str) -> None:
    """Run ``$EDITOR`` on ``directory``."""
    editor_env = os.environ.get("EDITOR", "").strip()
    if not editor_env:
        raise CderError("Cannot edit: $EDITOR is not set.")
    cmd = shlex.split(editor_env)
    if not cmd:
        raise CderError("Cannot edit: $EDITOR is empty.")
    try:
        subprocess.run([*cmd, directory], check=False)
    except OSError as exc:
        raise CderError(f"Failed to launch editor: {exc}") from exc


HANDLERS: dict[str, DirectoryHandler] = {
    "cd": change_directory,
    "tcd": tab_change_directory,
    "edit": open_in_editor,
    "print": print_directory,
}
