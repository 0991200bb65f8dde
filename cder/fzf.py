"""Picker host backed by the external ``fzf`` binary.

fzf owns matching, rendering, and running previews. Preview argv vectors are
written to a per-session JSON-lines table; fzf's ``--preview`` calls back into
``python -m cder.fzf TABLE INDEX`` to run the one for the highlighted row.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import shlex
import shutil
import subprocess
import sys
import tempfile
from collections.abc import Iterator, Sequence
from itertools import islice
from pathlib import Path

from .entries import DirectoryEntry
from .errors import CderError, CommandNotFoundError, ConfigError, HostUnavailableError, UnsafePathError
from .host import FUZZY_FILE_SORTER, Action, Picker

FZF_URL = "https://github.com/junegunn/fzf"
FZF_CANCELLED = 130
FZF_NO_MATCH = 1
PREVIEW_TABLE_NAME = "previews.jsonl"
SELECT_KEY = "enter"

_STYLE_SGR = {"Directory": "\033[34m"}
_SGR_RESET = "\033[0m"
_SORTER_ARGS = {FUZZY_FILE_SORTER: ("--scheme=path",)}

_MODIFIERS = {"c": "ctrl", "m": "alt", "a": "alt", "s": "shift"}
_MODIFIER_ORDER = ("ctrl", "alt", "shift")
_KEY_NAMES = {
    "cr": "enter",
    "enter": "enter",
    "return": "enter",
    "tab": "tab",
    "esc": "esc",
    "bs": "bspace",
    "space": "space",
    "del": "del",
    "up": "up",
    "down": "down",
    "left": "left",
    "right": "right",
    "home": "home",
    "end": "end",
    "pageup": "page-up",
    "pagedown": "page-down",
}

logger = logging.getLogger(__name__)


def fzf_key(key: str) -> str:
    """Translate an editor key sequence such as ``<C-t>`` to fzf's ``ctrl-t``.

    Sequences without angle brackets are passed through unchanged.
    """
    if len(key) < 3 or not (key.startswith("<") and key.endswith(">")):
        return key
    *raw_modifiers, name = key[1:-1].split("-")
    modifiers: set[str] = set()
    for raw in raw_modifiers:
        modifier = _MODIFIERS.get(raw.lower())
        if modifier is None:
            raise ConfigError(f"Unsupported key sequence: {key}")
        modifiers.add(modifier)
    lowered = name.lower()
    if modifiers == {"shift"} and lowered == "tab":
        return "btab"
    if len(name) > 1:
        base = _KEY_NAMES.get(lowered, lowered)
    else:
        base = lowered if "ctrl" in modifiers else name
    ordered = [modifier for modifier in _MODIFIER_ORDER if modifier in modifiers]
    return "-".join([*ordered, base])


def _char_span(text: str, start: int, end: int) -> tuple[int, int]:
    """Map a UTF-8 byte range onto the characters it touches."""
    first = last = -1
    offset = 0
    for idx, char in enumerate(text):
        width = len(char.encode("utf-8"))
        if offset < end and offset + width > start:
            if first < 0:
                first = idx
            last = idx + 1
        offset += width
    if first < 0:
        return 0, 0
    return first, last


def render_display(entry: DirectoryEntry) -> str:
    """Return the entry label with its highlight spans as ANSI colours."""
    text = entry.display.replace("\t", " ").replace("\n", " ")
    spans: list[tuple[int, int, str]] = []
    for (start, end), group in entry.highlights:
        sgr = _STYLE_SGR.get(group)
        if sgr is None:
            continue
        first, last = _char_span(text, start, end)
        if first < last:
            spans.append((first, last, sgr))
    for first, last, sgr in sorted(spans, reverse=True):
        text = text[:first] + sgr + text[first:last] + _SGR_RESET + text[last:]
    return text


def _shell_join(parts: Sequence[str]) -> str:
    if os.name == "nt":
        return subprocess.list2cmdline(list(parts))
    return " ".join(shlex.quote(part) for part in parts)


def preview_record(picker: Picker, entry: DirectoryEntry) -> dict[str, object]:
    try:
        return {"argv": picker.preview_command(entry)}
    except UnsafePathError as exc:
        return {"error": str(exc)}


def read_preview_record(table_path: Path, index: int) -> dict[str, object] | None:
    """Return the 1-based ``index``-th record of a preview table."""
    if index < 1:
        return None
    with table_path.open(encoding="utf-8") as table:
        for line in islice(table, index - 1, index):
            record = json.loads(line)
            return record if isinstance(record, dict) else None
    return None


class FzfHost:
    """``PickerHost`` that shows pickers with fzf in the controlling terminal."""

    def __init__(
        self,
        fzf_path: str | None = None,
        extra_args: Sequence[str] = (),
        python: str | None = None,
    ) -> None:
        resolved = fzf_path or shutil.which("fzf")
        if resolved is None:
            raise HostUnavailableError(f"cder requires fzf: {FZF_URL}")
        self.fzf_path = resolved
        self.extra_args = tuple(extra_args)
        self.python = python or sys.executable
        self._default_action: Action | None = None
        self._bindings: dict[str, Action] = {}
        self._selection: DirectoryEntry | None = None
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    def spawn_process(self, argv: Sequence[str]) -> Iterator[str]:
        try:
            proc = subprocess.Popen(
                list(argv),
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except FileNotFoundError as exc:
            raise CommandNotFoundError(argv[0]) from exc
        logger.debug("spawned %r (pid %s)", list(argv), proc.pid)
        assert proc.stdout is not None
        try:
            for raw in proc.stdout:
                yield raw.rstrip("\r\n")
        finally:
            proc.stdout.close()
            if proc.poll() is None:
                proc.terminate()
            proc.wait()

    def register_key_binding(self, mode: str, key: str, callback: Action) -> None:
        # fzf has no insert/normal split; both modes land on the same key.
        self._bindings[fzf_key(key)] = callback

    def replace_default_action(self, callback: Action) -> None:
        self._default_action = callback

    def close_list(self) -> None:
        self._open = False

    def get_selection(self) -> DirectoryEntry | None:
        return self._selection

    def build_command(self, picker: Picker, table_path: Path) -> list[str]:
        preview = _shell_join([self.python, "-m", "cder.fzf", str(table_path)]) + " {1}"
        cmd = [
            self.fzf_path,
            "--ansi",
            "--delimiter=\t",
            "--with-nth=2..",
            "--layout=reverse",
            "--header",
            picker.prompt_title,
            "--preview",
            preview,
            "--preview-window",
            "right:60%",
        ]
        cmd.extend(_SORTER_ARGS.get(picker.sorter, ()))
        # enter is always expected so fzf prints a key line before the selection.
        cmd.extend(["--expect", ",".join(sorted({SELECT_KEY, *self._bindings}))])
        cmd.extend(self.extra_args)
        cmd.extend(picker.host_args)
        return cmd

    def show_list(self, picker: Picker) -> None:
        self._selection = None
        self._open = True
        try:
            with tempfile.TemporaryDirectory(prefix="cder-") as tmp:
                table_path = Path(tmp) / PREVIEW_TABLE_NAME
                table_path.touch()
                returncode, output, entries = self._run_fzf(picker, table_path)
            self._dispatch(returncode, output, entries)
        finally:
            self._open = False
            self._default_action = None
            self._bindings = {}

    def _run_fzf(
        self,
        picker: Picker,
        table_path: Path,
    ) -> tuple[int, str, list[DirectoryEntry]]:
        cmd = self.build_command(picker, table_path)
        logger.debug("starting fzf: %r", cmd)
        proc = subprocess.Popen(
            cmd,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            text=True,
            encoding="utf-8",
        )
        assert proc.stdin is not None and proc.stdout is not None
        entries: list[DirectoryEntry] = []
        iterator = iter(picker.entries)
        try:
            with table_path.open("w", encoding="utf-8") as table:
                for index, entry in enumerate(iterator, start=1):
                    entries.append(entry)
                    table.write(json.dumps(preview_record(picker, entry)) + "\n")
                    table.flush()
                    proc.stdin.write(f"{index}\t{render_display(entry)}\n")
                    proc.stdin.flush()
        except BrokenPipeError:
            logger.debug("fzf exited before the listing finished")
        except BaseException:
            proc.terminate()
            proc.wait()
            raise
        finally:
            close = getattr(iterator, "close", None)
            if close is not None:
                close()
            try:
                proc.stdin.close()
            except BrokenPipeError:
                pass
        output = proc.stdout.read()
        proc.stdout.close()
        returncode = proc.wait()
        logger.debug("fzf exited with %s", returncode)
        return returncode, output, entries

    def _dispatch(self, returncode: int, output: str, entries: list[DirectoryEntry]) -> None:
        if returncode == FZF_CANCELLED:
            return
        if returncode not in (0, FZF_NO_MATCH):
            raise CderError(f"fzf failed with exit status {returncode}")
        lines = output.splitlines()
        key = lines[0] if lines else ""
        self._selection = _entry_for_line(lines[1] if len(lines) > 1 else "", entries)
        action = self._bindings.get(key) or self._default_action
        if action is not None:
            action()


def _entry_for_line(line: str, entries: list[DirectoryEntry]) -> DirectoryEntry | None:
    index_text, _, _ = line.partition("\t")
    if not index_text.isdigit():
        return None
    index = int(index_text)
    if not 1 <= index <= len(entries):
        return None
    return entries[index - 1]


def preview_main(argv: Sequence[str] | None = None) -> int:
    """Run the stored preview command for one picker row."""
    parser = argparse.ArgumentParser(prog="python -m cder.fzf", description="Preview one cder entry.")
    parser.add_argument("table", type=Path, help="Preview table written by the picker session.")
    parser.add_argument("index", type=int, help="1-based row index.")
    args = parser.parse_args(argv)

    record = read_preview_record(args.table, args.index)
    if record is None:
        return 1
    error = record.get("error")
    if isinstance(error, str):
        sys.stdout.write(error + "\n")
        return 0
    command = record.get("argv")
    if not isinstance(command, list) or not command:
        return 1
    try:
        return subprocess.run([str(part) for part in command], check=False).returncode
    except FileNotFoundError:
        sys.stdout.write(f"Command not found: {command[0]}\n")
        return 127


if __name__ == "__main__":
    sys.exit(preview_main())
