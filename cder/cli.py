"""Command-line front door for cder.

Builds the configuration from defaults, the user config file, and flags,
then opens the directory picker in fzf. Pair it with a shell function such
as ``cdd() { cd "$(cder)"; }`` so the chosen directory sticks.
"""

from __future__ import annotations

import argparse
import logging
import shlex
import sys
from collections.abc import Callable, Sequence

from .config import CONFIG_PATH, default_config, load_config, overrides_from_file, setup
from .errors import CderError, ConfigError
from .fzf import FzfHost
from .host import PickerHost
from .picker import run


def _flag_overrides(args: argparse.Namespace) -> dict[str, object]:
    overrides: dict[str, object] = {}
    if args.title is not None:
        overrides["prompt_title"] = args.title
    if args.dir_command is not None:
        try:
            overrides["dir_command"] = shlex.split(args.dir_command)
        except ValueError as exc:
            raise ConfigError(f"Invalid --dir-command: {exc}") from exc
    if args.previewer is not None:
        overrides["previewer_command"] = args.previewer
    if args.pager is not None:
        overrides["pager_command"] = args.pager
    if args.fzf_arg:
        overrides["host_args"] = list(args.fzf_arg)
    return overrides


def main(
    argv: Sequence[str] | None = None,
    host_factory: Callable[[], PickerHost] = FzfHost,
) -> None:
    """Parse CLI arguments and run the picker.

    ``host_factory`` is primarily for tests. Any ``CderError`` ends the
    process with its message on stderr and exit status 1.
    """
    parser = argparse.ArgumentParser(
        description="Pick a directory with fzf and change into it.",
        epilog=f"User configuration is read from {CONFIG_PATH}.",
    )
    parser.add_argument("--title", default=None, help="Prompt title (default: current directory).")
    parser.add_argument("--dir-command", default=None, help="Command listing candidate directories.")
    parser.add_argument("--previewer", default=None, help="Command previewing a directory (default: ls -a).")
    parser.add_argument("--pager", default=None, help="Command paging the preview output.")
    parser.add_argument(
        "--fzf-arg",
        action="append",
        default=[],
        metavar="ARG",
        help="Extra argument passed to fzf (repeatable), e.g. --fzf-arg=--height=40%%.",
    )
    parser.add_argument("--no-config", action="store_true", help="Ignore the user configuration file.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr.")
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr, format="%(name)s: %(message)s")

    try:
        config = default_config()
        if not args.no_config:
            config = setup(config, overrides_from_file(load_config()))
        config = setup(config, _flag_overrides(args))
        run(host_factory(), config)
    except CderError as exc:
        raise SystemExit(str(exc)) from exc


if __name__ == "__main__":
    main()
