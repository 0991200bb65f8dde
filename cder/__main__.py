"""Module entrypoint for ``python -m cder``.

All argument parsing and host setup happen in ``cder.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
