"""Public package surface for cder.

Exports ``main`` for programmatic CLI invocation and ``register_extension``
for embedding the picker in another host.
"""

from __future__ import annotations


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)


def register_extension(*args, **kwargs):
    """Lazily import the extension registration helper."""
    from .picker import register_extension as _register_extension

    return _register_extension(*args, **kwargs)


__all__ = ["main", "register_extension"]
