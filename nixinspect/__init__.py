"""Public package surface for nix-inspect.

Exports ``main`` for programmatic CLI invocation.
The browser itself lives in submodules under ``nixinspect``.
"""

from __future__ import annotations


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)

__all__ = ["main"]
