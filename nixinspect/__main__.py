"""Module entrypoint for ``python -m nixinspect``.

Argument parsing and startup happen in ``nixinspect.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
