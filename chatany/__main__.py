"""Module entrypoint for ``python -m chatany``.

All argument parsing and dispatch happen in ``chatany.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
