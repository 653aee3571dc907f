"""Entrypoint for `python -m gridmenu`."""

from .cli import main


if __name__ == "__main__":
    main()
