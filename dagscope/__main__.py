"""Module entry point: ``python -m dagscope``."""

from dagscope.cli import main

if __name__ == "__main__":
    main()
