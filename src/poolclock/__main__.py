"""Allow ``python -m poolclock`` as an alias for the ``poolclock`` console script."""

from .server.cli import main

if __name__ == "__main__":  # pragma: no cover
    main()
