"""Allow running the harness with ``python -m mcpt``."""

from mcpt.cli import main

if __name__ == "__main__":  # pragma: no cover
    main()
