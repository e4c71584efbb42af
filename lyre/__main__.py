"""Run the Lyre CLI with ``python -m lyre``."""

from .cli import main

if __name__ == "__main__":  # pragma: no cover
    main()
