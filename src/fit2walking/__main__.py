"""Module entry point: python -m fit2walking ..."""

from fit2walking.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
