"""Module entrypoint for running audiodrama as ``python -m audiodrama``."""

from __future__ import annotations

from audiodrama.cli import main


if __name__ == "__main__":
    main()
