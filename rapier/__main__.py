# File: rapier/__main__.py
"""
Rapier — Module entry point.

Allows running the generator directly via::

    python -m rapier --schema telegram.yaml --output ./Sources

Delegates to ``rapier.cli.cli_main``.
"""

from __future__ import annotations


def main() -> None:
    """Delegate to the CLI main function."""
    from rapier.cli import cli_main
    cli_main()


if __name__ == "__main__":
    main()
