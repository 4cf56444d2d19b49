# File: pgmodelgen/__main__.py
"""
pgmodelgen - Module entry point.

Allows running the generator directly via::

    python -m pgmodelgen --url postgres://... --table users
"""

from __future__ import annotations


def main() -> None:
    """Delegate to the CLI main function."""
    from pgmodelgen.cli import cli_main
    cli_main()


if __name__ == "__main__":
    main()
