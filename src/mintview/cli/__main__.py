"""CLI entry point for mintview.cli module.

Enables execution via: python -m mintview.cli
"""

from mintview.cli.main import main

if __name__ == "__main__":
    raise SystemExit(main())
