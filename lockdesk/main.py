"""Console entry point for lockdesk."""
from __future__ import annotations

from lockdesk.cli.app import app


def main() -> None:
    """Run the ``lockdesk`` command line interface."""

    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation
    main()
