"""Entry point for `python -m rspamd_client`."""

from __future__ import annotations

from .cli import app


def main() -> None:
    """Run the command-line interface."""
    app(prog_name="rspamd-client")


if __name__ == "__main__":  # pragma: no cover - module execution guard
    main()
