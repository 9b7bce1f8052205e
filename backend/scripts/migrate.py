"""Migration helper script

Usage:
    python scripts/migrate.py upgrade
    python scripts/migrate.py downgrade -1
    python scripts/migrate.py current

Wraps Alembic's command API so deployments can migrate the account store
without an alembic.ini or the alembic CLI.
"""

from __future__ import annotations

import sys
from pathlib import Path

from alembic import command
from alembic.config import Config

ROOT = Path(__file__).resolve().parents[1]


def _get_config() -> Config:
    cfg = Config()
    cfg.set_main_option("script_location", str(ROOT / "alembic"))
    return cfg


def upgrade(rev: str = "head") -> None:
    command.upgrade(_get_config(), rev)


def downgrade(rev: str = "-1") -> None:
    command.downgrade(_get_config(), rev)


def current() -> None:
    command.current(_get_config(), verbose=True)


def main(argv: list[str] | None = None) -> None:
    argv = argv or sys.argv[1:]
    if len(argv) < 1:
        print("Usage: python scripts/migrate.py <upgrade|downgrade|current> [revision]")
        sys.exit(2)

    op = argv[0]
    rev = argv[1] if len(argv) > 1 else None

    if op == "upgrade":
        upgrade(rev or "head")
    elif op == "downgrade":
        downgrade(rev or "-1")
    elif op == "current":
        current()
    else:
        print("Unknown operation. Use 'upgrade', 'downgrade' or 'current'")
        sys.exit(2)


if __name__ == "__main__":
    main()
