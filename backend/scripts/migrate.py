#!/usr/bin/env python3
"""
Run alembic migrations against the configured database.

Usage:
  scripts/migrate.py upgrade [revision]     (default: head)
  scripts/migrate.py downgrade <revision>
  scripts/migrate.py current
  scripts/migrate.py revision -m "message" [--autogenerate]
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from alembic import command  # noqa: E402
from alembic.config import Config  # noqa: E402
from alembic.util.exc import CommandError  # noqa: E402
from sqlalchemy.exc import SQLAlchemyError  # noqa: E402

from app.config import Settings  # noqa: E402
from app.errors import ConfigurationError  # noqa: E402


def _alembic_config(settings: Settings) -> Config:
    cfg = Config(str(ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(ROOT / "alembic"))
    url = settings.sqlalchemy_url().render_as_string(hide_password=False)
    cfg.set_main_option("sqlalchemy.url", url.replace("%", "%%"))
    return cfg


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run database migrations")
    sub = parser.add_subparsers(dest="cmd", required=True)

    up = sub.add_parser("upgrade", help="Upgrade to a revision")
    up.add_argument("revision", nargs="?", default="head")

    down = sub.add_parser("downgrade", help="Downgrade to a revision")
    down.add_argument("revision")

    sub.add_parser("current", help="Show the current revision")

    rev = sub.add_parser("revision", help="Create a new revision")
    rev.add_argument("-m", "--message", required=True)
    rev.add_argument("--autogenerate", action="store_true")

    args = parser.parse_args(argv)

    try:
        cfg = _alembic_config(Settings())
        if args.cmd == "upgrade":
            command.upgrade(cfg, args.revision)
        elif args.cmd == "downgrade":
            command.downgrade(cfg, args.revision)
        elif args.cmd == "current":
            command.current(cfg, verbose=True)
        else:
            command.revision(cfg, message=args.message, autogenerate=args.autogenerate)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except (CommandError, SQLAlchemyError) as exc:
        print(f"Error: migration failed: {exc}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
