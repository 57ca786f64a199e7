#!/usr/bin/env python3
"""
Connectivity self-check for the backing services.

Checks:
1) Postgres: select 1
2) Redis: PING
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from redis.exceptions import RedisError  # noqa: E402
from sqlalchemy.exc import SQLAlchemyError  # noqa: E402

from app.cache import build_redis  # noqa: E402
from app.config import Settings  # noqa: E402
from app.db import build_engine, check_connection  # noqa: E402
from app.errors import ConfigurationError  # noqa: E402


def _check_postgres(settings: Settings) -> str | None:
    try:
        engine = build_engine(settings)
    except ConfigurationError as exc:
        return str(exc)
    try:
        check_connection(engine)
    except SQLAlchemyError as exc:
        return str(exc).splitlines()[0]
    finally:
        engine.dispose()
    return None


def _check_redis(settings: Settings) -> str | None:
    client = build_redis(settings)
    try:
        if client.ping() is not True:
            return "unexpected PING reply"
    except RedisError as exc:
        return str(exc)
    finally:
        client.close()
    return None


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Check connectivity to Postgres and Redis")
    parser.add_argument("--skip-redis", action="store_true", help="Only check Postgres")
    parser.add_argument("--skip-postgres", action="store_true", help="Only check Redis")
    args = parser.parse_args(argv)

    settings = Settings()
    failed = False

    if not args.skip_postgres:
        error = _check_postgres(settings)
        if error:
            print(f"Error: postgres {settings.safe_database_url()}: {error}", file=sys.stderr)
            failed = True
        else:
            print(f"OK postgres: {settings.safe_database_url()}")

    if not args.skip_redis:
        error = _check_redis(settings)
        if error:
            print(f"Error: redis {settings.redis_url}: {error}", file=sys.stderr)
            failed = True
        else:
            print(f"OK redis: {settings.redis_url}")

    return 2 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
