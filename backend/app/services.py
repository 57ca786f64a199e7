from __future__ import annotations

import logging

from fastapi import Depends
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from app.cache import RedisCacheStore
from app.db import check_connection
from app.deps import get_cache, get_engine
from app.errors import AppServiceError

logger = logging.getLogger(__name__)


class AppService:
    def __init__(self, engine: Engine, cache: RedisCacheStore):
        self.engine = engine
        self.cache = cache

    def get_hello(self) -> str:
        return "Hello World!"

    def health(self) -> dict[str, str]:
        try:
            check_connection(self.engine)
        except SQLAlchemyError as exc:
            logger.error("health check: database unavailable: %s", exc)
            raise AppServiceError(status_code=503, detail="db_unavailable") from exc

        if not self.cache.ping():
            logger.error("health check: redis unavailable")
            raise AppServiceError(status_code=503, detail="redis_unavailable")

        return {"status": "ok", "db": "ok", "redis": "ok"}


def get_app_service(
    engine: Engine = Depends(get_engine),
    cache: RedisCacheStore = Depends(get_cache),
) -> AppService:
    return AppService(engine, cache)
