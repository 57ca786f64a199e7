from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from redis.exceptions import RedisError
from starlette.concurrency import run_in_threadpool

from app.api import router
from app.cache import RedisCacheStore, build_redis
from app.config import Settings, get_settings
from app.db import build_engine, connect_with_retry, make_session_factory, synchronize_schema
from app.errors import ConfigurationError
from app.logging_config import configure_logging

logger = logging.getLogger(__name__)


def _register_database(app: FastAPI, settings: Settings) -> None:
    missing = settings.missing_postgres_vars()
    if missing:
        raise ConfigurationError(missing)

    engine = build_engine(settings)
    app.state.engine = engine
    connect_with_retry(
        engine,
        retries=settings.db_connect_retries,
        delay_sec=settings.db_connect_retry_delay_sec,
    )
    if settings.db_synchronize:
        synchronize_schema(engine)

    app.state.session_factory = make_session_factory(engine)


def _register_cache(app: FastAPI, settings: Settings) -> None:
    client = build_redis(settings)
    app.state.redis = client
    app.state.cache = RedisCacheStore.from_settings(client, settings)

    # redis-py connects lazily and reconnects on its own; an unreachable
    # endpoint here must not abort startup
    try:
        client.ping()
    except RedisError as exc:
        logger.warning("cache store not reachable at startup url=%s: %s", settings.redis_url, exc)
    else:
        logger.info("cache store connected url=%s", settings.redis_url)


def _release(app: FastAPI) -> None:
    client = getattr(app.state, "redis", None)
    if client is not None:
        try:
            client.close()
        except RedisError as exc:
            logger.warning("failed to close redis client: %s", exc)
    engine = getattr(app.state, "engine", None)
    if engine is not None:
        engine.dispose()
    for name in ("engine", "session_factory", "redis", "cache"):
        setattr(app.state, name, None)


def create_app(settings: Settings | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        cfg = settings or get_settings()
        configure_logging(cfg.log_level)
        logger.info("starting app_env=%s database=%s", cfg.app_env, cfg.safe_database_url())

        try:
            # connection retries and the redis ping block; keep them off the event loop
            await run_in_threadpool(_register_database, app, cfg)
            await run_in_threadpool(_register_cache, app, cfg)
        except Exception:
            await run_in_threadpool(_release, app)
            raise
        try:
            yield
        finally:
            await run_in_threadpool(_release, app)
            logger.info("shutdown complete")

    app = FastAPI(title="Audit Logger App", version="0.1.0", lifespan=lifespan)
    if settings is not None:
        app.dependency_overrides[get_settings] = lambda: settings

    app.include_router(router)
    return app


app = create_app()
