# backend/app/deps.py
from __future__ import annotations

from functools import lru_cache
from typing import Iterator

import redis
from fastapi import Depends, Request
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from app.cache import RedisCacheStore, build_redis
from app.config import Settings, get_settings
from app.db import build_engine, make_session_factory, session_scope


@lru_cache
def _default_engine() -> Engine:
    return build_engine(get_settings())


@lru_cache
def _default_redis() -> redis.Redis:
    return build_redis(get_settings())


def get_engine(request: Request) -> Engine:
    engine = getattr(request.app.state, "engine", None)
    return engine if engine is not None else _default_engine()


def get_redis(request: Request) -> redis.Redis:
    client = getattr(request.app.state, "redis", None)
    return client if client is not None else _default_redis()


def get_cache(
    request: Request,
    client: redis.Redis = Depends(get_redis),
    settings: Settings = Depends(get_settings),
) -> RedisCacheStore:
    cache = getattr(request.app.state, "cache", None)
    if cache is not None:
        return cache
    return RedisCacheStore.from_settings(client, settings)


def get_db_session(request: Request, engine: Engine = Depends(get_engine)) -> Iterator[Session]:
    factory: sessionmaker[Session] | None = getattr(request.app.state, "session_factory", None)
    if factory is None:
        factory = make_session_factory(engine)
    yield from session_scope(factory)
