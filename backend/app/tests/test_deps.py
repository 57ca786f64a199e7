from __future__ import annotations

import pytest
from fastapi import FastAPI
from sqlalchemy import create_engine
from starlette.requests import Request

from app import deps
from app.cache import RedisCacheStore
from app.config import Settings
from app.tests.stubs import FakeRedis


def _request(app: FastAPI) -> Request:
    return Request({"type": "http", "app": app, "headers": []})


@pytest.fixture
def fallback_clients(monkeypatch):
    built: dict[str, list[object]] = {"engine": [], "redis": []}

    def fake_engine(settings: Settings):
        engine = create_engine("sqlite://")
        built["engine"].append(engine)
        return engine

    def fake_redis(settings: Settings):
        client = FakeRedis()
        built["redis"].append(client)
        return client

    monkeypatch.setattr("app.deps.build_engine", fake_engine)
    monkeypatch.setattr("app.deps.build_redis", fake_redis)
    deps._default_engine.cache_clear()
    deps._default_redis.cache_clear()
    yield built
    deps._default_engine.cache_clear()
    deps._default_redis.cache_clear()


def test_providers_fall_back_to_cached_clients_without_bootstrap(fallback_clients) -> None:
    request = _request(FastAPI())

    engine = deps.get_engine(request)
    client = deps.get_redis(request)

    assert deps.get_engine(request) is engine
    assert deps.get_redis(request) is client
    assert fallback_clients["engine"] == [engine]
    assert fallback_clients["redis"] == [client]


def test_get_cache_builds_store_from_settings(fallback_clients) -> None:
    request = _request(FastAPI())
    settings = Settings(_env_file=None, CACHE_TTL_SEC=30, CACHE_KEY_PREFIX="audit:")
    client = deps.get_redis(request)

    cache = deps.get_cache(request, client=client, settings=settings)

    assert isinstance(cache, RedisCacheStore)
    assert cache.client is client
    assert cache.default_ttl_sec == 30
    assert cache.key_prefix == "audit:"


def test_providers_prefer_registered_state(fallback_clients) -> None:
    app = FastAPI()
    app.state.engine = create_engine("sqlite://")
    app.state.redis = FakeRedis()
    app.state.cache = RedisCacheStore(app.state.redis)
    request = _request(app)

    assert deps.get_engine(request) is app.state.engine
    assert deps.get_redis(request) is app.state.redis
    assert deps.get_cache(request, client=app.state.redis, settings=Settings(_env_file=None)) is app.state.cache
    assert fallback_clients == {"engine": [], "redis": []}
