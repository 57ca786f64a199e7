from __future__ import annotations

import pytest

from app.cache import RedisCacheStore
from app.errors import CacheError
from app.tests.stubs import FakeRedis


def test_set_uses_default_ttl() -> None:
    client = FakeRedis()
    cache = RedisCacheStore(client, default_ttl_sec=5)

    cache.set("greeting", {"text": "hi"})

    assert client.data["greeting"] == '{"text":"hi"}'
    assert cache.ttl("greeting") == 5
    assert cache.get("greeting") == {"text": "hi"}


def test_zero_or_invalid_ttl_means_no_expiry() -> None:
    client = FakeRedis()
    cache = RedisCacheStore(client, default_ttl_sec=5)

    cache.set("a", 1, ttl_sec=0)
    cache.set("b", 2, ttl_sec=-3)

    assert cache.ttl("a") == -1
    assert cache.ttl("b") == -1
    assert cache.ttl("missing") == -2


def test_get_missing_and_undecodable() -> None:
    client = FakeRedis()
    client.data["broken"] = "{not json"
    cache = RedisCacheStore(client)

    assert cache.get("missing") is None
    assert cache.get("broken") is None


def test_prefix_scopes_keys_and_reset() -> None:
    client = FakeRedis()
    client.data["other:keep"] = '"x"'
    cache = RedisCacheStore(client, default_ttl_sec=0, key_prefix="audit:")

    cache.set_many({"one": 1, "two": 2})

    assert sorted(cache.keys()) == ["one", "two"]
    assert cache.get_many(["one", "two", "three"]) == [1, 2, None]
    assert "audit:one" in client.data

    cache.reset()

    assert cache.keys() == []
    assert client.data == {"other:keep": '"x"'}


def test_reset_without_prefix_flushes_db() -> None:
    client = FakeRedis()
    client.data["anything"] = "1"

    RedisCacheStore(client).reset()

    assert client.data == {}


def test_delete() -> None:
    client = FakeRedis()
    cache = RedisCacheStore(client)
    cache.set("k", "v")

    cache.delete("k")

    assert cache.get("k") is None


def test_wrap_calls_loader_once() -> None:
    cache = RedisCacheStore(FakeRedis(), default_ttl_sec=60)
    calls: list[int] = []

    def load() -> dict[str, int]:
        calls.append(1)
        return {"n": len(calls)}

    assert cache.wrap("k", load) == {"n": 1}
    assert cache.wrap("k", load) == {"n": 1}
    assert len(calls) == 1
    assert cache.ttl("k") == 60


def test_errors_are_wrapped_and_ping_reports_false() -> None:
    cache = RedisCacheStore(FakeRedis(reachable=False))

    with pytest.raises(CacheError):
        cache.get("k")
    with pytest.raises(CacheError):
        cache.set("k", 1)
    assert cache.ping() is False


def test_prefix_glob_characters_stay_inside_namespace() -> None:
    client = FakeRedis()
    client.data["tenantX:outside"] = '"x"'
    client.data["tenant?:inside"] = '"y"'
    cache = RedisCacheStore(client, default_ttl_sec=0, key_prefix="tenant?:")

    assert cache.keys() == ["inside"]

    cache.reset()

    assert client.data == {"tenantX:outside": '"x"'}


def test_star_prefix_does_not_match_other_keys() -> None:
    client = FakeRedis()
    client.data["a:b:c"] = '"x"'
    cache = RedisCacheStore(client, default_ttl_sec=0, key_prefix="a*:")
    cache.set("k", 1)

    assert cache.keys() == ["k"]
    assert sorted(client.data) == ["a*:k", "a:b:c"]
