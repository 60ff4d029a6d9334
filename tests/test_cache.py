"""
Unit tests for app/utils/cache.py
"""

import json
from unittest.mock import MagicMock

from app.utils.cache import CacheService, LocalCache


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def _local_cache():
    clock = FakeClock()
    return CacheService(local=LocalCache(clock=clock)), clock


class TestLocalCache:

    def test_round_trip(self):
        cache, _ = _local_cache()
        value = {"topic": "Photosynthesis", "questions": [{"answerIndex": 1, "options": ["a", "b"]}]}

        cache.set("quiz:Medium:photosynthesis", value, 3600)

        assert cache.get("quiz:Medium:photosynthesis") == value

    def test_expires_after_ttl(self):
        cache, clock = _local_cache()
        cache.set("k", "v", 10)

        clock.now += 9
        assert cache.get("k") == "v"

        clock.now += 1
        assert cache.get("k") is None
        assert cache.local._entries == {}

    def test_missing_key(self):
        cache, _ = _local_cache()
        assert cache.get("nope") is None

    def test_delete(self):
        cache, _ = _local_cache()
        cache.set("k", [1, 2], 60)
        cache.delete("k")
        assert cache.get("k") is None

    def test_returned_value_is_a_copy(self):
        cache, _ = _local_cache()
        value = {"items": [1]}
        cache.set("k", value, 60)

        value["items"].append(2)
        cache.get("k")["items"].append(3)

        assert cache.get("k") == {"items": [1]}


class TestRedisBackend:

    def test_get_and_set_use_prefixed_keys(self):
        redis_client = MagicMock()
        redis_client.get.return_value = json.dumps({"a": 1})
        cache = CacheService(redis_client=redis_client)

        cache.set("k", {"a": 1}, 30)
        assert cache.get("k") == {"a": 1}

        redis_client.setex.assert_called_once_with("quizgen:k", 30, json.dumps({"a": 1}))
        redis_client.get.assert_called_once_with("quizgen:k")

    def test_failures_fall_back_to_local_store(self):
        redis_client = MagicMock()
        redis_client.get.side_effect = ConnectionError("down")
        redis_client.setex.side_effect = ConnectionError("down")
        redis_client.delete.side_effect = ConnectionError("down")
        cache = CacheService(redis_client=redis_client, local=LocalCache(clock=FakeClock()))

        cache.set("k", "v", 60)
        assert cache.get("k") == "v"

        cache.delete("k")
        assert cache.get("k") is None
