import pytest

from src.services.cache_service import CacheService


class TestCacheService:
    def test_get_returns_value_before_ttl(self, cache_service, clock):
        cache_service.set("k", "v", ttl=0.1)
        clock.advance(0.05)

        assert cache_service.get("k") == "v"

    def test_get_misses_after_ttl(self, cache_service, clock):
        cache_service.set("k", "v", ttl=0.1)
        clock.advance(0.1)

        assert cache_service.get("k") is None
        assert cache_service.get_keys() == []

    def test_default_ttl_applies_when_not_given(self, cache_service, clock):
        cache_service.set("k", {"articles": []})
        clock.advance(299)
        assert cache_service.has("k")

        clock.advance(1)
        assert not cache_service.has("k")

    def test_set_overwrites_existing_entry(self, cache_service, clock):
        cache_service.set("k", "old", ttl=10)
        clock.advance(5)
        cache_service.set("k", "new", ttl=10)
        clock.advance(6)

        assert cache_service.get("k") == "new"

    def test_generate_key_is_order_independent(self):
        first = CacheService.generate_key("search", {"query": "ai", "lang": "en"})
        second = CacheService.generate_key("search", {"lang": "en", "query": "ai"})

        assert first == second == "search:lang:en|query:ai"

    def test_generate_key_repeatable(self):
        assert CacheService.generate_key("search", {"query": "ai"}) == CacheService.generate_key("search", {"query": "ai"})
        assert CacheService.generate_key("search", {"query": "ai"}) != CacheService.generate_key("search", {"query": "ml"})
        assert CacheService.generate_key("search") == "search:"

    def test_delete_and_clear(self, cache_service):
        cache_service.set("a", 1)
        cache_service.set("b", 2)

        assert cache_service.delete("a") is True
        assert cache_service.delete("a") is False

        cache_service.clear()
        assert cache_service.get("b") is None

    def test_stats_count_expired_entries_until_swept(self, cache_service, clock):
        cache_service.set("short", 1, ttl=1)
        cache_service.set("long", 2, ttl=100)
        clock.advance(5)

        assert cache_service.get_stats() == {"total": 2, "valid": 1, "expired": 1, "ttl": 300.0}

        removed = cache_service.clear_expired()

        assert removed == 1
        assert cache_service.get_stats() == {"total": 1, "valid": 1, "expired": 0, "ttl": 300.0}
        assert cache_service.get_keys() == ["long"]

    def test_set_default_ttl(self, cache_service, clock):
        cache_service.set_default_ttl(10)
        cache_service.set("k", "v")
        clock.advance(10)

        assert cache_service.get("k") is None
        assert cache_service.get_stats()["ttl"] == 10

    @pytest.mark.parametrize("value", [0, "", [], False])
    def test_falsy_values_are_cached(self, cache_service, value):
        cache_service.set("k", value)

        assert cache_service.get("k") == value
        assert cache_service.has("k")
