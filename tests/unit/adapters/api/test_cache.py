"""
Tests unitaires pour APICache.

Ces tests verifient:
- Stockage et recuperation de valeurs
- TTL differencies pour recherche (24h) et details (7j)
- Construction des cles
- Nettoyage du cache
"""

import asyncio
from pathlib import Path

import pytest

from shelf.adapters.api.cache import APICache
from shelf.core.ports.metadata_provider import SearchResult


class TestAPICache:
    @pytest.fixture
    def cache(self, tmp_path: Path) -> APICache:
        """Cree un cache avec un repertoire temporaire."""
        cache = APICache(cache_dir=tmp_path / "test_cache")
        yield cache
        cache.close()

    @pytest.mark.asyncio
    async def test_get_returns_none_for_missing_key(self, cache: APICache) -> None:
        assert await cache.get("nonexistent_key") is None

    @pytest.mark.asyncio
    async def test_set_and_get(self, cache: APICache) -> None:
        await cache.set("key", {"title": "Heat", "year": 1995}, ttl=3600)
        assert await cache.get("key") == {"title": "Heat", "year": 1995}

    @pytest.mark.asyncio
    async def test_stores_dataclasses(self, cache: APICache) -> None:
        results = [SearchResult(id="603", title="The Matrix", year=1999, source="tmdb")]
        await cache.set_search("tmdb:search:movie:matrix:", results)
        assert await cache.get("tmdb:search:movie:matrix:") == results

    @pytest.mark.asyncio
    async def test_set_details(self, cache: APICache) -> None:
        await cache.set_details("tmdb:details:tv:1396", {"id": 1396})
        assert await cache.get("tmdb:details:tv:1396") == {"id": 1396}

    @pytest.mark.asyncio
    async def test_expired_entry(self, cache: APICache) -> None:
        await cache.set("short", "value", ttl=-1)
        assert await cache.get("short") is None

    @pytest.mark.asyncio
    async def test_clear(self, cache: APICache) -> None:
        await cache.set("a", 1, ttl=3600)
        await cache.clear()
        assert await cache.get("a") is None

    def test_ttls(self) -> None:
        assert APICache.SEARCH_TTL == 86400
        assert APICache.DETAILS_TTL == 604800

    def test_make_key(self) -> None:
        assert APICache.make_key("tmdb", "search", "movie", "The Matrix", 1999) == "tmdb:search:movie:the matrix:1999"

    def test_persists_between_instances(self, tmp_path: Path) -> None:
        first = APICache(cache_dir=tmp_path / "c")
        asyncio.run(first.set("k", "v", ttl=3600))
        first.close()

        second = APICache(cache_dir=tmp_path / "c")
        try:
            assert asyncio.run(second.get("k")) == "v"
        finally:
            second.close()
