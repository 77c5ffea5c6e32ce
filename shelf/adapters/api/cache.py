"""
Cache persistant des reponses TMDB.

Utilise diskcache pour conserver les reponses entre deux executions :
les recherches expirent apres 24 heures, les details apres 7 jours.
"""

import asyncio
from functools import partial
from pathlib import Path
from typing import Any, Optional, Union

from diskcache import Cache


class APICache:
    """
    Cache asynchrone a duree de vie limitee.

    Les operations diskcache (bloquantes) sont executees dans le pool
    de threads par defaut de la boucle asyncio.

    Example:
        cache = APICache(cache_dir=".cache/api")
        key = APICache.make_key("tmdb", "search", "movie", "inception")
        await cache.set_search(key, results)
        data = await cache.get(key)
    """

    SEARCH_TTL = 24 * 60 * 60
    DETAILS_TTL = 7 * 24 * 60 * 60

    def __init__(self, cache_dir: Union[str, Path] = ".cache/api") -> None:
        self._cache = Cache(cache_dir)

    @staticmethod
    def make_key(*parts: object) -> str:
        """Construit une cle "a:b:c" ; les chaines sont mises en minuscules."""
        return ":".join(str(part).lower() for part in parts)

    async def _run(self, func, *args, **kwargs) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(func, *args, **kwargs))

    async def get(self, key: str) -> Optional[Any]:
        """Valeur en cache, ou None si absente ou expiree."""
        return await self._run(self._cache.get, key)

    async def set(self, key: str, value: Any, ttl: int) -> None:
        await self._run(self._cache.set, key, value, expire=ttl)

    async def set_search(self, key: str, value: Any) -> None:
        """Stocke un resultat de recherche (24h)."""
        await self.set(key, value, self.SEARCH_TTL)

    async def set_details(self, key: str, value: Any) -> None:
        """Stocke les details d'un titre (7 jours)."""
        await self.set(key, value, self.DETAILS_TTL)

    async def clear(self) -> None:
        await self._run(self._cache.clear)

    def close(self) -> None:
        self._cache.close()
