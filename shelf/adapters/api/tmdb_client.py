"""
Client TMDB pour la recherche et la recuperation de metadonnees.

Implemente l'interface IMetadataProvider pour TMDB (The Movie Database),
films (/movie) et series (/tv). Utilise le cache persistant et le
mecanisme de retry pour gerer le rate limiting.

Usage:
    cache = APICache()
    client = TMDBClient(api_key="your_key", cache=cache)
    results = await client.search("Breaking Bad", MediaKind.SERIES)
    details = await client.get_details("1396", MediaKind.SERIES)
    await client.close()
"""

from pathlib import Path, PurePosixPath
from typing import Any, Optional

import httpx
from loguru import logger

from shelf.adapters.api.cache import APICache
from shelf.adapters.api.retry import request_with_retry
from shelf.core.entities.catalog import MediaKind
from shelf.core.ports.metadata_provider import IMetadataProvider, MediaDetails, SearchResult
from shelf.utils.constants import POSTER_BASENAME, SEARCH_RESULTS_LIMIT


def _year_from_date(date: Optional[str]) -> Optional[int]:
    """Extrait l'annee d'une date TMDB (YYYY-MM-DD), None si absente."""
    if date and len(date) >= 4 and date[:4].isdigit():
        return int(date[:4])
    return None


class TMDBClient(IMetadataProvider):
    """
    Client API TMDB pour les films et les series.

    Implemente IMetadataProvider avec:
    - Recherche par titre (filtre annee optionnel pour les films)
    - Recuperation des details (titre, annee, genres, resume, affiche)
    - Telechargement de l'affiche
    - Cache persistant (24h recherches, 7j details)
    - Retry automatique sur rate limiting (429)

    Attributes:
        TMDB_BASE_URL: URL de base de l'API TMDB v3
        TMDB_IMAGE_BASE_URL: URL de base des images (taille originale)
    """

    TMDB_BASE_URL = "https://api.themoviedb.org/3"
    TMDB_IMAGE_BASE_URL = "https://image.tmdb.org/t/p/original"

    # Segment d'URL par type de titre
    _ENDPOINTS = {MediaKind.FILM: "movie", MediaKind.SERIES: "tv"}

    def __init__(self, api_key: str, cache: APICache, language: Optional[str] = None) -> None:
        """
        Initialise le client TMDB.

        Args:
            api_key: Cle API v3 ou Read Access Token v4
            cache: Instance APICache pour le caching des resultats
            language: Langue des resultats (ex: "fr-FR"), defaut TMDB si None
        """
        self._api_key = api_key
        self._cache = cache
        self._language = language
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        """
        Retourne le client HTTP, le cree si necessaire (lazy init).

        Cle v3 (32 caracteres) en parametre api_key, token v4 en header Bearer.
        """
        if self._client is None or self._client.is_closed:
            headers = {"Accept": "application/json"}
            params = {}
            if len(self._api_key) > 40:
                headers["Authorization"] = f"Bearer {self._api_key}"
            else:
                params["api_key"] = self._api_key

            self._client = httpx.AsyncClient(
                base_url=self.TMDB_BASE_URL,
                headers=headers,
                params=params,
                timeout=30.0,
            )
        return self._client

    def _params(self, **params: Any) -> dict[str, Any]:
        if self._language:
            params["language"] = self._language
        return params

    @property
    def source(self) -> str:
        """Retourne l'identifiant de la source API."""
        return "tmdb"

    async def search(
        self,
        query: str,
        kind: MediaKind,
        year: Optional[int] = None,
    ) -> list[SearchResult]:
        """
        Recherche des films (/search/movie) ou des series (/search/tv).

        Pattern cache-first. Au plus 20 resultats sont retournes.

        Args:
            query: Titre recherche
            kind: Film ou serie
            year: Annee de sortie (films uniquement)

        Returns:
            Liste de SearchResult (vide si aucun resultat ou requete vide)
        """
        query = query.strip()
        if not query:
            return []

        endpoint = self._ENDPOINTS[kind]
        if kind is not MediaKind.FILM:
            year = None
        cache_key = APICache.make_key(self.source, "search", endpoint, query, year or "")

        cached = await self._cache.get(cache_key)
        if cached is not None:
            logger.debug(f"Cache TMDB: {cache_key}")
            return cached

        params = self._params(query=query)
        if year:
            params["year"] = year
        response = await request_with_retry(
            self._get_client(), "GET", f"/search/{endpoint}", params=params
        )
        data = response.json()

        results = [
            self._parse_search_item(item, kind)
            for item in data.get("results", [])[:SEARCH_RESULTS_LIMIT]
        ]
        await self._cache.set_search(cache_key, results)
        return results

    def _parse_search_item(self, item: dict, kind: MediaKind) -> SearchResult:
        if kind is MediaKind.FILM:
            title, original, date = item.get("title"), item.get("original_title"), item.get("release_date")
        else:
            title, original, date = item.get("name"), item.get("original_name"), item.get("first_air_date")
        title = title or original or ""
        return SearchResult(
            id=str(item["id"]),
            title=title,
            original_title=original if original and original != title else None,
            year=_year_from_date(date),
            overview=item.get("overview") or None,
            source=self.source,
        )

    async def get_details(self, external_id: str, kind: MediaKind) -> Optional[MediaDetails]:
        """
        Recupere les details d'un film (/movie/{id}) ou d'une serie (/tv/{id}).

        Pattern cache-first, details caches 7 jours.

        Returns:
            MediaDetails, ou None si l'identifiant est inconnu (404)
        """
        endpoint = self._ENDPOINTS[kind]
        cache_key = APICache.make_key(self.source, "details", endpoint, external_id)

        cached = await self._cache.get(cache_key)
        if cached is not None:
            logger.debug(f"Cache TMDB: {cache_key}")
            return cached

        try:
            response = await request_with_retry(
                self._get_client(), "GET", f"/{endpoint}/{external_id}", params=self._params()
            )
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                return None
            raise

        data = response.json()
        if kind is MediaKind.FILM:
            title, original, date = data.get("title"), data.get("original_title"), data.get("release_date")
        else:
            title, original, date = data.get("name"), data.get("original_name"), data.get("first_air_date")

        details = MediaDetails(
            id=str(data["id"]),
            title=title or original or "",
            original_title=original,
            year=_year_from_date(date),
            genres=tuple(genre["name"] for genre in data.get("genres", []) if genre.get("name")),
            overview=data.get("overview") or None,
            poster_path=data.get("poster_path") or None,
        )
        await self._cache.set_details(cache_key, details)
        return details

    async def download_poster(self, poster_path: str, dest_dir: Path) -> Path:
        """
        Telecharge une affiche dans dest_dir/poster.<ext>.

        L'extension vient du chemin TMDB (".jpg" par defaut). L'image est
        demandee sans la cle API, sur le CDN d'images.

        Raises:
            httpx.HTTPError: Si le telechargement echoue
            OSError: Si le fichier ne peut pas etre ecrit
        """
        relative = poster_path.lstrip("/")
        extension = PurePosixPath(relative).suffix or ".jpg"
        destination = dest_dir / f"{POSTER_BASENAME}{extension}"

        async with httpx.AsyncClient(timeout=30.0, follow_redirects=True) as client:
            response = await request_with_retry(
                client, "GET", f"{self.TMDB_IMAGE_BASE_URL}/{relative}"
            )
        destination.write_bytes(response.content)
        logger.info(f"Affiche telechargee: {destination}")
        return destination

    async def close(self) -> None:
        """Ferme le client HTTP."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
