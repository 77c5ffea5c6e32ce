"""
Service de metadonnees des titres.

Fait le lien entre le fournisseur de metadonnees (TMDB) et les fichiers
annexes d'un repertoire de titre:
- Recherche et recuperation des details pour le workflow d'import
- Ecriture de poster.<ext>, description.txt, genre.txt et title.txt
  (uniquement les fichiers absents)
- Association d'un identifiant TMDB a un titre existant (tmdb.txt)
"""

from pathlib import Path
from typing import Optional

import httpx
from loguru import logger

from shelf.adapters.api.retry import RateLimitError
from shelf.core.entities.catalog import MediaKind, Title
from shelf.core.ports.metadata_provider import IMetadataProvider, MediaDetails, SearchResult
from shelf.utils.constants import (
    DESCRIPTION_FILENAME,
    GENRE_FILENAME,
    GENRE_SEPARATOR,
    POSTER_BASENAME,
    POSTER_EXTENSIONS,
    TITLE_FILENAME,
    TMDB_ID_FILENAME,
)
from shelf.utils.helpers import write_sidecar

# Erreurs du fournisseur converties en MetadataUnavailableError
_PROVIDER_ERRORS = (httpx.HTTPError, RateLimitError)


class MetadataUnavailableError(Exception):
    """Fournisseur non configure, injoignable ou identifiant inconnu."""


class UnknownExternalIdError(MetadataUnavailableError):
    """Le fournisseur ne connait pas cet identifiant pour ce type de titre."""


class MetadataService:
    """
    Service d'acces aux metadonnees et d'ecriture des fichiers annexes.

    Le fournisseur est optionnel : sans cle API, toutes les operations
    qui l'interrogent levent MetadataUnavailableError.
    """

    def __init__(self, provider: Optional[IMetadataProvider] = None) -> None:
        self._provider = provider

    @property
    def enabled(self) -> bool:
        return self._provider is not None

    def _require_provider(self) -> IMetadataProvider:
        if self._provider is None:
            raise MetadataUnavailableError("Aucune cle API TMDB configuree")
        return self._provider

    async def search(
        self, query: str, kind: MediaKind, year: Optional[int] = None
    ) -> list[SearchResult]:
        """
        Recherche des titres chez le fournisseur.

        Raises:
            MetadataUnavailableError: Si le fournisseur est absent ou en erreur
        """
        provider = self._require_provider()
        try:
            return await provider.search(query, kind, year=year)
        except _PROVIDER_ERRORS as e:
            raise MetadataUnavailableError(f"Recherche TMDB impossible: {e}") from e

    async def get_details(self, external_id: str, kind: MediaKind) -> MediaDetails:
        """
        Recupere les details d'un titre.

        Raises:
            MetadataUnavailableError: Si le fournisseur est absent, en erreur
                ou si l'identifiant est inconnu
        """
        provider = self._require_provider()
        try:
            details = await provider.get_details(external_id, kind)
        except _PROVIDER_ERRORS as e:
            raise MetadataUnavailableError(f"Details TMDB indisponibles pour {external_id}: {e}") from e
        if details is None:
            raise UnknownExternalIdError(f"Identifiant TMDB inconnu: {external_id}")
        return details

    async def fetch_and_save(self, title_dir: Path, kind: MediaKind, external_id: str) -> list[str]:
        """
        Ecrit les fichiers annexes manquants d'un repertoire de titre.

        Rien n'est demande au fournisseur si les quatre fichiers existent.
        Un echec d'ecriture individuel est journalise sans interrompre
        les autres.

        Args:
            title_dir: Repertoire du titre
            kind: Film ou serie
            external_id: Identifiant TMDB

        Returns:
            Noms des fichiers ecrits

        Raises:
            MetadataUnavailableError: Si les details ne peuvent pas etre recuperes
        """
        poster_exists = any(
            (title_dir / f"{POSTER_BASENAME}{ext}").exists() for ext in POSTER_EXTENSIONS
        )
        missing_texts = [
            name
            for name in (DESCRIPTION_FILENAME, GENRE_FILENAME, TITLE_FILENAME)
            if not (title_dir / name).exists()
        ]
        if poster_exists and not missing_texts:
            logger.debug(f"Metadonnees deja presentes dans {title_dir}")
            return []

        details = await self.get_details(external_id, kind)
        written: list[str] = []

        if not poster_exists:
            if not details.poster_path:
                logger.warning(f"Pas d'affiche disponible pour {details.title}")
            else:
                try:
                    poster = await self._require_provider().download_poster(
                        details.poster_path, title_dir
                    )
                    written.append(poster.name)
                except _PROVIDER_ERRORS + (OSError,) as e:
                    logger.warning(f"Echec du telechargement de l'affiche de {details.title}: {e}")

        contents = {
            DESCRIPTION_FILENAME: details.overview or "",
            GENRE_FILENAME: GENRE_SEPARATOR.join(details.genres),
            TITLE_FILENAME: details.title,
        }
        for name in missing_texts:
            if not contents[name]:
                logger.warning(f"{name} : aucune donnee disponible pour {details.title}")
                continue
            try:
                write_sidecar(title_dir / name, contents[name])
                written.append(name)
            except OSError as e:
                logger.warning(f"Echec de l'ecriture de {title_dir / name}: {e}")

        logger.info(f"Metadonnees enregistrees dans {title_dir}: {', '.join(written) or 'aucune'}")
        return written

    async def assign_external_id(
        self, title: Title, external_id: str, download: bool = False
    ) -> MediaDetails:
        """
        Associe un identifiant TMDB a un titre existant du catalogue.

        L'identifiant est valide aupres du fournisseur pour le type du titre,
        puis tmdb.txt est ecrit (en ecrasant l'existant).

        Args:
            title: Titre du catalogue
            external_id: Identifiant TMDB
            download: Recuperer aussi les fichiers annexes manquants

        Returns:
            Details du titre chez le fournisseur

        Raises:
            ValueError: Si l'identifiant est vide
            MetadataUnavailableError: Si l'identifiant ne peut pas etre valide
            OSError: Si tmdb.txt ne peut pas etre ecrit
        """
        external_id = external_id.strip()
        if not external_id:
            raise ValueError("L'identifiant TMDB ne peut pas etre vide")
        if not title.path.is_dir():
            raise FileNotFoundError(f"Repertoire du titre introuvable: {title.path}")

        details = await self.get_details(external_id, title.kind)
        write_sidecar(title.path / TMDB_ID_FILENAME, external_id)
        logger.info(f"Identifiant TMDB {external_id} associe a {title.path}")

        if download:
            await self.fetch_and_save(title.path, title.kind, external_id)
        return details
