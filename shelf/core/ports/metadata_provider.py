"""
Interface port pour le fournisseur de métadonnées.

Interface abstraite (port) définissant le contrat de recherche et de
récupération des métadonnées d'un titre (TMDB pour les films et séries).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from shelf.core.entities.catalog import MediaKind


@dataclass
class SearchResult:
    """
    Résultat de recherche depuis le fournisseur.

    Attributs :
        id : Identifiant chez le fournisseur (ID TMDB)
        title : Titre localisé
        original_title : Titre en langue originale (si différent)
        year : Année de sortie ou de première diffusion
        overview : Résumé
        source : Identifiant du fournisseur ("tmdb")
    """

    id: str
    title: str
    original_title: Optional[str] = None
    year: Optional[int] = None
    overview: Optional[str] = None
    source: str = ""


@dataclass
class MediaDetails:
    """
    Informations détaillées d'un titre.

    Attributs :
        id : Identifiant chez le fournisseur
        title : Titre officiel
        original_title : Titre en langue originale
        year : Année de sortie ou de première diffusion
        genres : Noms des genres
        overview : Résumé
        poster_path : Chemin relatif de l'affiche chez le fournisseur
    """

    id: str
    title: str
    original_title: Optional[str] = None
    year: Optional[int] = None
    genres: tuple[str, ...] = ()
    overview: Optional[str] = None
    poster_path: Optional[str] = None


class IMetadataProvider(ABC):
    """
    Interface des fournisseurs de métadonnées.

    Le type du titre (film ou série) sélectionne l'API interrogée.
    """

    @abstractmethod
    async def search(
        self,
        query: str,
        kind: MediaKind,
        year: Optional[int] = None,
    ) -> list[SearchResult]:
        """
        Recherche des titres.

        Args :
            query : Titre recherché
            kind : Film ou série
            year : Filtre optionnel par année (films uniquement)

        Retourne :
            Liste des résultats, vide si aucun
        """
        ...

    @abstractmethod
    async def get_details(self, external_id: str, kind: MediaKind) -> Optional[MediaDetails]:
        """
        Récupère les détails d'un titre.

        Retourne :
            MediaDetails, ou None si l'identifiant est inconnu
        """
        ...

    @abstractmethod
    async def download_poster(self, poster_path: str, dest_dir: Path) -> Path:
        """
        Télécharge l'affiche dans dest_dir sous le nom poster.<ext>.

        Retourne :
            Chemin du fichier écrit
        """
        ...

    @property
    @abstractmethod
    def source(self) -> str:
        """Retourne l'identifiant du fournisseur (ex: 'tmdb')."""
        ...
