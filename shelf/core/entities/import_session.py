"""
Entités du workflow d'import d'une sauvegarde brute dans le catalogue.

Une ImportSession est un brouillon modifie etape par etape par
l'operateur, puis consomme par l'executeur d'import.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from pathlib import Path
from typing import Optional

from shelf.utils.helpers import format_size_gb

from .catalog import DiskFormat, MediaKind


class ImportStep(IntEnum):
    """Étapes du workflow d'import, dans l'ordre obligatoire."""

    SOURCE = 1
    KIND = 2
    IDENTITY = 3
    DISK = 4
    PLACEMENT = 5
    CONFIRM = 6


class Placement(str, Enum):
    """Destination du disque : nouveau titre ou titre existant du catalogue."""

    NEW = "new"
    EXISTING = "existing"


@dataclass
class ImportSource:
    """
    Repertoire brut present dans le dossier d'import.

    Attributs :
        name : Nom du repertoire
        path : Chemin absolu
        size_bytes : Taille mesuree a la selection (0 si la mesure a echoue)
    """

    name: str
    path: Path
    size_bytes: int = 0

    @property
    def size_gb(self) -> float:
        return format_size_gb(self.size_bytes)


@dataclass
class ProviderMetadata:
    """
    Identite officielle recuperee aupres du fournisseur de metadonnees.

    Attributs :
        external_id : Identifiant TMDB confirme
        title : Titre officiel
        year : Annee officielle (0 si inconnue)
        overview : Resume
        genres : Noms des genres
    """

    external_id: str
    title: str
    year: int = 0
    overview: Optional[str] = None
    genres: tuple[str, ...] = ()


@dataclass
class ImportSession:
    """
    Brouillon d'import d'un disque.

    `step` est la derniere etape completee. Revenir sur une etape anterieure
    reste possible, les valeurs courantes servant de pre-remplissage, mais
    les etapes suivantes (apercu compris) sont alors a refaire.
    """

    id: str
    source: ImportSource
    detected_format: Optional[DiskFormat] = None
    step: ImportStep = ImportStep.SOURCE

    kind: Optional[MediaKind] = None

    # Identite saisie manuellement
    title: str = ""
    year: int = 0
    external_id: Optional[str] = None

    # Surcharges du fournisseur de metadonnees (prioritaires si presentes)
    metadata: Optional[ProviderMetadata] = None

    # Details du disque
    series_number: int = 0
    disk_number: int = 1
    disk_format: Optional[DiskFormat] = None
    custom_format: str = ""

    # Placement
    placement: Placement = Placement.NEW
    existing_path: Optional[Path] = None

    @property
    def final_title(self) -> str:
        """Titre retenu : le titre officiel s'il a ete recupere, sinon la saisie."""
        if self.metadata is not None and self.metadata.title:
            return self.metadata.title
        return self.title

    @property
    def final_year(self) -> int:
        if self.metadata is not None and self.metadata.year > 0:
            return self.metadata.year
        return self.year

    @property
    def final_external_id(self) -> Optional[str]:
        if self.metadata is not None:
            return self.metadata.external_id
        return self.external_id

    @property
    def format_label(self) -> str:
        """Texte du format : saisie libre pour CUSTOM, libelle canonique sinon."""
        if self.disk_format is DiskFormat.CUSTOM:
            return self.custom_format
        if self.disk_format is None:
            return ""
        return self.disk_format.label

    @property
    def appends_to_existing(self) -> bool:
        return self.placement is Placement.EXISTING
