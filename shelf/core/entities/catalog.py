"""
Entités du catalogue : titres (films ou séries) et disques sauvegardés.

Un Title correspond a un repertoire de premier niveau de l'archive,
un Disk a l'un de ses sous-repertoires. Ces entites sont reconstruites
a chaque scan et ne sont jamais modifiees ensuite.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional

from shelf.utils.constants import (
    DESCRIPTION_FILENAME,
    GENRE_FILENAME,
    POSTER_BASENAME,
    POSTER_EXTENSIONS,
)
from shelf.utils.helpers import format_size_gb, read_sidecar, slugify


class MediaKind(str, Enum):
    """Type de titre : film ou série. La valeur sert de sélecteur de formulaire."""

    FILM = "film"
    SERIES = "tv"

    @property
    def tag(self) -> str:
        """Etiquette entre crochets dans le nom de repertoire du titre."""
        return "Film" if self is MediaKind.FILM else "TV"


class DiskFormat(str, Enum):
    """
    Format physique d'un disque.

    Les trois premiers membres forment le vocabulaire fixe. CUSTOM
    indique un texte libre saisi par l'operateur, porte a cote du format.
    """

    BLURAY = "bluray"
    BLURAY_UHD = "bluray_uhd"
    DVD = "dvd"
    CUSTOM = "custom"

    @property
    def label(self) -> str:
        """Libelle canonique ecrit entre crochets (vide pour CUSTOM)."""
        return _DISK_FORMAT_LABELS[self]


_DISK_FORMAT_LABELS = {
    DiskFormat.BLURAY: "Blu-Ray",
    DiskFormat.BLURAY_UHD: "Blu-Ray UHD",
    DiskFormat.DVD: "DVD",
    DiskFormat.CUSTOM: "",
}


@dataclass
class Disk:
    """
    Un disque physique sauvegardé, appartenant à un titre.

    Attributs :
        name : Nom affiché dérivé ("Disk 2" ou "Series 1 Disk 2")
        format : Texte du format tel qu'entre crochets dans le nom du repertoire
        size_bytes : Taille en octets (0 si la mesure a echoue)
        path : Chemin absolu du repertoire du disque
        series_number : Numéro de saison (séries uniquement)
        disk_number : Ordinal du disque
    """

    name: str
    format: str
    size_bytes: int
    path: Path
    series_number: Optional[int] = None
    disk_number: int = 1

    @property
    def size_gb(self) -> float:
        return format_size_gb(self.size_bytes)

    def _full_path(self, prefix: str) -> str:
        return f"{prefix}{self.path}" if prefix else str(self.path)

    def play_command(self, prefix: str = "") -> str:
        """
        Commande VLC pour lire le disque.

        Le protocole depend du format : bluray:// pour les Blu-Ray,
        dvd:// pour les DVD, file:// sinon.
        """
        format_lower = self.format.lower()
        if "blu-ray" in format_lower or "bluray" in format_lower:
            protocol = "bluray://"
        elif "dvd" in format_lower:
            protocol = "dvd://"
        else:
            protocol = "file://"
        return f'vlc "{protocol}{self._full_path(prefix)}"'

    def mpv_play_command(self, prefix: str = "") -> str:
        """Commande mpv pour lire le disque."""
        full_path = self._full_path(prefix)
        format_lower = self.format.lower()
        if "blu-ray" in format_lower or "bluray" in format_lower:
            return f'mpv bd:// --bluray-device="{full_path}"'
        if "dvd" in format_lower:
            return f'mpv dvd:// --dvd-device="{full_path}"'
        return f'mpv "{full_path}"'


@dataclass
class Title:
    """
    Une entrée du catalogue : un film ou une série complète.

    Attributs :
        title : Titre affiché (title.txt s'il existe, sinon le nom du repertoire)
        kind : Film ou série
        path : Chemin absolu du repertoire du titre
        year : Année (films uniquement, 0 pour les séries)
        external_id : Identifiant TMDB lu dans tmdb.txt
        disks : Disques dans l'ordre du listing du repertoire
    """

    title: str
    kind: MediaKind
    path: Path
    year: int = 0
    external_id: Optional[str] = None
    disks: list[Disk] = field(default_factory=list)

    @property
    def slug(self) -> str:
        """Identifiant URL, l'annee n'est ajoutee que pour les films."""
        return slugify(self.title, self.year if self.kind is MediaKind.FILM else None)

    @property
    def display_title(self) -> str:
        if self.kind is MediaKind.FILM and self.year > 0:
            return f"{self.title} ({self.year})"
        return self.title

    @property
    def disk_count(self) -> int:
        return len(self.disks)

    @property
    def total_size_bytes(self) -> int:
        return sum(disk.size_bytes for disk in self.disks)

    def find_poster(self) -> Optional[Path]:
        """Retourne le chemin de l'affiche (poster.jpg, .jpeg, .png, .webp) ou None."""
        for ext in POSTER_EXTENSIONS:
            poster = self.path / f"{POSTER_BASENAME}{ext}"
            if poster.is_file():
                return poster
        return None

    def load_description(self) -> str:
        """Contenu de description.txt, chaine vide si absent."""
        return read_sidecar(self.path / DESCRIPTION_FILENAME) or ""

    def load_genres(self) -> list[str]:
        """Genres lus dans genre.txt (separes par des virgules)."""
        text = read_sidecar(self.path / GENRE_FILENAME)
        if not text:
            return []
        return [genre.strip() for genre in text.split(",")]


def sort_titles(titles: Iterable[Title]) -> list[Title]:
    """Trie les titres : films d'abord, puis ordre alphabetique du titre."""
    return sorted(titles, key=lambda t: (t.kind is not MediaKind.FILM, t.title))


def titles_of_kind(titles: Iterable[Title], kind: MediaKind) -> list[Title]:
    """Filtre les titres d'un type donne (choix d'un titre existant a l'import)."""
    return [t for t in titles if t.kind is kind]


def find_title_by_slug(titles: Iterable[Title], slug: str) -> Optional[Title]:
    """Retourne le premier titre dont le slug correspond, ou None."""
    for title in titles:
        if title.slug == slug:
            return title
    return None
