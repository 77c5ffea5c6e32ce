"""
Codec des noms de repertoires de l'archive.

Ce module encode et decode les deux grammaires de nommage :

Repertoires de titres :
    Film :  Titre (Année) [Film]
    Série : Titre [TV]

Repertoires de disques :
    Film :  Disk [Format]
    Série : Series N Disk M [Format]

Le parsing accepte tout nom conforme a la grammaire, y compris les noms
crees a la main (ex: "Mission: Impossible (1996) [Film]"). Pour un nom
canonique, c'est-a-dire produit par build, build(parse(nom)) == nom.
"""

import re
from dataclasses import dataclass
from typing import Optional

from shelf.core.entities.catalog import MediaKind

_FILM_DIR_RE = re.compile(r"^(.+) \((\d{4})\) \[Film\]$")
_SERIES_DIR_RE = re.compile(r"^(.+) \[TV\]$")
_FILM_DISK_RE = re.compile(r"^Disk \[(.+)\]$")
_SERIES_DISK_RE = re.compile(r"^Series ([1-9]\d*) Disk ([1-9]\d*) \[(.+)\]$")

# Caracteres interdits ou ambigus sur les systemes de fichiers courants
_UNSAFE_CHARS = str.maketrans({
    ":": "_",
    "/": "_",
    "\\": "_",
    "<": "_",
    ">": "_",
    "|": "_",
    "?": "_",
    "*": "_",
    '"': "'",
})

_UNDERSCORE_RUN_RE = re.compile(r"_{2,}")


class NamingError(ValueError):
    """Composant invalide pour la construction d'un nom de repertoire."""


@dataclass(frozen=True)
class ParsedTitleName:
    """
    Resultat du decodage d'un nom de repertoire de titre.

    Attributs:
        title: Titre tel qu'ecrit dans le nom
        year: Annee (0 pour les series)
        kind: Film ou serie
    """

    title: str
    year: int
    kind: MediaKind


@dataclass(frozen=True)
class ParsedDiskName:
    """
    Resultat du decodage d'un nom de repertoire de disque.

    Attributs:
        format: Texte entre crochets, non revalide contre le vocabulaire
        series_number: Numero de saison (series uniquement)
        disk_number: Ordinal du disque (series uniquement, None pour un film)
    """

    format: str
    series_number: Optional[int] = None
    disk_number: Optional[int] = None


def sanitize_for_filesystem(text: str) -> str:
    """
    Nettoie un texte libre pour l'utiliser dans un nom de repertoire.

    Transformations appliquees, dans l'ordre :
    - : / \\ < > | ? * -> underscore
    - guillemet double -> apostrophe
    - suppression des caracteres de controle ASCII
    - suppression des espaces en bordure
    - toute suite d'underscores -> un seul underscore

    Args:
        text: Texte a nettoyer.

    Returns:
        Texte utilisable dans un nom de repertoire.
    """
    text = text.translate(_UNSAFE_CHARS)
    text = "".join(ch for ch in text if ord(ch) >= 32 and ord(ch) != 127)
    text = text.strip()
    return _UNDERSCORE_RUN_RE.sub("_", text)


def parse_film_directory_name(name: str) -> Optional[ParsedTitleName]:
    """Decode "Titre (Année) [Film]", None si le nom ne correspond pas."""
    match = _FILM_DIR_RE.match(name)
    if match is None:
        return None
    return ParsedTitleName(match.group(1), int(match.group(2)), MediaKind.FILM)


def parse_series_directory_name(name: str) -> Optional[ParsedTitleName]:
    """Decode "Titre [TV]", None si le nom ne correspond pas."""
    match = _SERIES_DIR_RE.match(name)
    if match is None:
        return None
    return ParsedTitleName(match.group(1), 0, MediaKind.SERIES)


def parse_title_directory_name(name: str) -> Optional[ParsedTitleName]:
    """
    Decode un nom de repertoire de titre.

    La grammaire film est essayee en premier, la grammaire serie
    uniquement si la premiere ne correspond pas.
    """
    return parse_film_directory_name(name) or parse_series_directory_name(name)


def parse_disk_directory_name(name: str, kind: MediaKind) -> Optional[ParsedDiskName]:
    """
    Decode un nom de repertoire de disque selon le type du titre parent.

    Args:
        name: Nom du sous-repertoire
        kind: Type du titre parent (determine la grammaire)

    Returns:
        ParsedDiskName, ou None si le nom ne suit pas la grammaire
    """
    if kind is MediaKind.FILM:
        match = _FILM_DISK_RE.match(name)
        if match is None:
            return None
        return ParsedDiskName(format=match.group(1))

    match = _SERIES_DISK_RE.match(name)
    if match is None:
        return None
    return ParsedDiskName(
        format=match.group(3),
        series_number=int(match.group(1)),
        disk_number=int(match.group(2)),
    )


def build_title_directory_name(title: str, year: int, kind: MediaKind) -> str:
    """
    Construit le nom du repertoire d'un titre.

    Raises:
        NamingError: Si le titre est vide apres nettoyage ou l'annee hors 0-9999
    """
    clean_title = sanitize_for_filesystem(title)
    if not clean_title:
        raise NamingError("title is empty")
    if kind is MediaKind.SERIES:
        return f"{clean_title} [TV]"
    if not 0 <= year <= 9999:
        raise NamingError(f"year out of range: {year}")
    return f"{clean_title} ({year:04d}) [Film]"


def build_disk_directory_name(
    format_text: str,
    series_number: Optional[int],
    disk_number: Optional[int],
    kind: MediaKind,
) -> str:
    """
    Construit le nom du repertoire d'un disque.

    Pour un film les numeros sont ignores : l'ordinal d'un disque de film
    vient de l'ordre du listing, pas de son nom.

    Raises:
        NamingError: Si le format est vide ou si un numero de serie est invalide
    """
    clean_format = sanitize_for_filesystem(format_text)
    if not clean_format:
        raise NamingError("format is empty")
    if kind is MediaKind.FILM:
        return f"Disk [{clean_format}]"
    if not series_number or series_number < 1:
        raise NamingError(f"invalid series number: {series_number}")
    if not disk_number or disk_number < 1:
        raise NamingError(f"invalid disk number: {disk_number}")
    return f"Series {series_number} Disk {disk_number} [{clean_format}]"


def disk_display_name(parsed: ParsedDiskName, position: int) -> str:
    """
    Nom affiche d'un disque.

    Film : "Disk <position>" (position dans le listing, a partir de 1).
    Serie : "Series N Disk M" lu dans le nom, jamais renumerote.
    """
    if parsed.series_number is None:
        return f"Disk {position}"
    return f"Series {parsed.series_number} Disk {parsed.disk_number}"
