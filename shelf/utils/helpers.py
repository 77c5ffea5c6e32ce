"""
Fonctions utilitaires partagees dans le projet Shelf.

Ce module centralise les fonctions reutilisees a travers le codebase :
- slugify : identifiant URL deterministe d'un titre
- read_sidecar / write_sidecar : lecture et ecriture des fichiers annexes
- format_size_gb : conversion octets -> gigaoctets pour l'affichage
"""

import re
from pathlib import Path
from typing import Optional

from shelf.utils.constants import BYTES_PER_GB

_SLUG_SEPARATOR_RE = re.compile(r"[^a-z0-9]+")


def slugify(title: str, year: Optional[int] = None) -> str:
    """
    Genere un slug a partir d'un titre.

    Le titre est mis en minuscules, chaque sequence de caracteres non
    alphanumeriques devient un tiret unique, puis les tirets en bordure
    sont retires. L'annee est ajoutee en suffixe si elle est positive.

    Args:
        title: Titre affiche
        year: Annee (films uniquement), ignoree si None ou <= 0

    Returns:
        Slug, ex: "war-of-the-worlds-2025"
    """
    slug = _SLUG_SEPARATOR_RE.sub("-", title.lower()).strip("-")
    if year and year > 0:
        slug = f"{slug}-{year}"
    return slug


def read_sidecar(path: Path) -> Optional[str]:
    """
    Lit un fichier annexe texte et retourne son contenu sans espaces de bordure.

    Retourne None si le fichier est absent ou illisible.
    """
    try:
        return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError):
        return None


def write_sidecar(path: Path, content: str) -> None:
    """Ecrit un fichier annexe texte (UTF-8). Leve OSError en cas d'echec."""
    path.write_text(content, encoding="utf-8")


def format_size_gb(size_bytes: int) -> float:
    """Convertit une taille en octets vers des gigaoctets (base 1024)."""
    return size_bytes / BYTES_PER_GB
