"""
Interface port pour le système de fichiers de l'archive.

Définit les opérations sur les repertoires dont ont besoin le scanner,
le scanner du dossier d'import et l'exécuteur d'import.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from shelf.core.entities.catalog import DiskFormat


class IArchiveFileSystem(ABC):
    """
    Interface pour les opérations sur les repertoires de l'archive.

    Contrairement aux méthodes booléennes habituelles, directory_size et
    rename propagent OSError : l'appelant décide de la dégradation
    (taille 0) ou du message d'erreur remonté tel quel.
    """

    @abstractmethod
    def exists(self, path: Path) -> bool:
        """Vérifie si un chemin existe."""
        ...

    @abstractmethod
    def is_directory(self, path: Path) -> bool:
        """Vérifie si un chemin est un repertoire."""
        ...

    @abstractmethod
    def list_subdirectories(self, path: Path) -> list[Path]:
        """
        Liste les sous-repertoires immédiats, triés par nom.

        Les entrées qui ne sont pas des repertoires sont ignorées.

        Raises :
            OSError : Si le repertoire ne peut pas être lu
        """
        ...

    @abstractmethod
    def directory_size(self, path: Path) -> int:
        """
        Somme des tailles des fichiers réguliers d'une arborescence.

        Raises :
            OSError : Si une partie de l'arborescence ne peut pas être parcourue
        """
        ...

    @abstractmethod
    def detect_disk_format(self, path: Path) -> Optional[DiskFormat]:
        """Devine le format d'un disque d'après sa structure (BDMV, VIDEO_TS)."""
        ...

    @abstractmethod
    def make_directories(self, path: Path) -> None:
        """Crée un repertoire et ses parents (sans erreur s'il existe)."""
        ...

    @abstractmethod
    def rename(self, source: Path, destination: Path) -> None:
        """
        Renomme atomiquement un repertoire, sans copie de secours.

        Raises :
            OSError : Si le renommage échoue (ex: déplacement entre volumes)
        """
        ...
