"""
Adaptateur pour les operations sur le systeme de fichiers.

Implementation concrete de IArchiveFileSystem sur le systeme de fichiers
reel : listing des repertoires, mesure des tailles, detection du format
d'un disque et renommage atomique.
"""

import os
import stat
from pathlib import Path
from typing import Optional

from shelf.core.entities.catalog import DiskFormat
from shelf.core.ports.file_system import IArchiveFileSystem
from shelf.utils.constants import BLURAY_MARKER_DIR, DVD_MARKER_DIR


def _raise_walk_error(error: OSError) -> None:
    raise error


class FileSystemAdapter(IArchiveFileSystem):
    """
    Implementation de IArchiveFileSystem pour le systeme de fichiers reel.
    """

    def exists(self, path: Path) -> bool:
        """Verifie si un chemin existe."""
        return path.exists()

    def is_directory(self, path: Path) -> bool:
        """Verifie si un chemin est un repertoire."""
        return path.is_dir()

    def list_subdirectories(self, path: Path) -> list[Path]:
        """
        Liste les sous-repertoires immediats, tries par nom.

        Le tri rend le resultat deterministe quel que soit l'ordre
        renvoye par le systeme de fichiers.
        """
        with os.scandir(path) as entries:
            names = sorted(entry.name for entry in entries if entry.is_dir())
        return [path / name for name in names]

    def directory_size(self, path: Path) -> int:
        """
        Somme des tailles des fichiers reguliers sous `path`.

        Les liens symboliques ne sont pas suivis. Toute erreur de
        parcours est propagee.
        """
        if not path.is_dir():
            raise NotADirectoryError(f"not a directory: {path}")
        total = 0
        for dirpath, _dirnames, filenames in os.walk(path, onerror=_raise_walk_error):
            for filename in filenames:
                file_stat = os.lstat(os.path.join(dirpath, filename))
                if stat.S_ISREG(file_stat.st_mode):
                    total += file_stat.st_size
        return total

    def detect_disk_format(self, path: Path) -> Optional[DiskFormat]:
        """
        Devine le format d'un disque d'apres sa structure.

        Returns:
            BLURAY si un repertoire BDMV est present, DVD pour VIDEO_TS,
            None sinon. Le resultat n'est qu'une suggestion.
        """
        if (path / BLURAY_MARKER_DIR).is_dir():
            return DiskFormat.BLURAY
        if (path / DVD_MARKER_DIR).is_dir():
            return DiskFormat.DVD
        return None

    def make_directories(self, path: Path) -> None:
        """Cree un repertoire et ses parents."""
        path.mkdir(parents=True, exist_ok=True)

    def rename(self, source: Path, destination: Path) -> None:
        """
        Renomme un repertoire via os.rename.

        Aucune copie de secours n'est tentee en cas d'echec
        (ex: EXDEV entre deux volumes), l'erreur est propagee telle quelle.
        """
        os.rename(source, destination)
