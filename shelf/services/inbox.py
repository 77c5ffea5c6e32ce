"""
Service de scan du dossier d'import.

Liste les sauvegardes brutes deposees dans le dossier d'import,
candidates a l'import dans le catalogue.
"""

from pathlib import Path
from typing import Optional

from loguru import logger

from shelf.core.entities.import_session import ImportSource
from shelf.core.ports.file_system import IArchiveFileSystem


class InboxError(Exception):
    """Dossier d'import absent, non configure ou source introuvable."""


class InboxScanner:
    """
    Scanner du dossier d'import.

    Chaque sous-repertoire immediat est une source importable ; sa taille
    est mesuree immediatement (0 si la mesure echoue).
    """

    def __init__(self, file_system: IArchiveFileSystem, import_dir: Optional[Path]) -> None:
        self._file_system = file_system
        self._import_dir = import_dir

    @property
    def import_dir(self) -> Optional[Path]:
        return self._import_dir

    def _require_import_dir(self) -> Path:
        if self._import_dir is None:
            raise InboxError("Aucun dossier d'import configure")
        if not self._file_system.is_directory(self._import_dir):
            raise InboxError(f"Le dossier d'import n'existe pas: {self._import_dir}")
        return self._import_dir

    def scan(self) -> list[ImportSource]:
        """
        Liste les sources importables, triees par nom.

        Raises:
            InboxError: Si le dossier d'import est absent ou illisible
        """
        import_dir = self._require_import_dir()
        try:
            subdirs = self._file_system.list_subdirectories(import_dir)
        except OSError as e:
            raise InboxError(f"Impossible de lire le dossier d'import: {e}") from e
        return [self._build_source(path) for path in subdirs]

    def find(self, name: str) -> ImportSource:
        """
        Retourne la source portant ce nom.

        Le nom doit designer un sous-repertoire immediat du dossier d'import.

        Raises:
            InboxError: Si le nom est invalide ou la source introuvable
        """
        import_dir = self._require_import_dir()
        if not name or name in (".", "..") or "/" in name or "\\" in name:
            raise InboxError(f"Nom de source invalide: {name!r}")
        path = import_dir / name
        if not self._file_system.is_directory(path):
            raise InboxError(f"Source introuvable dans le dossier d'import: {name}")
        return self._build_source(path)

    def _build_source(self, path: Path) -> ImportSource:
        try:
            size = self._file_system.directory_size(path)
        except OSError as e:
            logger.warning(f"Impossible de mesurer la source {path}: {e}")
            size = 0
        return ImportSource(name=path.name, path=path, size_bytes=size)
