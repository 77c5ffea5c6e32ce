"""
Service de scan du catalogue.

Parcourt la racine de l'archive et reconstruit les titres (films et
series) et leurs disques a partir des noms de repertoires, du cache
des tailles et des fichiers annexes.
"""

from pathlib import Path

from loguru import logger

from shelf.adapters.size_cache import SizeCache
from shelf.core.entities.catalog import Disk, MediaKind, Title
from shelf.core.ports.file_system import IArchiveFileSystem
from shelf.services.naming import (
    ParsedTitleName,
    disk_display_name,
    parse_disk_directory_name,
    parse_title_directory_name,
)
from shelf.utils.constants import TITLE_FILENAME, TMDB_ID_FILENAME
from shelf.utils.helpers import read_sidecar


class CatalogError(Exception):
    """Racine de l'archive absente ou illisible : le scan est abandonne."""


class CatalogScanner:
    """
    Service reconstruisant le catalogue depuis l'arborescence de l'archive.

    Coordonne:
    - Le systeme de fichiers (IArchiveFileSystem) pour lister et mesurer
    - Le cache des tailles (SizeCache) pour eviter de re-parcourir les disques
    - Le codec de nommage pour classer chaque repertoire

    Utilisation:
        scanner = CatalogScanner(file_system, size_cache)
        titles = scanner.scan(Path("/media/backup"))
    """

    def __init__(self, file_system: IArchiveFileSystem, size_cache: SizeCache) -> None:
        self._file_system = file_system
        self._size_cache = size_cache

    def scan(self, root: Path) -> list[Title]:
        """
        Scanne la racine de l'archive.

        Les repertoires dont le nom ne suit aucune grammaire sont ignores
        silencieusement, les fichiers de premier niveau aussi.

        Args:
            root: Racine de l'archive

        Returns:
            Titres dans l'ordre du listing (trie par nom)

        Raises:
            CatalogError: Si la racine n'existe pas ou n'est pas un repertoire
        """
        if not self._file_system.exists(root):
            raise CatalogError(f"Le repertoire de l'archive n'existe pas: {root}")
        if not self._file_system.is_directory(root):
            raise CatalogError(f"La racine de l'archive n'est pas un repertoire: {root}")

        try:
            entries = self._file_system.list_subdirectories(root)
        except OSError as e:
            raise CatalogError(f"Impossible de lire l'archive {root}: {e}") from e

        titles = []
        for entry in entries:
            parsed = parse_title_directory_name(entry.name)
            if parsed is None:
                continue
            titles.append(self.scan_title(entry, parsed))

        self._warn_slug_collisions(titles)
        logger.info(f"Catalogue scanne: {len(titles)} titres dans {root}")
        return titles

    def scan_title(self, title_dir: Path, parsed: ParsedTitleName) -> Title:
        """
        Construit un Title depuis son repertoire.

        title.txt, s'il est present et non vide, remplace le titre du nom
        de repertoire. L'annee vient toujours du nom du repertoire.
        """
        official_title = read_sidecar(title_dir / TITLE_FILENAME)
        external_id = read_sidecar(title_dir / TMDB_ID_FILENAME)

        return Title(
            title=official_title or parsed.title,
            kind=parsed.kind,
            path=title_dir,
            year=parsed.year,
            external_id=external_id or None,
            disks=self._scan_disks(title_dir, parsed.kind),
        )

    def _scan_disks(self, title_dir: Path, kind: MediaKind) -> list[Disk]:
        try:
            subdirs = self._file_system.list_subdirectories(title_dir)
        except OSError as e:
            logger.warning(f"Impossible de lister les disques de {title_dir}: {e}")
            return []

        sizes = self._size_cache.load(title_dir)
        dirty = False
        disks: list[Disk] = []

        for subdir in subdirs:
            parsed = parse_disk_directory_name(subdir.name, kind)
            if parsed is None:
                continue

            size = sizes.get(subdir.name)
            if size is None:
                try:
                    size = self._file_system.directory_size(subdir)
                except OSError as e:
                    # Taille 0 non mise en cache : nouvelle tentative au prochain scan
                    logger.warning(f"Impossible de mesurer {subdir}: {e}")
                    size = 0
                else:
                    logger.debug(f"Taille mesuree pour {subdir}: {size} octets")
                    sizes[subdir.name] = size
                    dirty = True

            disks.append(
                Disk(
                    name=disk_display_name(parsed, len(disks) + 1),
                    format=parsed.format,
                    size_bytes=size,
                    path=subdir,
                    series_number=parsed.series_number,
                    disk_number=parsed.disk_number or len(disks) + 1,
                )
            )

        if dirty and not self._size_cache.save(title_dir, sizes):
            logger.warning(f"Echec de l'ecriture du cache des tailles dans {title_dir}")

        return disks

    def _warn_slug_collisions(self, titles: list[Title]) -> None:
        """Signale les titres partageant un slug ; le premier du listing l'emporte."""
        seen: dict[str, Title] = {}
        for title in titles:
            first = seen.setdefault(title.slug, title)
            if first is not title:
                logger.warning(
                    f"Slug '{title.slug}' partage par {first.path} et {title.path}, "
                    f"seul le premier est accessible"
                )
