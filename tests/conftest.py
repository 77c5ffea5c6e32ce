"""
Fixtures pytest partagees pour les tests Shelf.

Ce module contient les fixtures communes utilisees dans les tests:
- Arborescences temporaires (archive, dossier d'import)
- Adaptateurs reels (FileSystemAdapter, SizeCache)
- Settings de test avec chemins temporaires
"""

from pathlib import Path
from typing import Callable

import pytest

from shelf.adapters.file_system import FileSystemAdapter
from shelf.adapters.size_cache import SizeCache
from shelf.config import Settings
from shelf.services.scanner import CatalogScanner


def _make_disk(path: Path, files: dict[str, int]) -> Path:
    """Cree un repertoire de disque contenant des fichiers de tailles donnees."""
    path.mkdir(parents=True, exist_ok=True)
    for relative, size in files.items():
        file_path = path / relative
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_bytes(b"\0" * size)
    return path


@pytest.fixture
def make_disk() -> Callable[[Path, dict[str, int]], Path]:
    """
    Fabrique de repertoires de disques.

    Usage:
        make_disk(archive / "Alien (1979) [Film]" / "Disk [DVD]", {"VIDEO_TS/VTS_01.VOB": 100})
    """
    return _make_disk


@pytest.fixture
def archive(tmp_path: Path) -> Path:
    """Racine d'archive vide."""
    root = tmp_path / "media"
    root.mkdir()
    return root


@pytest.fixture
def inbox_dir(tmp_path: Path) -> Path:
    """Dossier d'import vide."""
    root = tmp_path / "inbox"
    root.mkdir()
    return root


@pytest.fixture
def file_system() -> FileSystemAdapter:
    return FileSystemAdapter()


@pytest.fixture
def size_cache() -> SizeCache:
    return SizeCache()


@pytest.fixture
def scanner(file_system: FileSystemAdapter, size_cache: SizeCache) -> CatalogScanner:
    return CatalogScanner(file_system, size_cache)


@pytest.fixture
def test_settings(tmp_path: Path, archive: Path, inbox_dir: Path) -> Settings:
    """
    Settings de test avec chemins temporaires.

    _env_file=None pour ignorer un eventuel fichier .env local.
    """
    return Settings(
        _env_file=None,
        media_dir=archive,
        import_dir=inbox_dir,
        tmdb_api_key=None,
        api_cache_dir=tmp_path / "cache",
        log_file=tmp_path / "logs" / "test.log",
    )


@pytest.fixture
def log_messages():
    """
    Capture les messages loguru de niveau WARNING et plus.

    caplog ne voit pas les messages loguru : un sink temporaire est ajoute.
    """
    from loguru import logger

    messages: list[str] = []
    handler_id = logger.add(lambda message: messages.append(str(message)), level="WARNING")
    yield messages
    logger.remove(handler_id)
