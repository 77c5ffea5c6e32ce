"""
Tests unitaires du CatalogScanner.

Tests couvrant:
- Classification des repertoires (film, serie, ignores)
- Construction des disques (noms affiches, ordinaux, formats)
- Cache des tailles : ecriture, reutilisation, cache perime ou corrompu
- Echecs de mesure et d'ecriture du cache
- Erreurs sur la racine de l'archive
- Fichiers annexes (title.txt, tmdb.txt)
"""

import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from shelf.adapters.file_system import FileSystemAdapter
from shelf.adapters.size_cache import SizeCache
from shelf.core.entities.catalog import MediaKind
from shelf.services.scanner import CatalogError, CatalogScanner


class CountingFileSystem(FileSystemAdapter):
    """FileSystemAdapter comptant les mesures de taille."""

    def __init__(self) -> None:
        self.measured: list[Path] = []

    def directory_size(self, path: Path) -> int:
        self.measured.append(path)
        return super().directory_size(path)


class FailingSizeFileSystem(FileSystemAdapter):
    """FileSystemAdapter dont la mesure echoue pour les disques nommes."""

    def __init__(self, failing: set[str]) -> None:
        self._failing = failing

    def directory_size(self, path: Path) -> int:
        if path.name in self._failing:
            raise PermissionError(f"denied: {path}")
        return super().directory_size(path)


@pytest.fixture
def populated_archive(archive: Path, make_disk) -> Path:
    """Archive avec un film a deux disques, une serie, et des entrees ignorees."""
    film = archive / "Heat (1995) [Film]"
    make_disk(film / "Disk [Blu-Ray]", {"BDMV/index.bdmv": 300})
    make_disk(film / "Disk [DVD]", {"VIDEO_TS/VTS_01_1.VOB": 200})
    (film / "extras").mkdir()

    series = archive / "Better Call Saul [TV]"
    make_disk(series / "Series 1 Disk 2 [DVD]", {"VIDEO_TS/VTS_01_1.VOB": 20})
    make_disk(series / "Series 1 Disk 1 [DVD]", {"VIDEO_TS/VTS_01_1.VOB": 10})
    make_disk(series / "Disk [DVD]", {"a.bin": 1})

    (archive / "@eaDir").mkdir()
    (archive / "Not A Title").mkdir()
    (archive / "notes.txt").write_text("ignored")
    return archive


class TestCatalogScan:
    """Tests du scan de l'archive."""

    def test_classifies_titles(self, scanner: CatalogScanner, populated_archive: Path):
        titles = scanner.scan(populated_archive)

        assert [(t.title, t.kind, t.year) for t in titles] == [
            ("Better Call Saul", MediaKind.SERIES, 0),
            ("Heat", MediaKind.FILM, 1995),
        ]

    def test_film_disks(self, scanner: CatalogScanner, populated_archive: Path):
        heat = next(t for t in scanner.scan(populated_archive) if t.kind is MediaKind.FILM)

        assert [(d.name, d.format, d.size_bytes, d.disk_number) for d in heat.disks] == [
            ("Disk 1", "Blu-Ray", 300, 1),
            ("Disk 2", "DVD", 200, 2),
        ]
        assert heat.disks[0].series_number is None
        assert heat.total_size_bytes == 500
        assert heat.slug == "heat-1995"

    def test_series_disks_keep_their_numbers(self, scanner: CatalogScanner, populated_archive: Path):
        saul = next(t for t in scanner.scan(populated_archive) if t.kind is MediaKind.SERIES)

        assert [(d.name, d.series_number, d.disk_number, d.size_bytes) for d in saul.disks] == [
            ("Series 1 Disk 1", 1, 1, 10),
            ("Series 1 Disk 2", 1, 2, 20),
        ]
        assert saul.slug == "better-call-saul"

    def test_empty_archive(self, scanner: CatalogScanner, archive: Path):
        assert scanner.scan(archive) == []

    def test_title_without_disks(self, scanner: CatalogScanner, archive: Path):
        (archive / "Empty (2001) [Film]").mkdir()
        titles = scanner.scan(archive)
        assert len(titles) == 1
        assert titles[0].disks == []
        assert not (archive / "Empty (2001) [Film]" / "sizes.json").exists()

    def test_sidecars(self, scanner: CatalogScanner, archive: Path, make_disk):
        title_dir = archive / "Title_ Sub_Part (2001) [Film]"
        make_disk(title_dir / "Disk [DVD]", {"a": 1})
        (title_dir / "title.txt").write_text("Title: Sub/Part\n", encoding="utf-8")
        (title_dir / "tmdb.txt").write_text(" 603 \n", encoding="utf-8")

        (title,) = scanner.scan(archive)

        assert title.title == "Title: Sub/Part"
        assert title.year == 2001
        assert title.external_id == "603"
        assert title.slug == "title-sub-part-2001"

    def test_hand_named_titles_are_listed(self, scanner: CatalogScanner, archive: Path, make_disk):
        make_disk(archive / "Mission: Impossible (1996) [Film]" / "Disk [Blu-Ray]", {"a": 5})
        make_disk(archive / "Who? [TV]" / "Series 1 Disk 1 [DVD]", {"b": 7})

        titles = scanner.scan(archive)

        assert [t.title for t in titles] == ["Mission: Impossible", "Who?"]
        assert titles[0].disks[0].format == "Blu-Ray"
        assert titles[1].disks[0].size_bytes == 7
        assert [t.slug for t in titles] == ["mission-impossible-1996", "who"]

    def test_empty_sidecars_are_ignored(self, scanner: CatalogScanner, archive: Path):
        title_dir = archive / "Lost [TV]"
        title_dir.mkdir()
        (title_dir / "title.txt").write_text("  \n")
        (title_dir / "tmdb.txt").write_text("")

        (title,) = scanner.scan(archive)

        assert title.title == "Lost"
        assert title.external_id is None


class TestCatalogScanRootErrors:
    def test_missing_root(self, scanner: CatalogScanner, tmp_path: Path):
        with pytest.raises(CatalogError):
            scanner.scan(tmp_path / "missing")

    def test_root_is_a_file(self, scanner: CatalogScanner, tmp_path: Path):
        path = tmp_path / "file"
        path.write_text("x")
        with pytest.raises(CatalogError):
            scanner.scan(path)

    def test_unreadable_root(self, size_cache: SizeCache, archive: Path):
        file_system = MagicMock(spec=FileSystemAdapter)
        file_system.exists.return_value = True
        file_system.is_directory.return_value = True
        file_system.list_subdirectories.side_effect = PermissionError("denied")

        with pytest.raises(CatalogError):
            CatalogScanner(file_system, size_cache).scan(archive)


class TestSizeCacheIntegration:
    """Tests de l'utilisation du cache des tailles par le scanner."""

    def test_scan_writes_cache(self, scanner: CatalogScanner, populated_archive: Path):
        scanner.scan(populated_archive)

        cache_file = populated_archive / "Heat (1995) [Film]" / "sizes.json"
        assert json.loads(cache_file.read_text()) == {"Disk [Blu-Ray]": 300, "Disk [DVD]": 200}

    def test_rescan_is_idempotent_and_uses_cache(self, size_cache: SizeCache, populated_archive: Path):
        file_system = CountingFileSystem()
        scanner = CatalogScanner(file_system, size_cache)

        first = scanner.scan(populated_archive)
        measured_first = len(file_system.measured)
        cache_file = populated_archive / "Heat (1995) [Film]" / "sizes.json"
        mtime = cache_file.stat().st_mtime_ns

        second = scanner.scan(populated_archive)

        assert first == second
        assert measured_first == 4
        assert len(file_system.measured) == measured_first
        assert cache_file.stat().st_mtime_ns == mtime

    def test_cached_size_is_trusted(self, scanner: CatalogScanner, archive: Path, make_disk):
        """Une entree presente n'est jamais revalidee, meme perimee."""
        title_dir = archive / "Heat (1995) [Film]"
        make_disk(title_dir / "Disk [DVD]", {"a.bin": 100})
        (title_dir / "sizes.json").write_text('{"Disk [DVD]": 999}')

        (title,) = scanner.scan(archive)

        assert title.disks[0].size_bytes == 999

    def test_missing_entry_is_measured_and_added(self, scanner: CatalogScanner, archive: Path, make_disk):
        title_dir = archive / "Heat (1995) [Film]"
        make_disk(title_dir / "Disk [Blu-Ray]", {"a.bin": 100})
        make_disk(title_dir / "Disk [DVD]", {"a.bin": 50})
        (title_dir / "sizes.json").write_text('{"Disk [Blu-Ray]": 7, "Removed": 3}')

        (title,) = scanner.scan(archive)

        assert [d.size_bytes for d in title.disks] == [7, 50]
        assert json.loads((title_dir / "sizes.json").read_text()) == {
            "Disk [Blu-Ray]": 7,
            "Disk [DVD]": 50,
            "Removed": 3,
        }

    def test_corrupt_cache_is_rebuilt(self, scanner: CatalogScanner, archive: Path, make_disk):
        title_dir = archive / "Heat (1995) [Film]"
        make_disk(title_dir / "Disk [DVD]", {"a.bin": 100})
        (title_dir / "sizes.json").write_text("{corrupt")

        (title,) = scanner.scan(archive)

        assert title.disks[0].size_bytes == 100
        assert json.loads((title_dir / "sizes.json").read_text()) == {"Disk [DVD]": 100}

    def test_measure_failure_gives_zero_and_is_not_cached(
        self, size_cache: SizeCache, archive: Path, make_disk, log_messages
    ):
        title_dir = archive / "Heat (1995) [Film]"
        make_disk(title_dir / "Disk [Blu-Ray]", {"a.bin": 100})
        make_disk(title_dir / "Disk [DVD]", {"a.bin": 50})
        scanner = CatalogScanner(FailingSizeFileSystem({"Disk [DVD]"}), size_cache)

        (title,) = scanner.scan(archive)

        assert [d.size_bytes for d in title.disks] == [100, 0]
        assert json.loads((title_dir / "sizes.json").read_text()) == {"Disk [Blu-Ray]": 100}
        assert any("Disk [DVD]" in message for message in log_messages)

    def test_cache_write_failure_is_only_a_warning(
        self, file_system: FileSystemAdapter, archive: Path, make_disk, log_messages
    ):
        make_disk(archive / "Heat (1995) [Film]" / "Disk [DVD]", {"a.bin": 100})
        cache = MagicMock(spec=SizeCache)
        cache.load.return_value = {}
        cache.save.return_value = False

        (title,) = CatalogScanner(file_system, cache).scan(archive)

        assert title.disks[0].size_bytes == 100
        cache.save.assert_called_once()
        assert any("cache des tailles" in message for message in log_messages)

    def test_cache_not_saved_when_everything_cached(self, file_system: FileSystemAdapter, archive: Path, make_disk):
        make_disk(archive / "Heat (1995) [Film]" / "Disk [DVD]", {"a.bin": 100})
        cache = MagicMock(spec=SizeCache)
        cache.load.return_value = {"Disk [DVD]": 100}

        CatalogScanner(file_system, cache).scan(archive)

        cache.save.assert_not_called()


class TestSlugCollisions:
    def test_collision_logs_warning(self, scanner: CatalogScanner, archive: Path, log_messages):
        (archive / "Heat [TV]").mkdir()
        (archive / "Heat! [TV]").mkdir()

        titles = scanner.scan(archive)

        assert len(titles) == 2
        assert titles[0].slug == titles[1].slug == "heat"
        assert any("heat" in message and "partage" in message for message in log_messages)
