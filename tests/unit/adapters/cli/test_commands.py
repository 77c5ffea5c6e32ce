"""
Tests unitaires pour les commandes CLI.

Tests couvrant:
- version / info
- scan: affichage du catalogue, archive absente
- inbox: listing du dossier d'import
- play: commandes de lecture d'un titre
- import: import guide complet en mode hors ligne
- metadata / set-id: sans cle TMDB configuree
"""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from shelf import main as shelf_main
from shelf.main import app

runner = CliRunner()


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def cli_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, archive: Path, inbox_dir: Path) -> dict:
    """Configure l'environnement SHELF_* vers des repertoires temporaires."""
    env = {
        "SHELF_MEDIA_DIR": str(archive),
        "SHELF_IMPORT_DIR": str(inbox_dir),
        "SHELF_TMDB_API_KEY": "",
        "SHELF_API_CACHE_DIR": str(tmp_path / "cache"),
        "SHELF_LOG_FILE": str(tmp_path / "logs" / "shelf.log"),
        "SHELF_LOG_LEVEL": "ERROR",
        "SHELF_PLAY_URL_PREFIX": "",
    }
    for name, value in env.items():
        monkeypatch.setenv(name, value)
    # La configuration du container principal est un singleton
    shelf_main.container.config.reset()
    yield env
    shelf_main.container.config.reset()


@pytest.fixture
def heat(archive: Path, make_disk) -> Path:
    title_dir = archive / "Heat (1995) [Film]"
    make_disk(title_dir / "Disk [Blu-Ray]", {"BDMV/index.bdmv": 100})
    make_disk(title_dir / "Disk [DVD]", {"VIDEO_TS/VTS_01_1.VOB": 50})
    return title_dir


# ============================================================================
# Commandes simples
# ============================================================================


class TestVersionAndInfo:
    def test_version(self, cli_env):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "Shelf v0.1.0" in result.output

    def test_info(self, cli_env, archive: Path):
        result = runner.invoke(app, ["info"])
        assert result.exit_code == 0
        assert str(archive) in result.output
        assert "désactivée" in result.output


class TestScan:
    def test_scan_lists_titles(self, cli_env, heat: Path):
        result = runner.invoke(app, ["scan"])

        assert result.exit_code == 0
        assert "Heat (1995)" in result.output
        assert "heat-1995" in result.output
        assert (heat / "sizes.json").exists()

    def test_scan_empty_archive(self, cli_env):
        result = runner.invoke(app, ["scan"])
        assert result.exit_code == 0
        assert "Aucun titre" in result.output

    def test_scan_missing_archive(self, cli_env, monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
        monkeypatch.setenv("SHELF_MEDIA_DIR", str(tmp_path / "missing"))
        shelf_main.container.config.reset()

        result = runner.invoke(app, ["scan"])

        assert result.exit_code == 1
        assert "Erreur" in result.output


class TestInbox:
    def test_inbox_lists_sources(self, cli_env, inbox_dir: Path, make_disk):
        make_disk(inbox_dir / "RAW_DISC_01", {"BDMV/index.bdmv": 10})

        result = runner.invoke(app, ["inbox"])

        assert result.exit_code == 0
        assert "RAW_DISC_01" in result.output
        assert "Blu-Ray" in result.output

    def test_inbox_empty(self, cli_env):
        result = runner.invoke(app, ["inbox"])
        assert result.exit_code == 0
        assert "vide" in result.output

    def test_inbox_not_configured(self, cli_env, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("SHELF_IMPORT_DIR", "")
        result = runner.invoke(app, ["inbox"])
        assert result.exit_code == 1


class TestPlay:
    def test_play_vlc(self, cli_env, heat: Path):
        result = runner.invoke(app, ["play", "heat-1995"])

        assert result.exit_code == 0
        assert f'vlc "bluray://{heat / "Disk [Blu-Ray]"}"' in result.output
        assert f'vlc "dvd://{heat / "Disk [DVD]"}"' in result.output

    def test_play_mpv_with_prefix(self, cli_env, heat: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("SHELF_PLAY_URL_PREFIX", "smb://nas")

        result = runner.invoke(app, ["play", "heat-1995", "--player", "mpv"])

        assert result.exit_code == 0
        assert f'mpv dvd:// --dvd-device="smb://nas{heat / "Disk [DVD]"}"' in result.output

    def test_play_unknown_slug(self, cli_env, heat: Path):
        result = runner.invoke(app, ["play", "unknown"])
        assert result.exit_code == 1
        assert "introuvable" in result.output


# ============================================================================
# Import guide
# ============================================================================


class TestImport:
    def test_offline_film_import(self, cli_env, inbox_dir: Path, archive: Path, make_disk):
        raw = make_disk(inbox_dir / "RAW_DISC_01", {"BDMV/index.bdmv": 10})
        # type, titre, annee, id TMDB, format (detecte), placement, confirmation
        answers = "film\nTest Film\n2020\n\n\n\ny\n"

        result = runner.invoke(app, ["import", "RAW_DISC_01"], input=answers)

        assert result.exit_code == 0, result.output
        assert "Disque importe" in result.output
        assert (archive / "Test Film (2020) [Film]" / "Disk [Blu-Ray]" / "BDMV").is_dir()
        assert not raw.exists()

    def test_import_retries_invalid_year(self, cli_env, inbox_dir: Path, archive: Path, make_disk):
        make_disk(inbox_dir / "RAW", {"VIDEO_TS/VTS_01_1.VOB": 10})
        answers = "film\nOld Film\nabc\n\nOld Film\n1950\n\n\n\ny\n"

        result = runner.invoke(app, ["import", "RAW"], input=answers)

        assert result.exit_code == 0, result.output
        assert "year" in result.output
        assert (archive / "Old Film (1950) [Film]" / "Disk [DVD]").is_dir()

    def test_import_cancelled(self, cli_env, inbox_dir: Path, archive: Path, make_disk):
        raw = make_disk(inbox_dir / "RAW", {"BDMV/index.bdmv": 10})

        result = runner.invoke(app, ["import", "RAW"], input="film\nTest Film\n2020\n\n\n\nn\n")

        assert result.exit_code == 0
        assert "annule" in result.output
        assert raw.exists()
        assert list(archive.iterdir()) == []

    def test_import_existing_placement_with_missing_archive(
        self, cli_env, inbox_dir: Path, make_disk, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ):
        raw = make_disk(inbox_dir / "RAW", {"BDMV/index.bdmv": 10})
        monkeypatch.setenv("SHELF_MEDIA_DIR", str(tmp_path / "missing"))
        shelf_main.container.config.reset()

        result = runner.invoke(app, ["import", "RAW"], input="film\nTest Film\n2020\n\n\nexisting\n")

        assert result.exit_code == 1
        assert "Erreur" in result.output
        assert isinstance(result.exception, SystemExit)
        assert raw.exists()

    def test_import_unknown_source(self, cli_env):
        result = runner.invoke(app, ["import", "GONE"])
        assert result.exit_code == 1
        assert "introuvable" in result.output

    def test_import_conflict(self, cli_env, inbox_dir: Path, heat: Path, make_disk):
        raw = make_disk(inbox_dir / "RAW", {"BDMV/index.bdmv": 10})

        result = runner.invoke(app, ["import", "RAW"], input="film\nHeat\n1995\n\n\n\ny\n")

        assert result.exit_code == 1
        assert raw.exists()


# ============================================================================
# Metadonnees TMDB
# ============================================================================


class TestMetadataCommands:
    def test_metadata_requires_api_key(self, cli_env, heat: Path):
        result = runner.invoke(app, ["metadata"])
        assert result.exit_code == 1
        assert "SHELF_TMDB_API_KEY" in result.output

    def test_set_id_without_api_key(self, cli_env, heat: Path):
        result = runner.invoke(app, ["set-id", "heat-1995", "949"])
        assert result.exit_code == 1
        assert not (heat / "tmdb.txt").exists()
