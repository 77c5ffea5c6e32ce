"""
Configuration de l'application via pydantic-settings.

La configuration est chargée depuis les variables d'environnement avec le préfixe SHELF_,
et peut optionnellement être fournie via un fichier .env.

Le dossier d'import et la clé API TMDB sont optionnels : l'import guidé et la
récupération des métadonnées sont désactivés s'ils ne sont pas fournis.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Fichier .env à la racine du projet (parent de shelf/)
_PROJECT_ROOT = Path(__file__).parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Paramètres de l'application avec support des variables d'environnement.

    Tous les paramètres peuvent être surchargés via des variables d'environnement
    avec le préfixe SHELF_.
    Exemple : SHELF_MEDIA_DIR=/mnt/backup

    Les chemins sont automatiquement étendus (~ -> répertoire home).
    """

    model_config = SettingsConfigDict(
        env_prefix="SHELF_",
        env_file=_ENV_FILE if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Racine de l'archive et dossier d'import (OPTIONNEL)
    media_dir: Path = Field(default=Path("~/Media/backup"))
    import_dir: Optional[Path] = Field(default=None)

    # TMDB (OPTIONNEL - métadonnées désactivées si non défini)
    tmdb_api_key: Optional[str] = Field(default=None)
    tmdb_language: Optional[str] = Field(default=None)
    api_cache_dir: Path = Field(default=Path(".cache/api"))

    # Préfixe ajouté aux chemins dans les commandes de lecture (ex: montage réseau)
    play_url_prefix: str = Field(default="")

    # Logging (fichier + stderr, rotation 10MB, 5 fichiers de rétention)
    log_level: str = Field(default="INFO")
    log_file: Path = Field(default=Path("logs/shelf.log"))
    log_rotation_size: str = Field(default="10 MB")
    log_retention_count: int = Field(default=5, ge=1)

    @field_validator("media_dir", "import_dir", "api_cache_dir", "log_file", mode="before")
    @classmethod
    def expand_path(cls, v: Optional[str | Path]) -> Optional[Path]:
        """Étend ~ vers le répertoire home dans les chemins (vide -> None)."""
        if v is None or v == "":
            return None
        return Path(v).expanduser()

    @property
    def tmdb_enabled(self) -> bool:
        """Vérifie si l'API TMDB est configurée."""
        return bool(self.tmdb_api_key)

    @property
    def import_enabled(self) -> bool:
        """Vérifie si un dossier d'import est configuré."""
        return self.import_dir is not None
