"""
Configuration du logging de l'application via loguru.

Fournit un logging structuré avec :
- Sortie console : lisible par l'humain, colorée
- Sortie fichier : sérialisée en JSON, avec rotation

Les messages émis pendant une session d'import portent son identifiant
(extra["session"], via logger.contextualize) : la console l'affiche entre
crochets, le fichier JSON le conserve dans record.extra.
"""

import sys
from pathlib import Path

from loguru import logger

_CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>{session} | "
    "<level>{message}</level>\n{exception}"
)


def _console_format(record) -> str:
    session = record["extra"].get("session")
    return _CONSOLE_FORMAT.replace("{session}", f" <magenta>[{session}]</magenta>" if session else "")


def configure_logging(
    log_level: str = "INFO",
    log_file: Path = Path("logs/shelf.log"),
    rotation_size: str = "10 MB",
    retention_count: int = 5,
) -> None:
    """Configure le logging de l'application.

    Args :
        log_level : Niveau minimum pour la console (DEBUG, INFO, WARNING, ERROR)
        log_file : Chemin vers le fichier de log
        rotation_size : Taille maximale du fichier avant rotation (ex: "10 MB")
        retention_count : Nombre de fichiers rotatifs à conserver
    """
    logger.remove()

    logger.add(
        sys.stderr,
        level=log_level,
        format=_console_format,
        colorize=True,
    )

    # Fichier JSON : tous les niveaux, y compris les hits du cache des tailles
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_file,
        level="DEBUG",
        format="{message}",
        serialize=True,
        rotation=rotation_size,
        retention=retention_count,
        compression="zip",
        enqueue=True,
    )

    logger.debug("Logging configuré", log_file=str(log_file), rotation=rotation_size)
