"""
Execution d'une session d'import : deplacement du disque dans l'archive.

Ce module calcule la destination d'une session complete via le codec
de nommage, puis effectue:
- La verification de conflit (le repertoire du disque ne doit pas exister)
- Le renommage atomique de la source (sans copie de secours)
- L'ecriture de tmdb.txt si absent (echec = simple avertissement)
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from loguru import logger

from shelf.core.entities.catalog import MediaKind
from shelf.core.entities.import_session import ImportSession
from shelf.core.ports.file_system import IArchiveFileSystem
from shelf.services.naming import (
    NamingError,
    build_disk_directory_name,
    build_title_directory_name,
)
from shelf.utils.constants import TMDB_ID_FILENAME
from shelf.utils.helpers import write_sidecar


class ImportPlanError(Exception):
    """Session incomplete ou destination impossible a calculer."""


@dataclass
class ImportPlan:
    """
    Destination calculee d'un import.

    Attributs:
        title_dir: Repertoire du titre (existant ou a creer)
        disk_dir: Repertoire final du disque
        creates_title: True si le repertoire du titre sera cree
    """

    title_dir: Path
    disk_dir: Path
    creates_title: bool


@dataclass
class ImportResult:
    """
    Resultat d'une operation d'import.

    Attributs:
        success: True si le disque a ete deplace
        title_path: Repertoire du titre de destination
        disk_path: Repertoire final du disque (si succes)
        conflict_path: Destination deja existante (si echec pour conflit)
        error: Message d'erreur (si echec)
        warnings: Avertissements d'un import reussi (ex: tmdb.txt non ecrit)
    """

    success: bool
    title_path: Optional[Path] = None
    disk_path: Optional[Path] = None
    conflict_path: Optional[Path] = None
    error: Optional[str] = None
    warnings: list[str] = field(default_factory=list)


class ImportExecutor:
    """
    Executeur des sessions d'import.

    plan() et execute() partagent le meme calcul de destination :
    l'apercu montre exactement le chemin qui sera cree.

    Utilisation:
        executor = ImportExecutor(file_system)
        result = executor.execute(session, catalog_root)
        if result.success:
            print(f"Disque deplace vers {result.disk_path}")
        else:
            print(f"Erreur: {result.error}")
    """

    def __init__(self, file_system: IArchiveFileSystem) -> None:
        self._file_system = file_system

    def plan(self, session: ImportSession, catalog_root: Path) -> ImportPlan:
        """
        Calcule la destination d'une session sans rien modifier.

        Raises:
            ImportPlanError: Si la session est incomplete ou si le titre
                existant choisi n'existe plus
        """
        kind = session.kind
        if kind is None:
            raise ImportPlanError("Type de media non choisi")
        if session.disk_format is None:
            raise ImportPlanError("Format du disque non choisi")

        try:
            disk_name = build_disk_directory_name(
                session.format_label,
                session.series_number if kind is MediaKind.SERIES else None,
                session.disk_number,
                kind,
            )
            if session.appends_to_existing:
                title_dir = session.existing_path
                if title_dir is None or not self._file_system.is_directory(title_dir):
                    raise ImportPlanError(f"Titre existant introuvable: {title_dir}")
                creates_title = False
            else:
                title_dir = catalog_root / build_title_directory_name(
                    session.final_title, session.final_year, kind
                )
                creates_title = not self._file_system.exists(title_dir)
        except NamingError as e:
            raise ImportPlanError(str(e)) from e

        return ImportPlan(
            title_dir=title_dir,
            disk_dir=title_dir / disk_name,
            creates_title=creates_title,
        )

    def execute(self, session: ImportSession, catalog_root: Path) -> ImportResult:
        """
        Deplace le disque source vers sa destination.

        Aucune modification n'est faite si la destination du disque existe
        deja. Le repertoire du titre est cree si besoin ; il est retire si
        le renommage echoue ensuite.

        Args:
            session: Session complete
            catalog_root: Racine de l'archive

        Returns:
            ImportResult decrivant le succes, le conflit ou l'erreur
        """
        try:
            plan = self.plan(session, catalog_root)
        except ImportPlanError as e:
            return ImportResult(success=False, error=str(e))

        if self._file_system.exists(plan.disk_dir):
            logger.warning(f"Import {session.id} annule, destination existante: {plan.disk_dir}")
            return ImportResult(
                success=False,
                title_path=plan.title_dir,
                conflict_path=plan.disk_dir,
                error=f"La destination existe deja: {plan.disk_dir}",
            )

        try:
            if plan.creates_title:
                self._file_system.make_directories(plan.title_dir)
            self._file_system.rename(session.source.path, plan.disk_dir)
        except OSError as e:
            if plan.creates_title:
                self._remove_empty_title_dir(plan.title_dir)
            logger.error(f"Echec de l'import {session.id}: {e}")
            return ImportResult(success=False, title_path=plan.title_dir, error=str(e))

        logger.info(f"Disque importe: {session.source.path} -> {plan.disk_dir}")
        result = ImportResult(success=True, title_path=plan.title_dir, disk_path=plan.disk_dir)

        external_id = session.final_external_id
        if external_id:
            warning = self._write_external_id(plan.title_dir, external_id)
            if warning:
                result.warnings.append(warning)

        return result

    def _write_external_id(self, title_dir: Path, external_id: str) -> Optional[str]:
        """Ecrit tmdb.txt s'il est absent. Retourne un avertissement en cas d'echec."""
        tmdb_file = title_dir / TMDB_ID_FILENAME
        if self._file_system.exists(tmdb_file):
            logger.debug(f"{tmdb_file} existe deja, identifiant conserve")
            return None
        try:
            write_sidecar(tmdb_file, external_id)
        except OSError as e:
            logger.warning(f"Impossible d'ecrire {tmdb_file}: {e}")
            return f"Identifiant TMDB non enregistre: {e}"
        return None

    def _remove_empty_title_dir(self, title_dir: Path) -> None:
        try:
            title_dir.rmdir()
        except OSError as e:
            logger.warning(f"Impossible de retirer le repertoire vide {title_dir}: {e}")
