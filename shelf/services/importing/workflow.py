"""
Workflow guide d'import d'un disque brut dans le catalogue.

Chaque etape prend l'identifiant de session et la saisie brute de
l'operateur (chaines), valide la saisie puis met a jour la session.
Une saisie invalide leve ImportValidationError en nommant le champ
fautif et laisse la session inchangee.

Etapes : source -> type -> identite -> disque -> placement -> apercu -> execution

L'appelant doit garantir qu'une seule transition est appliquee a la fois
pour une session donnee.
"""

from pathlib import Path
from typing import Optional

from loguru import logger

from shelf.core.entities.catalog import (
    DiskFormat,
    MediaKind,
    Title,
    find_title_by_slug,
    sort_titles,
    titles_of_kind,
)
from shelf.core.entities.import_session import (
    ImportSession,
    ImportStep,
    Placement,
    ProviderMetadata,
)
from shelf.core.ports.file_system import IArchiveFileSystem
from shelf.core.ports.metadata_provider import SearchResult
from shelf.services.inbox import InboxScanner
from shelf.services.metadata import (
    MetadataService,
    MetadataUnavailableError,
    UnknownExternalIdError,
)
from shelf.services.naming import sanitize_for_filesystem
from shelf.services.scanner import CatalogScanner

from .executor import ImportExecutor, ImportPlan, ImportPlanError, ImportResult
from .store import ImportSessionStore

MAX_YEAR = 9999


class ImportValidationError(ValueError):
    """
    Saisie invalide pour une etape du workflow.

    Attributes:
        field: Nom du champ fautif (ex: "year", "series_number")
        message: Description du probleme
    """

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class SessionNotFoundError(KeyError):
    """Aucune session d'import avec cet identifiant."""


def _parse_positive_int(field: str, raw: Optional[str], maximum: Optional[int] = None) -> int:
    text = (raw or "").strip()
    if not text:
        raise ImportValidationError(field, "valeur requise")
    try:
        value = int(text)
    except ValueError:
        raise ImportValidationError(field, f"nombre invalide: {text!r}") from None
    if value <= 0:
        raise ImportValidationError(field, "doit etre strictement positif")
    if maximum is not None and value > maximum:
        raise ImportValidationError(field, f"doit etre inferieur ou egal a {maximum}")
    return value


def _parse_choice(field: str, raw: Optional[str], enum_type):
    try:
        return enum_type((raw or "").strip().lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_type)
        raise ImportValidationError(field, f"choix inconnu {raw!r} (attendu: {allowed})") from None


def _require_text(field: str, raw: Optional[str]) -> str:
    text = (raw or "").strip()
    if not sanitize_for_filesystem(text):
        raise ImportValidationError(field, "valeur requise")
    return text


def _parse_external_id(raw: Optional[str]) -> Optional[str]:
    text = (raw or "").strip()
    if not text:
        return None
    if not text.isdigit():
        raise ImportValidationError("tmdb_id", f"identifiant numerique attendu: {text!r}")
    return text


class ImportWorkflowService:
    """
    Service orchestrant les sessions d'import.

    Coordonne:
    - Le registre des sessions (ImportSessionStore)
    - Le scanner du dossier d'import (sources) et celui du catalogue
      (titres existants pour le placement)
    - Le service de metadonnees (recherche TMDB optionnelle)
    - L'executeur d'import (apercu et deplacement)

    Utilisation:
        session = workflow.start("RAW_DISC_01")
        workflow.choose_kind(session.id, "film")
        workflow.enter_identity(session.id, "Test Film", year="2020")
        workflow.choose_disk_details(session.id, "bluray")
        workflow.choose_placement(session.id, "new")
        plan = workflow.preview(session.id)
        result = await workflow.execute(session.id)
    """

    def __init__(
        self,
        store: ImportSessionStore,
        inbox: InboxScanner,
        file_system: IArchiveFileSystem,
        scanner: CatalogScanner,
        executor: ImportExecutor,
        metadata: MetadataService,
        catalog_root: Path,
    ) -> None:
        self._store = store
        self._inbox = inbox
        self._file_system = file_system
        self._scanner = scanner
        self._executor = executor
        self._metadata = metadata
        self._catalog_root = catalog_root

    # ====================
    # Acces aux sessions
    # ====================

    def get(self, session_id: str) -> ImportSession:
        session = self._store.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def _get_at_step(self, session_id: str, required: ImportStep) -> ImportSession:
        """Retourne la session si l'etape `required` a deja ete atteinte."""
        session = self.get(session_id)
        if session.step < required:
            raise ImportValidationError(
                "step", f"l'etape {required.name.lower()} n'a pas encore ete completee"
            )
        return session

    @staticmethod
    def _complete(session: ImportSession, step: ImportStep) -> None:
        """
        Marque `step` comme derniere etape completee.

        Resoumettre une etape anterieure invalide les suivantes : il faut
        les reprendre (valeurs pre-remplies) et refaire l'apercu avant
        d'executer.
        """
        session.step = step

    # ====================
    # Etape 1 : source
    # ====================

    def start(self, source_name: str) -> ImportSession:
        """
        Cree une session pour un repertoire du dossier d'import.

        La taille est mesuree et le format devine (BDMV, VIDEO_TS) a titre
        de suggestion : il reste a confirmer a l'etape disque.

        Raises:
            InboxError: Si la source n'existe pas dans le dossier d'import
        """
        source = self._inbox.find(source_name)
        detected = self._file_system.detect_disk_format(source.path)
        session = self._store.create(source, detected_format=detected)
        with logger.contextualize(session=session.id):
            logger.info(f"Session creee pour {source.path} ({source.size_gb:.2f} Go)")
        return session

    # ====================
    # Etape 2 : type
    # ====================

    def choose_kind(self, session_id: str, kind: str) -> ImportSession:
        """
        Choisit film ou serie.

        Le type ne peut plus changer une fois l'identite saisie :
        il faut alors demarrer une nouvelle session.
        """
        session = self._get_at_step(session_id, ImportStep.SOURCE)
        media_kind = _parse_choice("media_kind", kind, MediaKind)
        if session.title and media_kind is not session.kind:
            raise ImportValidationError(
                "media_kind", "le type ne peut plus etre modifie, demarrer une nouvelle session"
            )
        session.kind = media_kind
        self._complete(session, ImportStep.KIND)
        return session

    # ====================
    # Etape 3 : identite
    # ====================

    async def search_metadata(
        self, session_id: str, query: Optional[str] = None, year: Optional[str] = None
    ) -> list[SearchResult]:
        """
        Recherche le titre chez le fournisseur de metadonnees.

        Sans requete, le nom du repertoire source est utilise.

        Raises:
            MetadataUnavailableError: Si le fournisseur est absent ou en erreur
        """
        session = self._get_at_step(session_id, ImportStep.KIND)
        text = (query or "").strip() or session.source.name
        search_year = None
        if year and year.strip() and session.kind is MediaKind.FILM:
            search_year = _parse_positive_int("year", year, MAX_YEAR)
        return await self._metadata.search(text, session.kind, year=search_year)

    async def confirm_metadata(self, session_id: str, external_id: str) -> ImportSession:
        """
        Confirme un titre du fournisseur : titre, annee, resume et genres
        officiels deviennent prioritaires sur la saisie manuelle.

        Raises:
            ImportValidationError: Identifiant invalide ou inconnu, ou film sans annee
            MetadataUnavailableError: Si le fournisseur est absent ou en erreur
        """
        session = self._get_at_step(session_id, ImportStep.KIND)
        tmdb_id = _parse_external_id(external_id)
        if tmdb_id is None:
            raise ImportValidationError("tmdb_id", "valeur requise")

        try:
            details = await self._metadata.get_details(tmdb_id, session.kind)
        except UnknownExternalIdError as e:
            raise ImportValidationError("tmdb_id", str(e)) from e

        if not sanitize_for_filesystem(details.title):
            raise ImportValidationError("tmdb_id", "le fournisseur ne donne aucun titre")
        year = details.year or 0
        if session.kind is MediaKind.FILM and not 0 < year <= MAX_YEAR:
            raise ImportValidationError("year", "annee officielle inconnue, saisir l'identite manuellement")

        session.metadata = ProviderMetadata(
            external_id=tmdb_id,
            title=details.title,
            year=year if session.kind is MediaKind.FILM else 0,
            overview=details.overview,
            genres=details.genres,
        )
        session.title = details.title
        session.year = session.metadata.year
        session.external_id = tmdb_id
        self._complete(session, ImportStep.IDENTITY)
        return session

    def enter_identity(
        self,
        session_id: str,
        title: str,
        year: Optional[str] = None,
        external_id: Optional[str] = None,
    ) -> ImportSession:
        """
        Saisie manuelle de l'identite. L'annee n'est demandee que pour un film.

        Remplace toute identite precedemment confirmee aupres du fournisseur.
        """
        session = self._get_at_step(session_id, ImportStep.KIND)
        clean_title = _require_text("title", title)
        parsed_year = 0
        if session.kind is MediaKind.FILM:
            parsed_year = _parse_positive_int("year", year, MAX_YEAR)
        tmdb_id = _parse_external_id(external_id)

        session.metadata = None
        session.title = clean_title
        session.year = parsed_year
        session.external_id = tmdb_id
        self._complete(session, ImportStep.IDENTITY)
        return session

    # ====================
    # Etape 4 : disque
    # ====================

    def choose_disk_details(
        self,
        session_id: str,
        disk_format: str,
        custom_format: Optional[str] = None,
        series_number: Optional[str] = None,
        disk_number: Optional[str] = None,
    ) -> ImportSession:
        """
        Choisit le format du disque et, pour une serie, ses numeros.

        Pour un film l'ordinal vaut toujours 1.
        """
        session = self._get_at_step(session_id, ImportStep.IDENTITY)
        chosen_format = _parse_choice("disk_type", disk_format, DiskFormat)
        custom_text = ""
        if chosen_format is DiskFormat.CUSTOM:
            custom_text = _require_text("disk_type_custom", custom_format)

        if session.kind is MediaKind.SERIES:
            series = _parse_positive_int("series_number", series_number)
            disk = _parse_positive_int("disk_number", disk_number)
        else:
            series, disk = 0, 1

        session.disk_format = chosen_format
        session.custom_format = custom_text
        session.series_number = series
        session.disk_number = disk
        self._complete(session, ImportStep.DISK)
        return session

    # ====================
    # Etape 5 : placement
    # ====================

    def existing_titles(self, session_id: str) -> list[Title]:
        """Titres du catalogue du meme type que la session, tries."""
        session = self._get_at_step(session_id, ImportStep.KIND)
        return sort_titles(titles_of_kind(self._scanner.scan(self._catalog_root), session.kind))

    def choose_placement(
        self,
        session_id: str,
        placement: str,
        existing_slug: Optional[str] = None,
    ) -> ImportSession:
        """
        Choisit un nouveau titre ou un titre existant (designe par son slug).

        Raises:
            ImportValidationError: Placement inconnu, slug absent ou introuvable
        """
        session = self._get_at_step(session_id, ImportStep.DISK)
        chosen = _parse_choice("placement", placement, Placement)
        existing_path = None
        if chosen is Placement.EXISTING:
            slug = (existing_slug or "").strip()
            if not slug:
                raise ImportValidationError("existing_media", "valeur requise")
            title = find_title_by_slug(self.existing_titles(session_id), slug)
            if title is None:
                raise ImportValidationError("existing_media", f"titre introuvable: {slug}")
            existing_path = title.path

        session.placement = chosen
        session.existing_path = existing_path
        self._complete(session, ImportStep.PLACEMENT)
        return session

    # ====================
    # Etapes 6 et 7 : apercu et execution
    # ====================

    def preview(self, session_id: str) -> ImportPlan:
        """
        Calcule la destination sans rien modifier.

        Raises:
            ImportValidationError: Si la destination ne peut pas etre calculee
        """
        session = self._get_at_step(session_id, ImportStep.PLACEMENT)
        try:
            plan = self._executor.plan(session, self._catalog_root)
        except ImportPlanError as e:
            raise ImportValidationError("placement", str(e)) from e
        self._complete(session, ImportStep.CONFIRM)
        return plan

    async def execute(self, session_id: str) -> ImportResult:
        """
        Execute l'import d'une session confirmee.

        En cas de succes la session est supprimee, puis les fichiers annexes
        sont recuperes si un identifiant TMDB est connu (un echec devient un
        avertissement). En cas d'echec la session reste intacte.
        """
        session = self._get_at_step(session_id, ImportStep.CONFIRM)
        with logger.contextualize(session=session.id):
            result = self._executor.execute(session, self._catalog_root)
            if not result.success:
                return result

            self._store.delete(session.id)

            external_id = session.final_external_id
            if external_id and self._metadata.enabled:
                try:
                    await self._metadata.fetch_and_save(result.title_path, session.kind, external_id)
                except MetadataUnavailableError as e:
                    logger.warning(f"Metadonnees non recuperees pour {result.title_path}: {e}")
                    result.warnings.append(str(e))
            return result
