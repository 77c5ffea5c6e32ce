"""
Commandes Typer de Shelf.

Ce module fournit les commandes CLI:
- scan: Affiche le catalogue de l'archive
- inbox: Liste les sauvegardes brutes du dossier d'import
- import: Import guide d'une sauvegarde dans l'archive
- metadata: Recupere les fichiers annexes TMDB manquants
- set-id: Associe un identifiant TMDB a un titre
- play: Affiche les commandes de lecture des disques d'un titre
"""

import asyncio
from typing import Annotated, Optional

import typer
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from shelf.container import Container
from shelf.core.entities.catalog import DiskFormat, MediaKind, sort_titles
from shelf.core.entities.import_session import ImportSession, Placement
from shelf.services.importing import ImportValidationError, ImportWorkflowService
from shelf.services.inbox import InboxError
from shelf.services.metadata import MetadataUnavailableError
from shelf.services.scanner import CatalogError

from .helpers import (
    console,
    find_title,
    format_size,
    load_catalog,
    with_container,
)


# ====================
# Catalogue
# ====================


def scan() -> None:
    """Scanne l'archive et affiche le catalogue."""
    titles = sort_titles(load_catalog(Container()))
    if not titles:
        console.print("[yellow]Aucun titre dans l'archive.[/yellow]")
        return

    table = Table(title=f"Catalogue ({len(titles)} titres)")
    table.add_column("Titre")
    table.add_column("Type")
    table.add_column("Disques", justify="right")
    table.add_column("Taille", justify="right")
    table.add_column("TMDB")
    table.add_column("Slug", style="dim")
    for title in titles:
        table.add_row(
            title.display_title,
            title.kind.tag,
            str(title.disk_count),
            format_size(title.total_size_bytes),
            title.external_id or "-",
            title.slug,
        )
    console.print(table)


def play(
    slug: Annotated[str, typer.Argument(help="Slug du titre (voir 'shelf scan')")],
    player: Annotated[str, typer.Option("--player", "-p", help="vlc ou mpv")] = "vlc",
) -> None:
    """Affiche les commandes de lecture des disques d'un titre."""
    container = Container()
    title = find_title(container, slug)
    prefix = container.config().play_url_prefix
    console.print(f"[bold]{title.display_title}[/bold]")
    for disk in title.disks:
        command = disk.mpv_play_command(prefix) if player == "mpv" else disk.play_command(prefix)
        console.print(f"  {disk.name} [{disk.format}] : {command}", markup=False, soft_wrap=True)


# ====================
# Dossier d'import
# ====================


def inbox() -> None:
    """Liste les sauvegardes brutes presentes dans le dossier d'import."""
    container = Container()
    try:
        sources = container.inbox_scanner().scan()
    except InboxError as e:
        console.print(f"[red]Erreur:[/red] {e}")
        raise typer.Exit(code=1) from e

    if not sources:
        console.print("[yellow]Le dossier d'import est vide.[/yellow]")
        return

    file_system = container.file_system()
    table = Table(title="Dossier d'import")
    table.add_column("#", justify="right")
    table.add_column("Source")
    table.add_column("Taille", justify="right")
    table.add_column("Format detecte")
    for index, source in enumerate(sources, start=1):
        detected = file_system.detect_disk_format(source.path)
        table.add_row(
            str(index),
            source.name,
            format_size(source.size_bytes),
            detected.label if detected else "-",
        )
    console.print(table)


# ====================
# Import guide
# ====================


def _report(error: ImportValidationError) -> None:
    console.print(f"[red]{error.field}[/red] : {error.message}")


def _ask_kind(workflow: ImportWorkflowService, session: ImportSession) -> None:
    while True:
        kind = Prompt.ask("Type", choices=[k.value for k in MediaKind], default="film")
        try:
            workflow.choose_kind(session.id, kind)
            return
        except ImportValidationError as e:
            _report(e)


async def _ask_identity_from_tmdb(workflow: ImportWorkflowService, session: ImportSession) -> bool:
    """Recherche TMDB interactive. Retourne False pour basculer en saisie manuelle."""
    query = Prompt.ask("Recherche TMDB", default=session.source.name)
    try:
        results = await workflow.search_metadata(session.id, query)
    except MetadataUnavailableError as e:
        console.print(f"[yellow]TMDB indisponible:[/yellow] {e}")
        return False
    if not results:
        console.print("[yellow]Aucun resultat.[/yellow]")
        return False

    table = Table()
    table.add_column("#", justify="right")
    table.add_column("Titre")
    table.add_column("Annee")
    table.add_column("TMDB")
    for index, result in enumerate(results, start=1):
        table.add_row(str(index), result.title, str(result.year or "-"), result.id)
    console.print(table)

    while True:
        choice = Prompt.ask("Numero du resultat (m = saisie manuelle)", default="1")
        if choice.strip().lower() == "m":
            return False
        if not choice.isdigit() or not 1 <= int(choice) <= len(results):
            console.print("[red]Choix invalide[/red]")
            continue
        try:
            await workflow.confirm_metadata(session.id, results[int(choice) - 1].id)
            return True
        except ImportValidationError as e:
            _report(e)
        except MetadataUnavailableError as e:
            console.print(f"[yellow]TMDB indisponible:[/yellow] {e}")
            return False


def _ask(prompt: str, default: str = "", **kwargs) -> str:
    """Prompt.ask sans afficher de valeur par defaut quand il n'y en a pas."""
    if default:
        return Prompt.ask(prompt, default=default, **kwargs)
    return Prompt.ask(prompt, **kwargs)


def _ask_identity_manual(workflow: ImportWorkflowService, session: ImportSession) -> None:
    while True:
        title = _ask("Titre", session.title)
        year = None
        if session.kind is MediaKind.FILM:
            year = _ask("Annee", str(session.year) if session.year else "")
        tmdb_id = Prompt.ask("Identifiant TMDB (optionnel)", default="", show_default=False)
        try:
            workflow.enter_identity(session.id, title or "", year=year, external_id=tmdb_id)
            return
        except ImportValidationError as e:
            _report(e)


def _ask_disk_details(workflow: ImportWorkflowService, session: ImportSession) -> None:
    default_format = session.detected_format.value if session.detected_format else ""
    while True:
        disk_format = _ask("Format", default_format, choices=[f.value for f in DiskFormat])
        custom = None
        if disk_format == DiskFormat.CUSTOM.value:
            custom = Prompt.ask("Format personnalise")
        series_number = disk_number = None
        if session.kind is MediaKind.SERIES:
            series_number = Prompt.ask("Numero de saison")
            disk_number = Prompt.ask("Numero de disque")
        try:
            workflow.choose_disk_details(
                session.id,
                disk_format,
                custom_format=custom,
                series_number=series_number,
                disk_number=disk_number,
            )
            return
        except ImportValidationError as e:
            _report(e)


def _ask_placement(workflow: ImportWorkflowService, session: ImportSession) -> None:
    """Choix du placement ; termine la commande si l'archive devient illisible."""
    try:
        _ask_placement_loop(workflow, session)
    except CatalogError as e:
        console.print(f"[red]Erreur:[/red] {e}")
        raise typer.Exit(code=1) from e


def _ask_placement_loop(workflow: ImportWorkflowService, session: ImportSession) -> None:
    while True:
        placement = Prompt.ask(
            "Placement", choices=[p.value for p in Placement], default=Placement.NEW.value
        )
        slug = None
        if placement == Placement.EXISTING.value:
            existing = workflow.existing_titles(session.id)
            if not existing:
                console.print("[yellow]Aucun titre existant de ce type.[/yellow]")
                continue
            for title in existing:
                console.print(f"  {title.slug}  [dim]{title.display_title}[/dim]")
            slug = Prompt.ask("Slug du titre existant")
        try:
            workflow.choose_placement(session.id, placement, existing_slug=slug)
            return
        except ImportValidationError as e:
            _report(e)


def import_disk(
    source: Annotated[
        Optional[str], typer.Argument(help="Nom du repertoire dans le dossier d'import")
    ] = None,
) -> None:
    """Importe une sauvegarde brute du dossier d'import dans l'archive."""
    asyncio.run(_import_disk_async(source))


@with_container
async def _import_disk_async(container: Container, source: Optional[str]) -> None:
    """Implementation async de l'import guide."""
    workflow = container.import_workflow()

    try:
        if source is None:
            sources = container.inbox_scanner().scan()
            if not sources:
                console.print("[yellow]Le dossier d'import est vide.[/yellow]")
                return
            for index, candidate in enumerate(sources, start=1):
                console.print(f"  {index}. {candidate.name} ({format_size(candidate.size_bytes)})")
            choice = Prompt.ask(
                "Source", choices=[str(i) for i in range(1, len(sources) + 1)], default="1"
            )
            source = sources[int(choice) - 1].name
        session = workflow.start(source)
    except InboxError as e:
        console.print(f"[red]Erreur:[/red] {e}")
        raise typer.Exit(code=1) from e

    console.print(
        f"Source : [bold]{session.source.name}[/bold] ({format_size(session.source.size_bytes)})"
    )
    if session.detected_format:
        console.print(f"Format detecte : {session.detected_format.label}")

    _ask_kind(workflow, session)

    from_tmdb = False
    if container.metadata_service().enabled and Confirm.ask("Rechercher sur TMDB ?", default=True):
        from_tmdb = await _ask_identity_from_tmdb(workflow, session)
    if not from_tmdb:
        _ask_identity_manual(workflow, session)

    _ask_disk_details(workflow, session)
    _ask_placement(workflow, session)

    try:
        plan = workflow.preview(session.id)
    except ImportValidationError as e:
        _report(e)
        raise typer.Exit(code=1) from e

    console.print(
        Panel(
            f"{session.source.path}\n-> {plan.disk_dir}"
            + ("\n(nouveau titre)" if plan.creates_title else ""),
            title="Apercu",
        )
    )
    if not Confirm.ask("Confirmer l'import ?", default=True):
        console.print("[yellow]Import annule.[/yellow]")
        return

    result = await workflow.execute(session.id)
    if not result.success:
        console.print(f"[red]Echec de l'import:[/red] {result.error}")
        raise typer.Exit(code=1)

    console.print(f"[green]Disque importe:[/green] {result.disk_path}")
    for warning in result.warnings:
        console.print(f"[yellow]Avertissement:[/yellow] {warning}")


# ====================
# Metadonnees TMDB
# ====================


def metadata(
    slug: Annotated[
        Optional[str], typer.Argument(help="Slug du titre (tous les titres si absent)")
    ] = None,
) -> None:
    """Recupere les fichiers annexes manquants des titres ayant un identifiant TMDB."""
    asyncio.run(_metadata_async(slug))


@with_container
async def _metadata_async(container: Container, slug: Optional[str]) -> None:
    """Implementation async de la recuperation des metadonnees."""
    service = container.metadata_service()
    if not service.enabled:
        console.print("[red]Aucune cle API TMDB configuree (SHELF_TMDB_API_KEY).[/red]")
        raise typer.Exit(code=1)

    titles = [find_title(container, slug)] if slug else load_catalog(container)
    for title in titles:
        if not title.external_id:
            continue
        try:
            written = await service.fetch_and_save(title.path, title.kind, title.external_id)
        except MetadataUnavailableError as e:
            console.print(f"[yellow]{title.display_title}:[/yellow] {e}")
            continue
        if written:
            console.print(f"[green]{title.display_title}:[/green] {', '.join(written)}")


def set_id(
    slug: Annotated[str, typer.Argument(help="Slug du titre")],
    tmdb_id: Annotated[str, typer.Argument(help="Identifiant TMDB")],
    download: Annotated[
        bool, typer.Option("--download", "-d", help="Recuperer aussi les fichiers annexes")
    ] = False,
) -> None:
    """Associe un identifiant TMDB a un titre (ecrase tmdb.txt)."""
    asyncio.run(_set_id_async(slug, tmdb_id, download))


@with_container
async def _set_id_async(container: Container, slug: str, tmdb_id: str, download: bool) -> None:
    """Implementation async de l'association d'un identifiant TMDB."""
    title = find_title(container, slug)
    try:
        details = await container.metadata_service().assign_external_id(
            title, tmdb_id, download=download
        )
    except (ValueError, MetadataUnavailableError, OSError) as e:
        console.print(f"[red]Erreur:[/red] {e}")
        raise typer.Exit(code=1) from e
    console.print(f"[green]{title.display_title}[/green] -> {details.title} ({tmdb_id.strip()})")
