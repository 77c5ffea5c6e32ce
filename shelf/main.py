"""
Point d'entrée CLI de Shelf.

Initialise le container DI, configure le logging et fournit les commandes CLI.
"""

from typing import Annotated

import typer
from loguru import logger

from . import __version__
from .adapters.cli.commands import import_disk, inbox, metadata, play, scan, set_id
from .config import Settings
from .container import Container
from .logging_config import configure_logging

app = typer.Typer(
    name="shelf",
    help="Gestion d'une archive personnelle de sauvegardes de disques",
)
container = Container()


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Afficher les logs de niveau DEBUG"),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Mode silencieux (erreurs uniquement)"),
    ] = False,
) -> None:
    """Shelf - Archive personnelle de films et series sur disque."""
    config = get_config()
    level = "ERROR" if quiet else "DEBUG" if verbose else config.log_level
    configure_logging(
        log_level=level,
        log_file=config.log_file,
        rotation_size=config.log_rotation_size,
        retention_count=config.log_retention_count,
    )


app.command()(scan)
app.command()(inbox)
# Note: "import" est un mot reserve Python, donc on utilise name= explicitement
app.command(name="import")(import_disk)
app.command()(metadata)
app.command(name="set-id")(set_id)
app.command()(play)


def get_config() -> Settings:
    """Récupère les paramètres de l'application depuis le container DI."""
    return container.config()


@app.command()
def info() -> None:
    """Affiche la configuration actuelle."""
    config = get_config()
    logger.info("Configuration Shelf")
    typer.echo(f"Archive : {config.media_dir}")
    typer.echo(f"Dossier d'import : {config.import_dir or 'non configuré'}")
    typer.echo(f"API TMDB : {'activée' if config.tmdb_enabled else 'désactivée'}")
    typer.echo(f"Préfixe de lecture : {config.play_url_prefix or '(aucun)'}")
    typer.echo(f"Niveau de log : {config.log_level}")


@app.command()
def version() -> None:
    """Affiche les informations de version."""
    typer.echo(f"Shelf v{__version__}")


def main() -> None:
    """Point d'entrée principal de l'application."""
    app()


if __name__ == "__main__":
    main()
