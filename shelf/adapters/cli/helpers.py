"""
Utilitaires partages pour les commandes CLI de Shelf.

Ce module fournit :
- console : instance Rich Console partagee
- with_container : decorateur injectant un container initialise
- load_catalog / find_title : acces au catalogue avec sortie propre en cas d'erreur
"""

from functools import wraps

import typer
from rich.console import Console

from shelf.container import Container
from shelf.core.entities.catalog import Title, find_title_by_slug
from shelf.services.scanner import CatalogError
from shelf.utils.helpers import format_size_gb

console = Console()


def with_container(func):
    """
    Decorateur qui injecte un container en premier argument.

    Le client TMDB eventuellement cree est ferme a la fin de la commande,
    dans la meme boucle asyncio que celle qui l'a utilise.

    Usage:
        @with_container
        async def my_command(container, ...):
            config = container.config()
    """

    @wraps(func)
    async def wrapper(*args, **kwargs):
        container = Container()
        try:
            return await func(container, *args, **kwargs)
        finally:
            if container.config().tmdb_enabled:
                await container.tmdb_client().close()

    return wrapper


def load_catalog(container: Container) -> list[Title]:
    """Scanne l'archive configuree ; termine la commande si la racine est invalide."""
    try:
        return container.catalog_scanner().scan(container.config().media_dir)
    except CatalogError as e:
        console.print(f"[red]Erreur:[/red] {e}")
        raise typer.Exit(code=1) from e


def find_title(container: Container, slug: str) -> Title:
    """Retourne le titre designe par son slug ; termine la commande s'il est inconnu."""
    title = find_title_by_slug(load_catalog(container), slug)
    if title is None:
        console.print(f"[red]Titre introuvable:[/red] {slug}")
        raise typer.Exit(code=1)
    return title


def format_size(size_bytes: int) -> str:
    """Taille lisible en gigaoctets (ex: "42.10 Go")."""
    return f"{format_size_gb(size_bytes):.2f} Go"
