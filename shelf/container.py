"""
Container d'injection de dependances via dependency-injector.

Construit une seule fois les adaptateurs et services de l'application,
en particulier le registre unique des sessions d'import, partage par
toutes les operations du processus.
"""

from typing import Callable, Optional

from dependency_injector import containers, providers

from .adapters.api.cache import APICache
from .adapters.api.tmdb_client import TMDBClient
from .adapters.file_system import FileSystemAdapter
from .adapters.size_cache import SizeCache
from .config import Settings
from .services.importing import ImportExecutor, ImportSessionStore, ImportWorkflowService
from .services.inbox import InboxScanner
from .services.metadata import MetadataService
from .services.scanner import CatalogScanner


def _optional_provider(enabled: bool, factory: Callable[[], TMDBClient]) -> Optional[TMDBClient]:
    """Instancie le client TMDB uniquement si une cle API est configuree."""
    return factory() if enabled else None


class Container(containers.DeclarativeContainer):
    """Container DI de l'application.

    Utilisation :
        container = Container()
        titles = container.catalog_scanner().scan(container.config().media_dir)
        workflow = container.import_workflow()
    """

    # Configuration - singleton charge une seule fois
    config = providers.Singleton(Settings)

    # Adapters - implementations concretes des ports
    file_system = providers.Singleton(FileSystemAdapter)
    size_cache = providers.Singleton(SizeCache)

    # Scanners
    catalog_scanner = providers.Factory(
        CatalogScanner,
        file_system=file_system,
        size_cache=size_cache,
    )
    inbox_scanner = providers.Factory(
        InboxScanner,
        file_system=file_system,
        import_dir=config.provided.import_dir,
    )

    # Registre des sessions d'import - unique pour tout le processus
    import_session_store = providers.Singleton(ImportSessionStore)

    # Cache API - Singleton pour partage entre appels
    api_cache = providers.Singleton(
        APICache,
        cache_dir=config.provided.api_cache_dir,
    )

    tmdb_client = providers.Singleton(
        TMDBClient,
        api_key=config.provided.tmdb_api_key,
        cache=api_cache,
        language=config.provided.tmdb_language,
    )

    # None si aucune cle TMDB n'est configuree
    metadata_provider = providers.Callable(
        _optional_provider,
        enabled=config.provided.tmdb_enabled,
        factory=tmdb_client.provider,
    )

    metadata_service = providers.Singleton(
        MetadataService,
        provider=metadata_provider,
    )

    import_executor = providers.Factory(
        ImportExecutor,
        file_system=file_system,
    )

    import_workflow = providers.Factory(
        ImportWorkflowService,
        store=import_session_store,
        inbox=inbox_scanner,
        file_system=file_system,
        scanner=catalog_scanner,
        executor=import_executor,
        metadata=metadata_service,
        catalog_root=config.provided.media_dir,
    )
