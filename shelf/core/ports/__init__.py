"""
Ports (interfaces) du domaine Shelf.

Contrats abstraits implementes par les adaptateurs d'infrastructure.
"""

from .file_system import IArchiveFileSystem
from .metadata_provider import IMetadataProvider, MediaDetails, SearchResult

__all__ = [
    "IArchiveFileSystem",
    "IMetadataProvider",
    "MediaDetails",
    "SearchResult",
]
