"""
Entités du domaine Shelf.

Reexporte les entites du catalogue et de la session d'import.
"""

from .catalog import Disk, DiskFormat, MediaKind, Title
from .import_session import (
    ImportSession,
    ImportSource,
    ImportStep,
    Placement,
    ProviderMetadata,
)

__all__ = [
    "Disk",
    "DiskFormat",
    "ImportSession",
    "ImportSource",
    "ImportStep",
    "MediaKind",
    "Placement",
    "ProviderMetadata",
    "Title",
]
