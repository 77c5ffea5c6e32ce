"""
Registre des sessions d'import en cours.

Une instance unique est construite au demarrage (container DI) et passee
aux services qui en ont besoin. Les operations create/get/delete sont
serialisees par un verrou : les identifiants sont uniques et croissants,
et une session n'est visible qu'une fois entierement construite.

Les sessions abandonnees ne sont jamais expirees ; elles disparaissent
avec le processus.
"""

import threading
from typing import Optional

from shelf.core.entities.catalog import DiskFormat
from shelf.core.entities.import_session import ImportSession, ImportSource


class ImportSessionStore:
    """
    Registre thread-safe des sessions d'import.

    Les identifiants sont de la forme "<prefix>-N", N croissant a partir de 1.
    """

    def __init__(self, prefix: str = "import") -> None:
        self._prefix = prefix
        self._lock = threading.Lock()
        self._sessions: dict[str, ImportSession] = {}
        self._counter = 0

    def create(
        self,
        source: ImportSource,
        detected_format: Optional[DiskFormat] = None,
    ) -> ImportSession:
        """Cree et enregistre une nouvelle session pour une source."""
        with self._lock:
            self._counter += 1
            session = ImportSession(
                id=f"{self._prefix}-{self._counter}",
                source=source,
                detected_format=detected_format,
            )
            self._sessions[session.id] = session
            return session

    def get(self, session_id: str) -> Optional[ImportSession]:
        with self._lock:
            return self._sessions.get(session_id)

    def delete(self, session_id: str) -> bool:
        """Supprime une session. Retourne False si elle n'existait pas."""
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def ids(self) -> list[str]:
        with self._lock:
            return list(self._sessions)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
