"""
Cache des tailles de disques, persiste dans sizes.json.

Chaque repertoire de titre porte un fichier sizes.json associant le nom
de chaque repertoire de disque a sa taille en octets. Une entree presente
est toujours consideree comme valide : la taille d'un disque archive ne
change pas.

Le cache est best-effort : un fichier absent ou corrompu equivaut a un
cache vide, et un echec d'ecriture est signale par un booleen.
"""

import json
from pathlib import Path

from shelf.utils.constants import SIZE_CACHE_FILENAME


class SizeCache:
    """
    Lecture et ecriture du fichier sizes.json d'un repertoire de titre.

    Example:
        cache = SizeCache()
        sizes = cache.load(title_dir)
        sizes["Disk [Blu-Ray]"] = 42_000_000_000
        if not cache.save(title_dir, sizes):
            logger.warning("...")
    """

    def __init__(self, filename: str = SIZE_CACHE_FILENAME) -> None:
        self._filename = filename

    def cache_path(self, title_dir: Path) -> Path:
        return title_dir / self._filename

    def load(self, title_dir: Path) -> dict[str, int]:
        """
        Charge le cache d'un repertoire de titre.

        Returns:
            Dictionnaire nom de disque -> octets. Vide si le fichier est
            absent, illisible ou mal forme. Ne leve jamais d'exception.
        """
        try:
            data = json.loads(self.cache_path(title_dir).read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return {}

        if not isinstance(data, dict):
            return {}
        for value in data.values():
            # bool est une sous-classe d'int en Python
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                return {}
        return data

    def save(self, title_dir: Path, sizes: dict[str, int]) -> bool:
        """
        Ecrase le cache d'un repertoire de titre.

        Le JSON est indente (2 espaces) avec les cles triees.

        Returns:
            True si l'ecriture a reussi, False sinon
        """
        try:
            self.cache_path(title_dir).write_text(
                json.dumps(sizes, indent=2, sort_keys=True) + "\n", encoding="utf-8"
            )
            return True
        except OSError:
            return False
