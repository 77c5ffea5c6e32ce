"""
Constantes partagees du projet Shelf.

Centralise les noms des fichiers annexes (sidecar) deposes dans les
repertoires de titres et les marqueurs de structure des disques optiques.
"""

# Fichiers annexes au niveau du repertoire d'un titre
TMDB_ID_FILENAME = "tmdb.txt"
TITLE_FILENAME = "title.txt"
DESCRIPTION_FILENAME = "description.txt"
GENRE_FILENAME = "genre.txt"
SIZE_CACHE_FILENAME = "sizes.json"

# Affiche : poster.<ext>, premiere extension trouvee
POSTER_BASENAME = "poster"
POSTER_EXTENSIONS: tuple[str, ...] = (".jpg", ".jpeg", ".png", ".webp")

# Separateur des genres dans genre.txt
GENRE_SEPARATOR = ", "

# Repertoires marqueurs d'une structure de disque optique
BLURAY_MARKER_DIR = "BDMV"
DVD_MARKER_DIR = "VIDEO_TS"

BYTES_PER_GB = 1024 * 1024 * 1024

# Nombre maximum de resultats retournes par une recherche TMDB
SEARCH_RESULTS_LIMIT = 20
