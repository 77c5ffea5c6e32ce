"""Clients des API de métadonnées externes (TMDB) avec cache et retry."""
