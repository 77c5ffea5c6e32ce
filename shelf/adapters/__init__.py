"""Adaptateurs d'infrastructure (système de fichiers, API externes)."""
