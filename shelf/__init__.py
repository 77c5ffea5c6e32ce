"""
Shelf - Gestionnaire d'archive personnelle de sauvegardes de disques.

Ce package maintient une arborescence de sauvegardes (films et series)
dont les noms de repertoires encodent le titre, l'annee et le format,
et fournit un workflow guide pour importer de nouveaux disques.

Architecture : Hexagonale (Ports et Adaptateurs)
- core/ : Couche domaine (entités, ports)
- services/ : Couche application (scan, import, métadonnées)
- adapters/ : Couche infrastructure (système de fichiers, client TMDB)
"""

__version__ = "0.1.0"
