"""Couche domaine : entités du catalogue et ports vers l'extérieur."""
