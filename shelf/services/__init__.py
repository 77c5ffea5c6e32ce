"""Services applicatifs : codec de nommage, scan du catalogue, import, métadonnées."""
