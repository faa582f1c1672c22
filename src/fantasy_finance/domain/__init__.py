"""Domain layer: models (source of truth) and derived views."""
