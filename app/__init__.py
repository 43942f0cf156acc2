"""Confess API: anonymous, ephemeral, location-scoped confessions."""
