"""Router modules exposed for convenient imports."""

from . import admin, confessions, events, feed, healthz, places, readyz

__all__ = [
    "admin",
    "confessions",
    "events",
    "feed",
    "healthz",
    "places",
    "readyz",
]
