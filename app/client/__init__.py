"""Async client SDK for the Confess API (feeds, posting, places, session state)."""

from app.client.api import (
    Confession,
    ConfessClient,
    Cursor,
    FeedPage,
    PlaceFound,
    PlaceLookupFailed,
    PlaceMissing,
    PostErrorTag,
    PostFailed,
    PostOk,
)
from app.client.feed import FeedPager, NearMePager
from app.client.listen import Listener, ListenOutcome, Location
from app.client.places import NamedPlace, PlaceMemo
from app.client.session import SessionState, SessionStore, reduce

__all__ = [
    "Confession",
    "ConfessClient",
    "Cursor",
    "FeedPage",
    "FeedPager",
    "Listener",
    "ListenOutcome",
    "Location",
    "NamedPlace",
    "NearMePager",
    "PlaceFound",
    "PlaceLookupFailed",
    "PlaceMemo",
    "PlaceMissing",
    "PostErrorTag",
    "PostFailed",
    "PostOk",
    "SessionState",
    "SessionStore",
    "reduce",
]
