from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class NamedPlace:
    query: str
    name: str
    lat: float
    lng: float


def normalize_query(query: str) -> str:
    return query.strip().lower()


class PlaceMemo:
    """In-process memo of resolved places, keyed like the server cache. Never persisted."""

    def __init__(self) -> None:
        self._places: dict[str, NamedPlace] = {}

    def get(self, query: str) -> NamedPlace | None:
        return self._places.get(normalize_query(query))

    def put(self, place: NamedPlace) -> None:
        self._places[normalize_query(place.query)] = place

    def __len__(self) -> int:
        return len(self._places)
