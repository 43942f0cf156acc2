"""Geospatial helpers shared by the feed query engine and its tests."""

from __future__ import annotations

import math

from sqlalchemy import case, func
from sqlalchemy.sql.elements import ColumnElement

LatLng = tuple[float, float]

EARTH_RADIUS_M = 6_371_000.0


def _clamp_unit(value: float) -> float:
    return max(-1.0, min(1.0, value))


def great_circle_distance_m(
    point_a: LatLng, point_b: LatLng, *, radius_m: float = EARTH_RADIUS_M
) -> float:
    """Great-circle distance in metres (spherical law of cosines).

    The cosine term is clamped to [-1, 1] before ``acos``; rounding can push it just
    outside that range for identical or antipodal points.
    """

    lat1, lng1 = point_a
    lat2, lng2 = point_b

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dlambda = math.radians(lng2) - math.radians(lng1)

    cos_c = math.cos(phi1) * math.cos(phi2) * math.cos(dlambda) + math.sin(phi1) * math.sin(phi2)
    return radius_m * math.acos(_clamp_unit(cos_c))


def distance_m_expr(
    lat_col: ColumnElement, lng_col: ColumnElement, lat0: float, lng0: float
) -> ColumnElement:
    """SQL expression for the distance in metres from ``(lat0, lng0)`` to the row.

    Mirrors :func:`great_circle_distance_m`. The clamp is a CASE expression so the same
    SQL runs on PostgreSQL and SQLite.
    """

    phi0 = math.radians(lat0)
    lambda0 = math.radians(lng0)
    cos_c = func.cos(phi0) * func.cos(func.radians(lat_col)) * func.cos(
        func.radians(lng_col) - lambda0
    ) + func.sin(phi0) * func.sin(func.radians(lat_col))
    clamped = case((cos_c > 1.0, 1.0), (cos_c < -1.0, -1.0), else_=cos_c)
    return EARTH_RADIUS_M * func.acos(clamped)


__all__ = ["EARTH_RADIUS_M", "LatLng", "distance_m_expr", "great_circle_distance_m"]
