"""GeoJSON export utilities."""

from __future__ import annotations

from typing import Any, Dict, List, Sequence

from ...models.domain import Point


def path_coordinates(start: Point, ordered_waypoints: Sequence[Point], end: Point) -> List[List[float]]:
    """Return the bracketed path as [lng, lat] pairs."""
    return [[point.longitude, point.latitude] for point in (start, *ordered_waypoints, end)]


def tour_to_feature(
    start: Point,
    ordered_waypoints: Sequence[Point],
    end: Point,
    properties: Dict[str, Any] | None = None,
) -> Dict[str, Any]:
    """Build a LineString Feature through start, the ordered stops and end.

    Straight segments between stops; no street geometry is implied.
    """
    return {
        "type": "Feature",
        "properties": dict(properties or {}),
        "geometry": {
            "type": "LineString",
            "coordinates": path_coordinates(start, ordered_waypoints, end),
        },
    }
