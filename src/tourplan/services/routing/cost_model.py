"""Pairwise cost providers for the tour optimizer.

Both strategies take the node list ``[start, *waypoints, end]`` and return a
complete matrix in that same order. The network strategy never raises on
transport or payload problems; it logs the reason and rebuilds the whole
matrix with the geometric estimator instead.
"""

from __future__ import annotations

import logging
import math
from typing import Protocol, Sequence

import httpx

from ...config import Settings
from ...models.domain import Point
from ..geospatial import haversine_km
from .models import ZERO_COST, Cost, CostMatrix, TourInputError
from .osrm_client import OSRMClient, OSRMResponseError

DEFAULT_SPEED_KMH = 4.5

logger = logging.getLogger(__name__)


class CostModel(Protocol):
    name: str

    def compute_matrix(self, points: Sequence[Point]) -> CostMatrix:
        ...


class GeometricCostModel:
    """Great-circle distance with a constant assumed travel speed."""

    name = "geometric"

    def __init__(self, speed_kmh: float = DEFAULT_SPEED_KMH) -> None:
        if speed_kmh <= 0:
            raise ValueError("Assumed speed must be positive.")
        self.speed_kmh = speed_kmh

    def compute_matrix(self, points: Sequence[Point]) -> CostMatrix:
        for index, point in enumerate(points):
            if not (math.isfinite(point.latitude) and math.isfinite(point.longitude)):
                raise TourInputError(f"Point {index} has non-finite coordinates.")

        rows: list[list[Cost]] = []
        for i, origin in enumerate(points):
            row: list[Cost] = []
            for j, destination in enumerate(points):
                if i == j:
                    row.append(ZERO_COST)
                    continue
                distance_km = haversine_km(
                    origin.latitude, origin.longitude, destination.latitude, destination.longitude
                )
                row.append(Cost(distance_km=distance_km, time_min=distance_km / self.speed_kmh * 60.0))
            rows.append(row)
        return CostMatrix.from_rows(rows, source=self.name)


def _osrm_number(value: object, i: int, j: int) -> float:
    # None marks an unreachable pair; bool is an int subclass but never a cost
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise OSRMResponseError(f"OSRM entry {i}->{j} is missing.")
    try:
        number = float(value)
    except OverflowError as exc:
        raise OSRMResponseError(f"OSRM entry {i}->{j} is out of range.") from exc
    if not math.isfinite(number) or number < 0:
        raise OSRMResponseError(f"OSRM entry {i}->{j} is not a valid cost.")
    return number


def parse_osrm_table(table: dict, size: int) -> list[list[Cost]]:
    """Convert an OSRM table body (meters/seconds) into km/minute cost rows."""
    distances = table.get("distances")
    durations = table.get("durations")
    if not isinstance(distances, list) or not isinstance(durations, list):
        raise OSRMResponseError("OSRM table response missing durations or distances.")
    if len(distances) != size or len(durations) != size:
        raise OSRMResponseError(
            f"OSRM matrix size mismatch: expected {size}, "
            f"got distances={len(distances)}, durations={len(durations)}"
        )

    rows: list[list[Cost]] = []
    for i in range(size):
        distance_row, duration_row = distances[i], durations[i]
        if not isinstance(distance_row, list) or not isinstance(duration_row, list):
            raise OSRMResponseError(f"OSRM matrix row {i} is not a list.")
        if len(distance_row) != size or len(duration_row) != size:
            raise OSRMResponseError(f"OSRM matrix row {i} has the wrong length.")
        row: list[Cost] = []
        for j in range(size):
            if i == j:
                row.append(ZERO_COST)
                continue
            meters = _osrm_number(distance_row[j], i, j)
            seconds = _osrm_number(duration_row[j], i, j)
            row.append(Cost(distance_km=meters / 1000.0, time_min=seconds / 60.0))
        rows.append(row)
    return rows


class NetworkCostModel:
    """OSRM travel-time table with whole-matrix geometric fallback."""

    name = "network"

    def __init__(self, client: OSRMClient, fallback: GeometricCostModel | None = None) -> None:
        self.client = client
        self.fallback = fallback or GeometricCostModel()

    def compute_matrix(self, points: Sequence[Point]) -> CostMatrix:
        try:
            table = self.client.table([point.coordinates for point in points])
            rows = parse_osrm_table(table, len(points))
        except (httpx.HTTPError, ConnectionError, ValueError) as exc:
            logger.warning(f"OSRM table request failed: {exc}. Using haversine fallback.")
            matrix = self.fallback.compute_matrix(points)
            return CostMatrix(
                entries=matrix.entries,
                source=matrix.source,
                fallback_reason=str(exc) or type(exc).__name__,
            )
        return CostMatrix.from_rows(rows, source=self.name)


def build_cost_model(config: Settings) -> CostModel:
    """Select the configured cost strategy."""
    geometric = GeometricCostModel(speed_kmh=config.assumed_speed_kmh)
    if config.cost_model == "geometric":
        return geometric
    return NetworkCostModel(OSRMClient.from_settings(config), fallback=geometric)
