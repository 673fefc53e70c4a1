"""Open-path tour optimizer: nearest-neighbor construction plus bounded 2-opt.

Nodes are indexed ``[start, *waypoints, end]``: index 0 is the start, index
``n + 1`` the end and ``1..n`` the waypoints in input order. Only waypoint
indices are ever permuted.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence

from ...models.domain import Point
from ..geospatial import is_valid_coordinate
from .cost_model import CostModel
from .models import CostMatrix, Leg, TourInputError, TourResult

DEFAULT_MAX_SWEEPS = 1000
DEFAULT_SWEEPS_PER_WAYPOINT = 50

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SearchLimits:
    max_sweeps: int = DEFAULT_MAX_SWEEPS
    sweeps_per_waypoint: int = DEFAULT_SWEEPS_PER_WAYPOINT

    def cap(self, waypoint_count: int) -> int:
        return min(self.max_sweeps, self.sweeps_per_waypoint * waypoint_count)


def round_half_up(value: float, digits: int = 0) -> float:
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


def path_distance(matrix: CostMatrix, path: Sequence[int]) -> float:
    total = 0.0
    for from_index, to_index in zip(path, path[1:]):
        total += matrix.distance(from_index, to_index)
    return total


def nearest_neighbor(matrix: CostMatrix, start_index: int, waypoint_indices: Sequence[int]) -> list[int]:
    """Greedy construction; ties go to the lowest waypoint index."""
    unvisited = sorted(waypoint_indices)
    order: list[int] = []
    current = start_index
    while unvisited:
        nearest = unvisited[0]
        nearest_distance = matrix.distance(current, nearest)
        for index in unvisited[1:]:
            distance = matrix.distance(current, index)
            if distance < nearest_distance:
                nearest, nearest_distance = index, distance
        order.append(nearest)
        unvisited.remove(nearest)
        current = nearest
    return order


def reverse_segment(path: Sequence[int], i: int, j: int) -> list[int]:
    """Return a copy of ``path`` with the nodes strictly between positions i and j reversed."""
    return [*path[: i + 1], *reversed(path[i + 1 : j]), *path[j:]]


def _first_improving_move(
    matrix: CostMatrix, path: list[int], best_distance: float
) -> Optional[tuple[list[int], float]]:
    # Endpoints stay pinned: i >= 0 and j <= len(path) - 1 keep both outside the segment.
    # j == i + 2 would reverse a single stop, which never changes the distance.
    for i in range(len(path) - 3):
        for j in range(i + 3, len(path)):
            candidate = reverse_segment(path, i, j)
            distance = path_distance(matrix, candidate)
            if distance < best_distance:
                return candidate, distance
    return None


def two_opt(
    matrix: CostMatrix,
    tour: Sequence[int],
    start_index: int,
    end_index: int,
    max_sweeps: int,
) -> tuple[list[int], float, int]:
    """First-improvement 2-opt over the bracketed path.

    Each accepted reversal restarts the sweep from the top. Stops at a 2-opt
    local optimum or after ``max_sweeps`` sweeps.

    Returns:
        (tour, unrounded path distance, sweeps performed)
    """
    path = [start_index, *tour, end_index]
    best_distance = path_distance(matrix, path)
    sweeps = 0
    while sweeps < max_sweeps:
        sweeps += 1
        move = _first_improving_move(matrix, path, best_distance)
        if move is None:
            break
        path, best_distance = move
        logger.debug(f"2-opt sweep {sweeps}: path distance {best_distance:.4f} km")
    return path[1:-1], best_distance, sweeps


def build_legs(points: Sequence[Point], matrix: CostMatrix, path: Sequence[int]) -> tuple[list[Leg], float, float]:
    """Walk the path once, returning legs and unrounded (distance, time) totals."""
    legs: list[Leg] = []
    total_distance = 0.0
    total_time = 0.0
    for from_index, to_index in zip(path, path[1:]):
        distance = matrix.distance(from_index, to_index)
        duration = matrix.time(from_index, to_index)
        total_distance += distance
        total_time += duration
        legs.append(
            Leg(
                origin=points[from_index],
                destination=points[to_index],
                distance_km=distance,
                time_min=duration,
            )
        )
    return legs, total_distance, total_time


def _validate_points(start: Point, end: Point, waypoints: Sequence[Point]) -> None:
    if not is_valid_coordinate(start.latitude, start.longitude):
        raise TourInputError("start location must have valid lat/lng")
    if not is_valid_coordinate(end.latitude, end.longitude):
        raise TourInputError("end location must have valid lat/lng")
    for index, waypoint in enumerate(waypoints):
        if not is_valid_coordinate(waypoint.latitude, waypoint.longitude):
            raise TourInputError(f"Waypoint {index} must have valid lat/lng")


class TourSolver:
    """Orders waypoints between a fixed start and end against one cost matrix."""

    def __init__(
        self,
        cost_model: CostModel,
        limits: SearchLimits | None = None,
        max_waypoints: int | None = None,
    ) -> None:
        self.cost_model = cost_model
        self.limits = limits or SearchLimits()
        self.max_waypoints = max_waypoints

    def solve(self, start: Point, end: Point, waypoints: Sequence[Point]) -> TourResult:
        waypoints = list(waypoints)
        if self.max_waypoints is not None and len(waypoints) > self.max_waypoints:
            raise TourInputError(
                f"Too many waypoints. Maximum {self.max_waypoints} allowed per request."
            )
        _validate_points(start, end, waypoints)

        if not waypoints:
            return TourResult(
                ordered_waypoints=[],
                total_distance_km=0.0,
                total_time_min=0,
                legs=[],
                metadata={"waypoint_count": 0, "cost_source": None, "sweeps": 0},
            )

        points = [start, *waypoints, end]
        start_index, end_index = 0, len(points) - 1
        matrix = self.cost_model.compute_matrix(points)
        matrix.validate(len(points))

        waypoint_indices = list(range(1, end_index))
        sweep_cap = self.limits.cap(len(waypoints))
        if len(waypoint_indices) == 1:
            tour = waypoint_indices
            construction_distance = path_distance(matrix, [start_index, *tour, end_index])
            sweeps = 0
        else:
            greedy = nearest_neighbor(matrix, start_index, waypoint_indices)
            construction_distance = path_distance(matrix, [start_index, *greedy, end_index])
            tour, _, sweeps = two_opt(matrix, greedy, start_index, end_index, sweep_cap)

        path = [start_index, *tour, end_index]
        legs, total_distance, total_time = build_legs(points, matrix, path)

        logger.info(
            f"Optimized {len(waypoints)} waypoints with {matrix.source} costs: "
            f"{construction_distance:.3f} km greedy -> {total_distance:.3f} km after {sweeps} sweeps"
        )

        return TourResult(
            ordered_waypoints=[points[index] for index in tour],
            total_distance_km=round_half_up(total_distance, 1),
            total_time_min=int(round_half_up(total_time)),
            legs=legs,
            metadata={
                "waypoint_count": len(waypoints),
                "cost_source": matrix.source,
                "fallback_reason": matrix.fallback_reason,
                "construction_distance_km": construction_distance,
                "optimized_distance_km": total_distance,
                "sweeps": sweeps,
                "sweep_cap": sweep_cap,
            },
        )
