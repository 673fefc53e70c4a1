"""Routing domain models."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ...models.domain import Point


class TourInputError(ValueError):
    """Raised when points or a cost matrix cannot be optimized."""


@dataclass(frozen=True, slots=True)
class Cost:
    distance_km: float
    time_min: float


ZERO_COST = Cost(distance_km=0.0, time_min=0.0)


@dataclass(frozen=True, slots=True)
class CostMatrix:
    """Square (from, to) -> Cost table over the node list [start, *waypoints, end].

    Symmetry is not assumed. ``source`` names the strategy that produced the
    entries; ``fallback_reason`` is set when the network strategy degraded to
    the geometric one.
    """

    entries: tuple[tuple[Cost, ...], ...]
    source: str
    fallback_reason: Optional[str] = None

    @classmethod
    def from_rows(
        cls,
        rows: Sequence[Sequence[Cost]],
        source: str,
        fallback_reason: Optional[str] = None,
    ) -> "CostMatrix":
        return cls(
            entries=tuple(tuple(row) for row in rows),
            source=source,
            fallback_reason=fallback_reason,
        )

    @property
    def size(self) -> int:
        return len(self.entries)

    def distance(self, from_index: int, to_index: int) -> float:
        return self.entries[from_index][to_index].distance_km

    def time(self, from_index: int, to_index: int) -> float:
        return self.entries[from_index][to_index].time_min

    def validate(self, expected_size: int) -> None:
        """Reject matrices the optimizer cannot reason about."""
        if self.size != expected_size:
            raise TourInputError(
                f"Cost matrix has {self.size} rows, expected {expected_size}."
            )
        for i, row in enumerate(self.entries):
            if len(row) != expected_size:
                raise TourInputError(
                    f"Cost matrix row {i} has {len(row)} entries, expected {expected_size}."
                )
            for j, cost in enumerate(row):
                for label, value in (("distance", cost.distance_km), ("time", cost.time_min)):
                    if not math.isfinite(value) or value < 0:
                        raise TourInputError(
                            f"Cost matrix {label} from {i} to {j} must be finite and non-negative, got {value!r}."
                        )


@dataclass(frozen=True, slots=True)
class Leg:
    origin: Point
    destination: Point
    distance_km: float
    time_min: float


@dataclass(slots=True)
class TourResult:
    ordered_waypoints: List[Point]
    total_distance_km: float
    total_time_min: int
    legs: List[Leg]
    metadata: dict = field(default_factory=dict)
