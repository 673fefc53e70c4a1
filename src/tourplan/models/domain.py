"""Domain models for tour stops."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class Point:
    """A geocoded stop with the caller's display metadata."""

    latitude: float
    longitude: float
    name: Optional[str] = None
    memo: Optional[str] = None
    stay_minutes: Optional[int] = None
    desired_time: Optional[str] = None

    @property
    def coordinates(self) -> tuple[float, float]:
        return (self.latitude, self.longitude)
