"""Routing request/response schemas."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class PointModel(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    name: Optional[str] = Field(default=None, description="Display name or address of the stop.")
    memo: Optional[str] = Field(default=None, description="Free-text note shown with the stop.")
    stay_minutes: Optional[int] = Field(default=None, ge=0, description="Minimum stay at the stop.")
    desired_time: Optional[str] = Field(default=None, description="Desired arrival time, e.g. '10:30'.")


class OptimizeRequest(BaseModel):
    start: PointModel
    end: PointModel
    waypoints: List[PointModel] = Field(default_factory=list)


class LegModel(BaseModel):
    origin: PointModel
    destination: PointModel
    distance_km: float
    time_min: float


class OptimizeResponse(BaseModel):
    ordered_waypoints: List[PointModel]
    total_distance_km: float
    total_time_min: int
    legs: List[LegModel]
    route_geojson: Optional[Dict[str, Any]] = None
    metadata: dict
