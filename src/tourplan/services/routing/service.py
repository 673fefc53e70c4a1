"""Routing orchestration service."""

from __future__ import annotations

import logging

from ...config import Settings, settings
from ...models.domain import Point
from ...schemas.routing import LegModel, OptimizeRequest, OptimizeResponse, PointModel
from ..export.geojson import tour_to_feature
from .cost_model import CostModel, build_cost_model
from .models import TourResult
from .solver import SearchLimits, TourSolver

logger = logging.getLogger(__name__)


def _to_point(model: PointModel) -> Point:
    return Point(
        latitude=model.lat,
        longitude=model.lng,
        name=model.name,
        memo=model.memo,
        stay_minutes=model.stay_minutes,
        desired_time=model.desired_time,
    )


def _to_model(point: Point) -> PointModel:
    return PointModel(
        lat=point.latitude,
        lng=point.longitude,
        name=point.name,
        memo=point.memo,
        stay_minutes=point.stay_minutes,
        desired_time=point.desired_time,
    )


def build_solver(config: Settings, cost_model: CostModel | None = None) -> TourSolver:
    return TourSolver(
        cost_model=cost_model or build_cost_model(config),
        limits=SearchLimits(
            max_sweeps=config.solver_max_sweeps,
            sweeps_per_waypoint=config.solver_sweeps_per_waypoint,
        ),
        max_waypoints=config.max_waypoints,
    )


def optimize_tour(
    payload: OptimizeRequest,
    cost_model: CostModel | None = None,
    config: Settings | None = None,
) -> OptimizeResponse:
    config = config or settings
    start = _to_point(payload.start)
    end = _to_point(payload.end)
    waypoints = [_to_point(waypoint) for waypoint in payload.waypoints]

    solver = build_solver(config, cost_model)
    result: TourResult = solver.solve(start, end, waypoints)

    if result.metadata.get("fallback_reason"):
        logger.info(f"Tour computed with haversine fallback: {result.metadata['fallback_reason']}")

    route_geojson = None
    if result.ordered_waypoints:
        route_geojson = tour_to_feature(
            start,
            result.ordered_waypoints,
            end,
            properties={
                "total_distance_km": result.total_distance_km,
                "total_time_min": result.total_time_min,
            },
        )

    return OptimizeResponse(
        ordered_waypoints=[_to_model(point) for point in result.ordered_waypoints],
        total_distance_km=result.total_distance_km,
        total_time_min=result.total_time_min,
        legs=[
            LegModel(
                origin=_to_model(leg.origin),
                destination=_to_model(leg.destination),
                distance_km=leg.distance_km,
                time_min=leg.time_min,
            )
            for leg in result.legs
        ],
        route_geojson=route_geojson,
        metadata=result.metadata,
    )
