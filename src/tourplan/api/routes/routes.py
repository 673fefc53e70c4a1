"""Routing endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ...schemas.routing import OptimizeRequest, OptimizeResponse
from ...services.routing.service import optimize_tour

router = APIRouter(prefix="/routes", tags=["routes"])


@router.post("/optimize", response_model=OptimizeResponse, status_code=status.HTTP_200_OK)
def optimize(payload: OptimizeRequest) -> OptimizeResponse:
    try:
        return optimize_tour(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error optimizing route: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Route optimization failed: {str(exc)}",
        ) from exc
