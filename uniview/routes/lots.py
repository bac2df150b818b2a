from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Request

from uniview.errors import ValidationError
from uniview.responses import ok

router = APIRouter(prefix="/lots", tags=["lots"])


@router.get("")
def list_lots(
    request: Request,
    lat: Optional[float] = None,
    lon: Optional[float] = None,
    radius_m: Optional[float] = None,
    limit: int = 20,
):
    """
    All parking lots with live occupancy.

    - **lat, lon**: when both are given, lots are sorted by distance from
      that point and annotated with `distanceM`
    - **radius_m**: optional maximum distance in meters
    - **limit**: maximum number of nearby lots (default: 20)
    """
    service = request.app.state.lot_service
    if lat is None and lon is None:
        return ok(service.list_lots(), request)
    if lat is None or lon is None:
        raise ValidationError("lat and lon must be given together")
    return ok(service.find_nearby(lat, lon, radius_m=radius_m, limit=limit), request)


@router.get("/{lot_id}")
def get_lot(lot_id: str, request: Request):
    return ok(request.app.state.lot_service.get_lot(lot_id), request)


@router.get("/{lot_id}/spaces")
def get_spaces(
    lot_id: str,
    request: Request,
    status: Optional[str] = None,
    zone: Optional[str] = None,
):
    """
    Raw space records of a lot.

    - **status**: exact status match (available, occupied, reserved, offline)
    - **zone**: space-number prefix, e.g. `A` or `Level2`
    """
    listing = request.app.state.lot_service.get_spaces(lot_id, status=status, zone=zone)
    return ok(listing, request)


@router.get("/{lot_id}/prediction")
def get_prediction(lot_id: str, request: Request, hours: Optional[int] = None):
    """
    Hourly occupancy forecast for a lot.

    - **hours**: forecast horizon, 1 to 12 (default: 3)
    """
    settings = request.app.state.settings
    if hours is None:
        hours = settings.default_prediction_hours
    if hours < 1 or hours > settings.max_prediction_hours:
        raise ValidationError(
            f"Hours must be between 1 and {settings.max_prediction_hours}",
            details={"field": "hours"},
        )

    return ok(request.app.state.lot_service.get_prediction(lot_id, hours), request)
