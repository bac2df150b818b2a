from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Request

from uniview.responses import ok

router = APIRouter(tags=["health"])


@router.get("/health")
def health(request: Request):
    service = request.app.state.lot_service
    return ok(
        {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "storeAvailable": service.store.available,
            "fallback": service.use_fallback,
        },
        request,
    )
