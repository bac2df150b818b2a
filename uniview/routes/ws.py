from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from fastapi.concurrency import run_in_threadpool

from uniview.errors import UniviewError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


def _message(kind: str, **fields: Any) -> dict[str, Any]:
    return {"type": kind, "timestamp": datetime.now(timezone.utc).isoformat(), **fields}


@router.websocket("/ws")
async def lot_updates(websocket: WebSocket):
    """Lot subscriptions: ``subscribe`` answers with a ``lot_update`` snapshot."""
    await websocket.accept()
    service = websocket.app.state.lot_service
    subscribed: set[str] = set()

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                msg = json.loads(raw)
            except ValueError:
                await websocket.send_json(_message("error", code="BAD_MESSAGE", message="Invalid JSON"))
                continue
            if not isinstance(msg, dict):
                await websocket.send_json(_message("error", code="BAD_MESSAGE", message="Expected an object"))
                continue

            kind = msg.get("type")
            lot_id = str(msg.get("lotId") or "")

            if kind == "ping":
                await websocket.send_json(_message("pong"))
            elif kind == "subscribe":
                try:
                    lot = await run_in_threadpool(service.get_lot, lot_id)
                except UniviewError as e:
                    await websocket.send_json(_message("error", code=e.code, message=e.message, lotId=lot_id))
                    continue
                subscribed.add(lot_id)
                await websocket.send_json(
                    _message("lot_update", lotId=lot_id, data=lot.model_dump(by_alias=True, mode="json"))
                )
            elif kind == "unsubscribe":
                subscribed.discard(lot_id)
                await websocket.send_json(_message("unsubscribed", lotId=lot_id))
            else:
                await websocket.send_json(
                    _message("error", code="BAD_MESSAGE", message=f"Unknown message type: {kind}")
                )
    except WebSocketDisconnect:
        logger.debug("WebSocket closed with %d subscriptions", len(subscribed))
