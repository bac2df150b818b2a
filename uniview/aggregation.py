from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable

from uniview.models import ParkingLot, ParkingSpace


def occupancy_rate(occupied: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return round(occupied / total * 100, 2)


def aggregate_lot(
    lot: ParkingLot,
    spaces: Iterable[ParkingSpace],
    now: datetime | None = None,
) -> ParkingLot:
    """Recompute a lot's live counts from its space records.

    Reserved spaces are part of the total but count as neither available,
    occupied nor offline. With no space records the lot's static capacity is
    kept as the total. ``lastUpdate`` is the aggregation time, not the
    freshest sensor reading.
    """

    spaces = list(spaces)
    available = sum(1 for s in spaces if s.status == "available")
    occupied = sum(1 for s in spaces if s.status == "occupied")
    offline = sum(1 for s in spaces if s.status == "offline")
    total = len(spaces) or lot.total_spaces

    return lot.model_copy(
        update={
            "total_spaces": total,
            "available_spaces": available,
            "occupied_spaces": occupied,
            "offline_spaces": offline,
            "occupancy_rate": occupancy_rate(occupied, total),
            "last_update": now or datetime.now(timezone.utc),
        }
    )
