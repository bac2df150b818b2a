from __future__ import annotations

import csv
import json
import logging
import math
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable

from pydantic import ValidationError

from uniview.models import (
    SPACE_STATUSES,
    Coordinates,
    LotMetadata,
    ParkingLot,
    ParkingSpace,
    SpaceMetadata,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadResult:
    lots: list[ParkingLot]
    spaces: list[ParkingSpace]
    source: str


def _try_parse_float(v: object) -> float | None:
    if v is None or isinstance(v, bool):
        return None
    s = v if isinstance(v, (int, float)) else str(v).strip()
    if s == "":
        return None
    try:
        f = float(s)
    except (ValueError, OverflowError):
        return None
    return f if math.isfinite(f) else None


def _try_parse_int(v: object) -> int | None:
    f = _try_parse_float(v)
    return int(f) if f is not None else None


def _try_parse_datetime(v: object) -> datetime | None:
    if isinstance(v, datetime):
        dt = v
    else:
        s = str(v or "").strip()
        if not s:
            return None
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(s)
        except ValueError:
            return None
    # naive timestamps are taken as UTC so they stay comparable
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _row_get(row: dict, keys: Iterable[str]) -> object | None:
    for k in keys:
        if k in row and row[k] not in (None, ""):
            return row[k]
    return None


def _as_str_list(v: object) -> list[str]:
    if isinstance(v, list):
        return [str(x) for x in v if x not in (None, "")]
    if isinstance(v, str):
        return [x.strip() for x in v.split(";") if x.strip()]
    return []


def _parse_location(row: dict) -> Coordinates | None:
    loc = row.get("location")
    if isinstance(loc, dict):
        row = {**row, **loc}

    lat = _try_parse_float(_row_get(row, ["latitude", "lat", "LAT", "Y"]))
    lon = _try_parse_float(_row_get(row, ["longitude", "lon", "lng", "LON", "X"]))
    if lat is None or lon is None:
        return None
    return Coordinates(latitude=lat, longitude=lon)


def _normalize_lot(row: dict) -> ParkingLot | None:
    lot_id = _row_get(row, ["lotId", "lot_id", "id"])
    if lot_id is None:
        return None
    lot_id = str(lot_id)

    meta_raw = row.get("metadata") if isinstance(row.get("metadata"), dict) else {}
    amenities = row.get("amenities") or meta_raw.get("amenities")
    lot_type = _row_get(row, ["type", "lotType"])
    hours = _row_get(row, ["hours", "accessHours"])
    description = _row_get(row, ["description"])

    return ParkingLot(
        lot_id=lot_id,
        name=str(_row_get(row, ["name", "label"]) or lot_id),
        description=str(description) if description is not None else None,
        location=_parse_location(row),
        total_spaces=_try_parse_int(_row_get(row, ["totalSpaces", "total_spaces", "capacity"])) or 0,
        last_update=_try_parse_datetime(_row_get(row, ["lastUpdate", "lastUpdated", "last_update"])),
        lot_type=str(lot_type) if lot_type is not None else None,
        hours=str(hours) if hours is not None else None,
        zones=_as_str_list(row.get("zones")),
        amenities=_as_str_list(amenities),
        metadata=LotMetadata.model_validate(meta_raw) if meta_raw else None,
    )


def _normalize_space(row: dict) -> ParkingSpace | None:
    node_id = _row_get(row, ["nodeId", "node_id", "id"])
    lot_id = _row_get(row, ["lotId", "lot_id"])
    if node_id is None or lot_id is None:
        return None

    status = str(_row_get(row, ["status"]) or "").strip().lower()
    if status not in SPACE_STATUSES:
        return None

    last_update = _try_parse_datetime(_row_get(row, ["lastUpdate", "lastUpdated", "last_update"]))
    if last_update is None:
        return None

    meta_raw = row.get("metadata")
    space_number = _row_get(row, ["spaceNumber", "space_number"])

    return ParkingSpace(
        node_id=str(node_id),
        lot_id=str(lot_id),
        status=status,
        last_update=last_update,
        location=_parse_location(row),
        space_number=str(space_number) if space_number is not None else None,
        battery_level=_try_parse_int(_row_get(row, ["batteryLevel", "battery_level"])),
        signal_strength=_try_parse_int(_row_get(row, ["signalStrength", "signal_strength"])),
        confidence=_try_parse_float(_row_get(row, ["confidence"])),
        metadata=SpaceMetadata.model_validate(meta_raw) if isinstance(meta_raw, dict) else None,
    )


def _normalize_row(normalize, row: object):
    if not isinstance(row, dict):
        return None
    try:
        return normalize(row)
    except ValidationError as e:
        logger.debug("Rejected row %r: %s", row, e)
        return None


def dataset_from_rows(lot_rows: list, space_rows: list, source: str) -> LoadResult:
    lots: list[ParkingLot] = []
    skipped_lots = 0
    for row in lot_rows:
        lot = _normalize_row(_normalize_lot, row)
        if lot is None:
            skipped_lots += 1
            continue
        lots.append(lot)

    spaces: list[ParkingSpace] = []
    skipped = 0
    for row in space_rows:
        space = _normalize_row(_normalize_space, row)
        if space is None:
            skipped += 1
            continue
        spaces.append(space)

    if skipped_lots:
        logger.warning("Skipped %d malformed lot rows from %s", skipped_lots, source)
    if skipped:
        logger.warning("Skipped %d malformed space rows from %s", skipped, source)

    # Spaces can reference lots the file does not describe (CSV exports)
    known = {lot.lot_id for lot in lots}
    for space in spaces:
        if space.lot_id not in known:
            lots.append(ParkingLot(lot_id=space.lot_id, name=space.lot_id))
            known.add(space.lot_id)

    return LoadResult(lots=lots, spaces=spaces, source=source)


def load_dataset_from_file(path: str) -> LoadResult:
    if not os.path.exists(path):
        raise FileNotFoundError(
            f"Parking dataset not found: {path}. "
            f"Generate one with `python -m uniview.seed --out {path}`."
        )

    ext = os.path.splitext(path)[1].lower()
    if ext == ".csv":
        with open(path, "r", encoding="utf-8-sig", newline="") as f:
            rows = list(csv.DictReader(f))
        return dataset_from_rows([], rows, source=path)

    if ext == ".json":
        with open(path, "r", encoding="utf-8") as f:
            obj: Any = json.load(f)

        if isinstance(obj, dict) and ("lots" in obj or "spaces" in obj):
            return dataset_from_rows(obj.get("lots") or [], obj.get("spaces") or [], source=path)

        if isinstance(obj, list):
            return dataset_from_rows([], obj, source=path)

        raise ValueError(f"Unsupported JSON structure in {path}")

    raise ValueError(f"Unsupported file extension: {ext} (expected .csv/.json)")
