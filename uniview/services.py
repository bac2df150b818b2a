from __future__ import annotations

import logging
import random
import time
from datetime import datetime, timezone
from threading import Lock
from typing import Callable

from uniview.aggregation import aggregate_lot
from uniview.errors import LotNotFoundError, StoreUnavailableError
from uniview.geo import haversine_m
from uniview.models import (
    Coordinates,
    NearbyLot,
    OccupancyPrediction,
    ParkingLot,
    ParkingSpace,
    SpaceListing,
)
from uniview.prediction import predict_occupancy
from uniview.store import ParkingStore

logger = logging.getLogger(__name__)

# Served once the store has failed; counts are fixed, not aggregated.
FALLBACK_LOTS: tuple[ParkingLot, ...] = (
    ParkingLot(
        lot_id="lot-1",
        name="Lot A - Student Center",
        location=Coordinates(latitude=40.5008, longitude=-74.4474),
        total_spaces=150,
        available_spaces=42,
        occupied_spaces=103,
        offline_spaces=5,
        occupancy_rate=68.7,
        lot_type="student",
        amenities=["covered", "ev-charging", "handicap"],
        hours="24/7",
    ),
    ParkingLot(
        lot_id="lot-2",
        name="Lot B - Engineering Building",
        location=Coordinates(latitude=40.5020, longitude=-74.4490),
        total_spaces=200,
        available_spaces=15,
        occupied_spaces=180,
        offline_spaces=5,
        occupancy_rate=90.0,
        lot_type="faculty",
        amenities=["covered"],
        hours="6AM - 10PM",
    ),
    ParkingLot(
        lot_id="lot-3",
        name="Lot C - Library",
        location=Coordinates(latitude=40.4995, longitude=-74.4460),
        total_spaces=100,
        available_spaces=67,
        occupied_spaces=30,
        offline_spaces=3,
        occupancy_rate=30.0,
        lot_type="visitor",
        amenities=["ev-charging"],
        hours="24/7",
    ),
)


class LotService:
    """Lot lookups over the store, aggregated on every read.

    The first ``StoreUnavailableError`` switches the service to
    ``FALLBACK_LOTS`` for the rest of the process lifetime.
    """

    def __init__(
        self,
        store: ParkingStore,
        prediction_cache_ttl_s: float = 300,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.store = store
        self.use_fallback = False
        self.prediction_cache_ttl_s = prediction_cache_ttl_s
        self.rng = rng
        self._clock = clock
        self._cache_lock = Lock()
        self._prediction_cache: dict[tuple[str, int], tuple[float, OccupancyPrediction]] = {}

    def _trip_fallback(self, exc: Exception) -> None:
        if not self.use_fallback:
            logger.warning("Parking store unavailable (%s), switching to fallback data", exc)
        self.use_fallback = True

    def _fallback_lots(self) -> list[ParkingLot]:
        now = datetime.now(timezone.utc)
        return [lot.model_copy(update={"last_update": now}) for lot in FALLBACK_LOTS]

    def _aggregate(self, lot: ParkingLot) -> ParkingLot:
        return aggregate_lot(lot, self.store.query_spaces_by_lot(lot.lot_id))

    def list_lots(self) -> list[ParkingLot]:
        if not self.use_fallback:
            try:
                return [self._aggregate(lot) for lot in self.store.scan_lots()]
            except StoreUnavailableError as e:
                self._trip_fallback(e)
        logger.debug("Serving fallback lots")
        return self._fallback_lots()

    def get_lot(self, lot_id: str) -> ParkingLot:
        if not self.use_fallback:
            try:
                lot = self.store.get_lot(lot_id)
                if lot is None:
                    raise LotNotFoundError(lot_id)
                return self._aggregate(lot)
            except StoreUnavailableError as e:
                self._trip_fallback(e)

        for lot in self._fallback_lots():
            if lot.lot_id == lot_id:
                return lot
        raise LotNotFoundError(lot_id)

    def _spaces_for(self, lot_id: str) -> list[ParkingSpace]:
        if self.use_fallback:
            return []
        try:
            return self.store.query_spaces_by_lot(lot_id)
        except StoreUnavailableError as e:
            self._trip_fallback(e)
            return []

    def get_spaces(
        self,
        lot_id: str,
        status: str | None = None,
        zone: str | None = None,
    ) -> SpaceListing:
        self.get_lot(lot_id)

        spaces = self._spaces_for(lot_id)
        if status:
            spaces = [s for s in spaces if s.status == status]
        if zone:
            spaces = [s for s in spaces if (s.space_number or "").startswith(zone)]

        return SpaceListing(
            lot_id=lot_id,
            spaces=spaces,
            total_count=len(spaces),
            available_count=sum(1 for s in spaces if s.status == "available"),
            occupied_count=sum(1 for s in spaces if s.status == "occupied"),
        )

    def _cache_get(self, key: tuple[str, int]) -> OccupancyPrediction | None:
        if self.prediction_cache_ttl_s <= 0:
            return None
        with self._cache_lock:
            item = self._prediction_cache.get(key)
        if item is None:
            return None
        ts, prediction = item
        if self._clock() - ts <= self.prediction_cache_ttl_s:
            return prediction
        return None

    def _cache_put(self, key: tuple[str, int], prediction: OccupancyPrediction) -> None:
        if self.prediction_cache_ttl_s <= 0:
            return
        with self._cache_lock:
            self._prediction_cache[key] = (self._clock(), prediction)

    def get_prediction(
        self,
        lot_id: str,
        hours: int = 3,
        now: datetime | None = None,
    ) -> OccupancyPrediction:
        if now is not None:
            # series pinned to a caller clock are never memoized
            return predict_occupancy(self.get_lot(lot_id), hours, now=now, rng=self.rng)

        key = (lot_id, hours)
        cached = self._cache_get(key)
        if cached is not None:
            return cached

        lot = self.get_lot(lot_id)
        prediction = predict_occupancy(lot, hours, rng=self.rng)
        self._cache_put(key, prediction)
        return prediction

    def find_nearby(
        self,
        lat: float,
        lon: float,
        radius_m: float | None = None,
        limit: int = 20,
    ) -> list[NearbyLot]:
        rows: list[NearbyLot] = []
        for lot in self.list_lots():
            if lot.location is None:
                continue
            d = haversine_m(lat, lon, lot.location.latitude, lot.location.longitude)
            if radius_m is not None and d > radius_m:
                continue
            rows.append(NearbyLot(**lot.model_dump(), distance_m=d))

        rows.sort(key=lambda r: r.distance_m)
        return rows[: max(0, int(limit))]
