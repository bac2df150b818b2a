from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from uniview.config import Settings
from uniview.data_loader import dataset_from_rows
from uniview.main import create_app
from uniview.models import ParkingLot, ParkingSpace
from uniview.store import ParkingStore

T0 = datetime(2026, 3, 2, 8, 30, tzinfo=timezone.utc)


class FixedVariance:
    """Stand-in random source whose ``uniform`` always returns ``value``."""

    def __init__(self, value: float = 0.0):
        self.value = value

    def uniform(self, a: float, b: float) -> float:
        return self.value


def make_space(node_id: str, status: str, lot_id: str = "LOT_A", minutes_ago: int = 0, number: str | None = None):
    return ParkingSpace(
        node_id=node_id,
        lot_id=lot_id,
        status=status,
        last_update=T0 - timedelta(minutes=minutes_ago),
        space_number=number,
    )


def make_lot(**overrides) -> ParkingLot:
    fields = {"lot_id": "LOT_A", "name": "Lot A", "total_spaces": 100}
    fields.update(overrides)
    return ParkingLot(**fields)


LOT_ROWS = [
    {
        "lotId": "LOT_A",
        "name": "Lot A",
        "location": {"latitude": 40.5231, "longitude": -74.4587},
        "totalSpaces": 6,
        "zones": ["A", "B"],
    },
    {
        "lotId": "LOT_EMPTY",
        "name": "Empty Lot",
        "location": {"latitude": 40.4823, "longitude": -74.4357},
        "totalSpaces": 40,
    },
]

SPACE_ROWS = [
    {"nodeId": "N1", "lotId": "LOT_A", "status": "available", "spaceNumber": "A-001", "lastUpdate": "2026-03-02T08:00:00Z"},
    {"nodeId": "N2", "lotId": "LOT_A", "status": "occupied", "spaceNumber": "A-002", "lastUpdate": "2026-03-02T08:05:00Z"},
    {"nodeId": "N3", "lotId": "LOT_A", "status": "occupied", "spaceNumber": "B-001", "lastUpdate": "2026-03-02T07:55:00Z"},
    {"nodeId": "N4", "lotId": "LOT_A", "status": "offline", "spaceNumber": "B-002", "lastUpdate": "2026-03-02T08:10:00Z"},
    {"nodeId": "N5", "lotId": "LOT_A", "status": "reserved", "spaceNumber": "B-003", "lastUpdate": "2026-03-02T08:01:00Z"},
]


@pytest.fixture
def store() -> ParkingStore:
    s = ParkingStore()
    s.load(dataset_from_rows(LOT_ROWS, SPACE_ROWS, source="fixture"))
    return s


@pytest.fixture
def settings() -> Settings:
    return Settings(environment="test", prediction_cache_ttl_s=0, token_secret="test-secret")


@pytest.fixture
def client(store, settings) -> TestClient:
    app = create_app(settings=settings, store=store, rng=random.Random(7))
    return TestClient(app)
