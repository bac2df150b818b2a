"""Demo dataset generator.

Writes a JSON file with ``lots`` and ``spaces`` arrays that
``uniview.data_loader`` can load:

    python -m uniview.seed --out data/uniview_seed.json --seed 42
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import random
from datetime import datetime, timedelta, timezone
from typing import Any

logger = logging.getLogger(__name__)

DEMO_LOTS: list[dict[str, Any]] = [
    {
        "lotId": "LOT_BUSCH_SC",
        "name": "Busch Student Center",
        "description": "Main student parking near Busch Student Center",
        "location": {"latitude": 40.5231, "longitude": -74.4587},
        "totalSpaces": 150,
        "currentAvailable": 47,
        "zones": ["A", "B", "C"],
        "metadata": {
            "accessHours": "24/7",
            "permitTypes": ["Student", "Faculty", "Visitor"],
            "amenities": ["Well-lit", "Security cameras", "EV Charging"],
            "rates": {"hourly": 2.0, "daily": 10.0},
        },
    },
    {
        "lotId": "LOT_COLLEGE_AVE",
        "name": "College Avenue Garage",
        "description": "Multi-level parking garage on College Avenue",
        "location": {"latitude": 40.5013, "longitude": -74.4474},
        "totalSpaces": 200,
        "currentAvailable": 89,
        "zones": ["Level1", "Level2", "Level3", "Level4"],
        "metadata": {
            "accessHours": "6AM-12AM",
            "permitTypes": ["Student", "Faculty", "Visitor"],
            "amenities": ["Covered", "Security cameras", "Elevator"],
            "rates": {"hourly": 3.0, "daily": 15.0},
        },
    },
    {
        "lotId": "LOT_LIVINGSTON",
        "name": "Livingston Plaza",
        "description": "Open parking lot near Livingston Student Center",
        "location": {"latitude": 40.5239, "longitude": -74.4363},
        "totalSpaces": 120,
        "currentAvailable": 65,
        "zones": ["North", "South"],
        "metadata": {
            "accessHours": "24/7",
            "permitTypes": ["Student", "Faculty"],
            "amenities": ["Well-lit", "Security patrol"],
            "rates": {"hourly": 1.5, "daily": 8.0},
        },
    },
    {
        "lotId": "LOT_COOK_DOUGLASS",
        "name": "Cook/Douglass Lot",
        "description": "Large parking area serving Cook and Douglass campuses",
        "location": {"latitude": 40.4823, "longitude": -74.4357},
        "totalSpaces": 180,
        "currentAvailable": 112,
        "zones": ["Cook", "Douglass"],
        "metadata": {
            "accessHours": "24/7",
            "permitTypes": ["Student", "Faculty", "Staff"],
            "amenities": ["Well-lit", "Handicap accessible"],
            "rates": {"hourly": 1.0, "daily": 6.0},
        },
    },
    {
        "lotId": "LOT_STADIUM",
        "name": "Stadium Parking",
        "description": "Large lot near the football stadium",
        "location": {"latitude": 40.5137, "longitude": -74.4648},
        "totalSpaces": 500,
        "currentAvailable": 423,
        "zones": ["A", "B", "C", "D", "E"],
        "metadata": {
            "accessHours": "6AM-10PM",
            "permitTypes": ["Event", "Faculty", "Staff"],
            "amenities": ["Shuttle service", "Security cameras"],
            "rates": {"hourly": 2.0, "daily": 12.0},
        },
    },
]

OFFLINE_PROBABILITY = 0.05
COORD_JITTER_DEG = 0.001
MAX_STALENESS_S = 300


def _iso(dt: datetime) -> str:
    return dt.isoformat().replace("+00:00", "Z")


def generate_spaces_for_lot(
    lot: dict[str, Any],
    rng: random.Random,
    now: datetime,
) -> list[dict[str, Any]]:
    total = int(lot["totalSpaces"])
    occupied_count = total - int(lot["currentAvailable"])
    zones = lot["zones"]
    base_lat = lot["location"]["latitude"]
    base_lon = lot["location"]["longitude"]

    spaces: list[dict[str, Any]] = []
    for i in range(total):
        zone = zones[i % len(zones)]
        space_in_zone = i // len(zones) + 1

        if i < occupied_count:
            status = "offline" if rng.random() < OFFLINE_PROBABILITY else "occupied"
        else:
            status = "available"

        spaces.append(
            {
                "nodeId": f"NODE_{lot['lotId']}_{i + 1:03d}",
                "lotId": lot["lotId"],
                "spaceNumber": f"{zone}-{space_in_zone:03d}",
                "status": status,
                "location": {
                    "latitude": base_lat + rng.uniform(-COORD_JITTER_DEG, COORD_JITTER_DEG),
                    "longitude": base_lon + rng.uniform(-COORD_JITTER_DEG, COORD_JITTER_DEG),
                },
                "lastUpdate": _iso(now - timedelta(seconds=rng.uniform(0, MAX_STALENESS_S))),
                "batteryLevel": rng.randint(70, 99),
                "signalStrength": rng.randint(-80, -41),
                "confidence": round(0.95 + rng.random() * 0.05, 4),
                "metadata": {
                    "installDate": "2025-09-01",
                    "hardwareVersion": "2.0",
                    "firmwareVersion": "1.0.3",
                },
            }
        )

    rng.shuffle(spaces)
    return spaces


def generate_dataset(
    rng: random.Random | None = None,
    now: datetime | None = None,
) -> dict[str, list[dict[str, Any]]]:
    rng = rng if rng is not None else random.Random()
    now = now or datetime.now(timezone.utc)

    lots = [{**lot, "lastUpdate": _iso(now)} for lot in DEMO_LOTS]
    spaces: list[dict[str, Any]] = []
    for lot in lots:
        spaces.extend(generate_spaces_for_lot(lot, rng, now))
    return {"lots": lots, "spaces": spaces}


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Generate a demo parking dataset.")
    parser.add_argument("--out", default="data/uniview_seed.json", help="output JSON path")
    parser.add_argument("--seed", type=int, default=None, help="random seed for reproducible output")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    dataset = generate_dataset(rng=random.Random(args.seed))

    out_dir = os.path.dirname(args.out)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    with open(args.out, "w", encoding="utf-8") as f:
        json.dump(dataset, f, indent=2)

    logger.info(
        "Wrote %d lots and %d spaces to %s",
        len(dataset["lots"]),
        len(dataset["spaces"]),
        args.out,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
