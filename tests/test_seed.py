import json
import random
from collections import Counter
from datetime import datetime, timezone

from uniview.aggregation import aggregate_lot
from uniview.data_loader import dataset_from_rows, load_dataset_from_file
from uniview.seed import DEMO_LOTS, generate_dataset, main

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


def test_dataset_matches_lot_capacities():
    dataset = generate_dataset(rng=random.Random(42), now=NOW)

    per_lot = Counter(s["lotId"] for s in dataset["spaces"])
    for lot in DEMO_LOTS:
        assert per_lot[lot["lotId"]] == lot["totalSpaces"]

    statuses_by_lot: dict[str, Counter] = {}
    for s in dataset["spaces"]:
        statuses_by_lot.setdefault(s["lotId"], Counter())[s["status"]] += 1
    for lot in DEMO_LOTS:
        counts = statuses_by_lot[lot["lotId"]]
        assert counts["available"] == lot["currentAvailable"]
        assert counts["occupied"] + counts["offline"] == lot["totalSpaces"] - lot["currentAvailable"]


def test_space_fields():
    dataset = generate_dataset(rng=random.Random(1), now=NOW)
    busch = [s for s in dataset["spaces"] if s["lotId"] == "LOT_BUSCH_SC"]

    node_ids = {s["nodeId"] for s in busch}
    assert "NODE_LOT_BUSCH_SC_001" in node_ids
    assert "NODE_LOT_BUSCH_SC_150" in node_ids
    assert {s["spaceNumber"].split("-")[0] for s in busch} == {"A", "B", "C"}
    for s in busch:
        assert 70 <= s["batteryLevel"] <= 100
        assert -80 <= s["signalStrength"] <= -40
        assert 0.95 <= s["confidence"] <= 1.0
        assert abs(s["location"]["latitude"] - 40.5231) < 0.0011


def test_same_seed_same_dataset():
    a = generate_dataset(rng=random.Random(9), now=NOW)
    b = generate_dataset(rng=random.Random(9), now=NOW)
    assert a == b


def test_generated_dataset_loads_and_aggregates():
    dataset = generate_dataset(rng=random.Random(3), now=NOW)
    result = dataset_from_rows(dataset["lots"], dataset["spaces"], source="generated")

    assert len(result.lots) == len(DEMO_LOTS)
    assert len(result.spaces) == sum(lot["totalSpaces"] for lot in DEMO_LOTS)

    stadium = next(lot for lot in result.lots if lot.lot_id == "LOT_STADIUM")
    spaces = [s for s in result.spaces if s.lot_id == "LOT_STADIUM"]
    aggregated = aggregate_lot(stadium, spaces)
    assert aggregated.available_spaces == 423
    assert aggregated.total_spaces == 500


def test_cli_writes_json(tmp_path):
    out = tmp_path / "nested" / "seed.json"
    assert main(["--out", str(out), "--seed", "5"]) == 0

    with open(out, encoding="utf-8") as f:
        written = json.load(f)
    assert {lot["lotId"] for lot in written["lots"]} == {lot["lotId"] for lot in DEMO_LOTS}
    assert len(load_dataset_from_file(str(out)).spaces) == len(written["spaces"])
