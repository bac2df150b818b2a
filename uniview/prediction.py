from __future__ import annotations

import random
from datetime import datetime, timedelta

from uniview.models import (
    OccupancyPrediction,
    ParkingLot,
    PredictionDataPoint,
    PredictionFactors,
    Trend,
)

BASE_CONFIDENCE = 0.85
CONFIDENCE_STEP = 0.05
TREND_THRESHOLD = 3.0
VARIANCE = 5.0
HIGH_DEMAND_THRESHOLD = 85.0
LOW_AVAILABILITY_SPACES = 10

DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))


def time_of_day_bias(rate: float, hour: int) -> float:
    """Shift a base occupancy rate by the hour it is predicted for.

    Late morning and mid-afternoon run busier (capped at 95), the evening
    rush empties lots (floored at 20).
    """
    if 9 <= hour <= 11:
        return min(95.0, rate + 15)
    if 14 <= hour <= 16:
        return min(95.0, rate + 20)
    if 17 <= hour <= 19:
        return max(20.0, rate - 15)
    return rate


def classify_trend(current: float, previous: float | None) -> Trend:
    if previous is None:
        return "STABLE"
    delta = current - previous
    if delta > TREND_THRESHOLD:
        return "INCREASING"
    if delta < -TREND_THRESHOLD:
        return "DECREASING"
    return "STABLE"


def time_of_day(when: datetime) -> str:
    if when.hour < 12:
        return "Morning"
    if when.hour < 17:
        return "Afternoon"
    return "Evening"


def format_clock(when: datetime) -> str:
    hour = when.hour % 12 or 12
    suffix = "PM" if when.hour >= 12 else "AM"
    return f"{hour}:{when.minute:02d} {suffix}"


def peak_point(points: list[PredictionDataPoint]) -> PredictionDataPoint | None:
    peak: PredictionDataPoint | None = None
    for p in points:
        # strict comparison keeps the first of equal maxima
        if peak is None or p.predicted_occupancy > peak.predicted_occupancy:
            peak = p
    return peak


def generate_recommendation(points: list[PredictionDataPoint], lot: ParkingLot) -> str:
    peak = peak_point(points)
    if peak is not None and peak.predicted_occupancy > HIGH_DEMAND_THRESHOLD:
        return (
            f"High demand expected around {format_clock(peak.timestamp)}. "
            "Consider arriving earlier for better availability."
        )
    if lot.available_spaces < LOW_AVAILABILITY_SPACES:
        return "Limited spaces available now. Consider alternative lots if possible."
    return "Good availability expected. No concerns at this time."


def predict_occupancy(
    lot: ParkingLot,
    hours: int,
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> OccupancyPrediction:
    """Heuristic hourly occupancy forecast for an aggregated lot.

    ``hours`` is expected to be pre-validated by the caller; it is not
    clamped here. ``now`` and ``rng`` exist so callers can pin the clock and
    the variance term.
    """

    now = now or datetime.now().astimezone()
    rng = rng if rng is not None else random.Random()

    points: list[PredictionDataPoint] = []
    for i in range(1, hours + 1):
        when = now + timedelta(hours=i)

        occ = time_of_day_bias(lot.occupancy_rate, when.hour)
        occ += rng.uniform(-VARIANCE, VARIANCE)
        occ = clamp(occ, 0.0, 100.0)

        predicted = round(occ, 1)
        previous = points[-1].predicted_occupancy if points else None

        points.append(
            PredictionDataPoint(
                timestamp=when,
                predicted_occupancy=predicted,
                predicted_available=round(lot.total_spaces * (1 - occ / 100)),
                confidence=round(BASE_CONFIDENCE - CONFIDENCE_STEP * i, 2),
                trend=classify_trend(predicted, previous),
            )
        )

    return OccupancyPrediction(
        lot_id=lot.lot_id,
        current_occupancy=lot.occupancy_rate,
        current_available=lot.available_spaces,
        predictions=points,
        confidence=BASE_CONFIDENCE,
        generated_at=now,
        factors=PredictionFactors(
            day_of_week=DAY_NAMES[now.weekday()],
            time_of_day=time_of_day(now),
            special_events=[],
            weather="Clear",
        ),
        recommendation=generate_recommendation(points, lot),
    )
