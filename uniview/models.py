from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SpaceStatus = Literal["available", "occupied", "reserved", "offline"]
Trend = Literal["INCREASING", "DECREASING", "STABLE"]

SPACE_STATUSES: tuple[str, ...] = ("available", "occupied", "reserved", "offline")


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Coordinates(CamelModel):
    latitude: float
    longitude: float


class SpaceMetadata(CamelModel):
    install_date: str | None = None
    hardware_version: str | None = None
    firmware_version: str | None = None


class ParkingSpace(CamelModel):
    node_id: str
    lot_id: str
    status: SpaceStatus
    last_update: datetime
    location: Coordinates | None = None
    space_number: str | None = None
    battery_level: int | None = None
    signal_strength: int | None = None
    confidence: float | None = None
    metadata: SpaceMetadata | None = None


class LotRates(CamelModel):
    hourly: float | None = None
    daily: float | None = None


class LotMetadata(CamelModel):
    access_hours: str | None = None
    permit_types: list[str] = Field(default_factory=list)
    rates: LotRates | None = None


class ParkingLot(CamelModel):
    lot_id: str
    name: str
    description: str | None = None
    location: Coordinates | None = None
    total_spaces: int = 0
    available_spaces: int = 0
    occupied_spaces: int = 0
    offline_spaces: int = 0
    occupancy_rate: float = 0.0
    last_update: datetime | None = None
    lot_type: str | None = Field(default=None, alias="type")
    hours: str | None = None
    zones: list[str] = Field(default_factory=list)
    amenities: list[str] = Field(default_factory=list)
    metadata: LotMetadata | None = None


class PredictionDataPoint(CamelModel):
    timestamp: datetime
    predicted_occupancy: float
    predicted_available: int
    confidence: float
    trend: Trend = "STABLE"


class PredictionFactors(CamelModel):
    day_of_week: str
    time_of_day: str
    special_events: list[str] = Field(default_factory=list)
    weather: str | None = None


class OccupancyPrediction(CamelModel):
    lot_id: str
    current_occupancy: float
    current_available: int
    predictions: list[PredictionDataPoint]
    confidence: float
    generated_at: datetime
    factors: PredictionFactors
    recommendation: str


class UserSettings(CamelModel):
    notifications_enabled: bool = True
    push_notifications: bool = True
    email_notifications: bool = False
    default_lot: str | None = None
    search_radius: int = 5000
    preferred_view: Literal["map", "list"] = "map"
    theme: Literal["light", "dark", "auto"] = "auto"
    prediction_timeframe: Literal[1, 2, 3] = 3


class User(CamelModel):
    user_id: str
    email: str
    name: str
    role: Literal["user", "admin"] = "user"
    password_hash: str | None = Field(default=None, exclude=True)
    settings: UserSettings = Field(default_factory=UserSettings)
    favorite_spots: list[str] = Field(default_factory=list)
    created_at: datetime
    last_login: datetime | None = None


class AuthTokens(CamelModel):
    access_token: str
    refresh_token: str
    expires_in: int


class RegisterRequest(CamelModel):
    email: str | None = None
    password: str | None = None
    name: str | None = None
    first_name: str | None = None
    last_name: str | None = None


class LoginRequest(CamelModel):
    email: str | None = None
    password: str | None = None


class RefreshRequest(CamelModel):
    refresh_token: str | None = None


class ApiError(CamelModel):
    code: str
    message: str
    details: dict[str, Any] | None = None


class ResponseMeta(CamelModel):
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    request_id: str | None = None


class ApiResponse(CamelModel):
    success: bool
    data: Any = None
    error: ApiError | None = None
    meta: ResponseMeta = Field(default_factory=ResponseMeta)


class NearbyLot(ParkingLot):
    distance_m: float


class SpaceListing(CamelModel):
    lot_id: str
    spaces: list[ParkingSpace]
    total_count: int
    available_count: int
    occupied_count: int
