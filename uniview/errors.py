from __future__ import annotations

from typing import Any


class UniviewError(Exception):
    """Base error carrying the API error code and HTTP status it maps to."""

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(UniviewError):
    code = "VALIDATION_ERROR"
    status_code = 400


class LotNotFoundError(UniviewError):
    code = "LOT_NOT_FOUND"
    status_code = 404

    def __init__(self, lot_id: str):
        super().__init__(f"Parking lot with ID '{lot_id}' does not exist")
        self.lot_id = lot_id


class EmailExistsError(UniviewError):
    code = "EMAIL_EXISTS"
    status_code = 409

    def __init__(self, email: str):
        super().__init__("An account with this email already exists")
        self.email = email


class InvalidCredentialsError(UniviewError):
    code = "INVALID_CREDENTIALS"
    status_code = 401

    def __init__(self):
        super().__init__("Email or password is incorrect")


class InvalidTokenError(UniviewError):
    code = "INVALID_TOKEN"
    status_code = 401


class StoreUnavailableError(UniviewError):
    code = "STORE_UNAVAILABLE"
    status_code = 503
