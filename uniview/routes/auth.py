from __future__ import annotations

import re

from fastapi import APIRouter, Request

from uniview.errors import InvalidTokenError, ValidationError
from uniview.models import AuthTokens, LoginRequest, RefreshRequest, RegisterRequest, User
from uniview.responses import ok

router = APIRouter(prefix="/auth", tags=["auth"])

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 8


def _session_payload(user: User, tokens: AuthTokens) -> dict:
    return {
        "userId": user.user_id,
        "email": user.email,
        "accessToken": tokens.access_token,
        "refreshToken": tokens.refresh_token,
        "expiresIn": tokens.expires_in,
        "role": user.role,
    }


def _bearer_token(request: Request) -> str:
    auth = request.headers.get("Authorization", "")
    if not auth.startswith("Bearer "):
        raise InvalidTokenError("Missing Authorization header")
    return auth.removeprefix("Bearer ").strip()


@router.post("/register")
def register(payload: RegisterRequest, request: Request):
    if not payload.email or not payload.password:
        raise ValidationError("Email and password are required")
    if not EMAIL_RE.match(payload.email):
        raise ValidationError("Invalid email format", details={"field": "email"})
    if len(payload.password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
            details={"field": "password"},
        )

    name = (
        payload.name
        or f"{payload.first_name or ''} {payload.last_name or ''}".strip()
        or payload.email.split("@")[0]
    )
    user, tokens = request.app.state.auth_service.register(payload.email, payload.password, name)
    return ok(_session_payload(user, tokens), request, status_code=201)


@router.post("/login")
def login(payload: LoginRequest, request: Request):
    if not payload.email or not payload.password:
        raise ValidationError("Email and password are required")

    user, tokens = request.app.state.auth_service.login(payload.email, payload.password)
    return ok(_session_payload(user, tokens), request)


@router.post("/refresh")
def refresh(payload: RefreshRequest, request: Request):
    if not payload.refresh_token:
        raise ValidationError("Refresh token is required")

    tokens = request.app.state.auth_service.refresh(payload.refresh_token)
    if tokens is None:
        raise InvalidTokenError("Refresh token is invalid or expired")
    return ok({"accessToken": tokens.access_token, "expiresIn": tokens.expires_in}, request)


@router.post("/logout")
def logout(request: Request):
    # Tokens are stateless; the client drops them.
    return ok({"message": "Successfully logged out"}, request)


@router.get("/me")
def me(request: Request):
    user = request.app.state.auth_service.current_user(_bearer_token(request))
    if user is None:
        raise InvalidTokenError("Access token is invalid or expired")
    return ok(user, request)
