from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any

from itsdangerous import BadData, URLSafeTimedSerializer
from werkzeug.security import check_password_hash, generate_password_hash

from uniview.errors import EmailExistsError, InvalidCredentialsError
from uniview.models import AuthTokens, User
from uniview.store import ParkingStore

logger = logging.getLogger(__name__)

TOKEN_SALT = "uniview-auth"


class AuthService:
    """Password accounts and signed, time-limited bearer tokens."""

    def __init__(
        self,
        store: ParkingStore,
        secret: str,
        access_ttl_s: int = 3600,
        refresh_ttl_s: int = 7 * 24 * 3600,
    ) -> None:
        self.store = store
        self.access_ttl_s = access_ttl_s
        self.refresh_ttl_s = refresh_ttl_s
        self._serializer = URLSafeTimedSerializer(secret, salt=TOKEN_SALT)

    def register(self, email: str, password: str, name: str) -> tuple[User, AuthTokens]:
        if self.store.get_user_by_email(email) is not None:
            raise EmailExistsError(email)

        user = User(
            user_id=str(uuid.uuid4()),
            email=email,
            name=name,
            password_hash=generate_password_hash(password),
            created_at=datetime.now(timezone.utc),
        )
        self.store.put_user(user)
        logger.info("Registered user %s", user.user_id)
        return user, self.issue_tokens(user)

    def login(self, email: str, password: str) -> tuple[User, AuthTokens]:
        user = self.store.get_user_by_email(email)
        if user is None or not check_password_hash(user.password_hash or "", password):
            raise InvalidCredentialsError()

        self.store.update_last_login(user.user_id, datetime.now(timezone.utc))
        return user, self.issue_tokens(user)

    def issue_tokens(self, user: User) -> AuthTokens:
        access = self._serializer.dumps(
            {"userId": user.user_id, "email": user.email, "role": user.role, "type": "access"}
        )
        refresh = self._serializer.dumps({"userId": user.user_id, "type": "refresh"})
        return AuthTokens(access_token=access, refresh_token=refresh, expires_in=self.access_ttl_s)

    def verify_token(self, token: str, expected_type: str = "access") -> dict[str, Any] | None:
        max_age = self.refresh_ttl_s if expected_type == "refresh" else self.access_ttl_s
        try:
            payload = self._serializer.loads(token, max_age=max_age)
        except BadData:
            return None
        if not isinstance(payload, dict) or payload.get("type") != expected_type:
            return None
        return payload

    def current_user(self, token: str) -> User | None:
        payload = self.verify_token(token)
        if payload is None:
            return None
        return self.store.get_user(str(payload.get("userId")))

    def refresh(self, refresh_token: str) -> AuthTokens | None:
        payload = self.verify_token(refresh_token, expected_type="refresh")
        if payload is None:
            return None
        user = self.store.get_user(str(payload.get("userId")))
        if user is None:
            return None
        return self.issue_tokens(user)
