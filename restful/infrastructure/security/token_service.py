"""
Creation and verification of access tokens (JWT).
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict
from uuid import uuid4

import jwt

from restful.core.config import Settings


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    def __init__(self, *, secret: str | None, algorithm: str = "HS256", expire_days: int = 3) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self._expire = timedelta(days=expire_days)

    @classmethod
    def from_settings(cls, cfg: Settings) -> "TokenService":
        return cls(
            secret=cfg.jwt_secret,
            algorithm=cfg.jwt_algorithm,
            expire_days=cfg.access_token_expire_days,
        )

    def ensure_configured(self) -> None:
        """Raise when no signing secret is set; only signing and verifying need it."""
        if not self._secret:
            raise ValueError("jwt_secret is not configured")

    def create_access_token(self, *, user_id: str) -> str:
        """
        Sign an access token valid for `access_token_expire_days`.
        Claims: sub(user_id), iat, exp, jti.
        """
        self.ensure_configured()
        now = _now_utc()
        payload = {
            "sub": str(user_id),
            "iat": int(now.timestamp()),
            "exp": int((now + self._expire).timestamp()),
            "jti": str(uuid4()),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify_access_token(self, token: str) -> Dict[str, Any]:
        """
        Decode and validate signature/expiry. Returns the payload.
        Raises `jwt.InvalidTokenError` (or a subclass) when the token is rejected.
        """
        self.ensure_configured()
        return jwt.decode(token, key=self._secret, algorithms=[self._algorithm])
