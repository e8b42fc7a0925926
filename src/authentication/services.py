"""Token service: JWT issuance, decoding, and the Redis blocklist."""

import logging
import time
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Tuple

import jwt
import redis
from django.conf import settings
from rest_framework.exceptions import AuthenticationFailed

from core.redis_client import get_redis_client

logger = logging.getLogger(__name__)


class BlocklistUnavailable(Exception):
    """Raised when the Redis blocklist cannot be reached (fail-closed)."""


class TokenService:
    """Issue and verify access/refresh tokens.

    Tokens carry ``sub`` (user id), ``ver`` (the user's token_version) and a
    ``data`` claim with the viewer's id and role so clients can render
    role-dependent UI without another request.
    """

    ACCESS_TTL = timedelta(minutes=15)
    REFRESH_TTL = timedelta(hours=24)
    ALGORITHM = "HS256"
    BLOCKLIST_PREFIX = "blocklist:token:"

    @classmethod
    def generate_tokens(cls, user) -> Tuple[str, str]:
        now = datetime.now(timezone.utc)
        access = jwt.encode(cls._build_payload(user, "access", now, cls.ACCESS_TTL), settings.SECRET_KEY, algorithm=cls.ALGORITHM)
        refresh = jwt.encode(cls._build_payload(user, "refresh", now, cls.REFRESH_TTL), settings.SECRET_KEY, algorithm=cls.ALGORITHM)
        return access, refresh

    @classmethod
    def _build_payload(cls, user, token_type: str, issued_at: datetime, ttl: timedelta) -> dict[str, Any]:
        return {
            "sub": str(user.id),
            "jti": str(uuid.uuid4()),
            "exp": int((issued_at + ttl).timestamp()),
            "iat": int(issued_at.timestamp()),
            "ver": user.token_version,
            "type": token_type,
            "data": {"id": str(user.id), "role": user.role_name},
        }

    @classmethod
    def decode_token(cls, token: str, expected_type: str | None = None) -> dict[str, Any]:
        """Decode and validate a JWT, optionally enforcing its type."""
        try:
            payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[cls.ALGORITHM])
        except jwt.ExpiredSignatureError as exc:
            raise AuthenticationFailed("Token has expired") from exc
        except jwt.InvalidTokenError as exc:
            raise AuthenticationFailed("Invalid token") from exc

        if expected_type and payload.get("type") != expected_type:
            raise AuthenticationFailed("Invalid token type")
        return payload

    @classmethod
    def block_token(cls, jti: str, exp: int) -> None:
        """Blocklist a token id until its expiry."""
        ttl_seconds = max(1, exp - int(time.time()))
        try:
            get_redis_client().setex(f"{cls.BLOCKLIST_PREFIX}{jti}", ttl_seconds, "1")
        except redis.RedisError as exc:
            raise BlocklistUnavailable("Redis unavailable while blocklisting") from exc
        logger.info("Blocklisted token %s for %ss", jti, ttl_seconds)

    @classmethod
    def is_token_blocked(cls, jti: str) -> bool:
        if not jti:
            return True
        try:
            return get_redis_client().get(f"{cls.BLOCKLIST_PREFIX}{jti}") is not None
        except redis.RedisError as exc:
            raise BlocklistUnavailable("Redis unavailable while checking blocklist") from exc


__all__ = ["TokenService", "BlocklistUnavailable"]
