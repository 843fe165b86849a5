import logging
import uuid
from datetime import datetime, timedelta, timezone

import jwt

from event_manager.app.common.exceptions import TokenExpired, TokenInvalid
from event_manager.app.common.utils.consts import TokenType
from event_manager.config.env import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    ALGORITHM,
    JWT_ACCESS_SECRET,
    JWT_REFRESH_SECRET,
    REFRESH_TOKEN_EXPIRE_DAYS,
)

logger = logging.getLogger(__name__)

ACCESS_TOKEN_TTL = timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
REFRESH_TOKEN_TTL = timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS)

_SECRETS = {
    TokenType.ACCESS: JWT_ACCESS_SECRET,
    TokenType.REFRESH: JWT_REFRESH_SECRET,
}


def _encode(subject: int, token_type: TokenType, expires_delta: timedelta, extra: dict | None = None) -> tuple[str, datetime]:
    now = datetime.now(timezone.utc)
    expire = now + expires_delta
    to_encode = {
        "sub": str(subject),
        "type": token_type.value,
        "iat": int(now.timestamp()),
        "exp": int(expire.timestamp()),
    }
    if extra:
        to_encode.update(extra)
    token = jwt.encode(to_encode, _SECRETS[token_type], algorithm=ALGORITHM)
    # exp is whole seconds; report the same instant the token carries
    return token, datetime.fromtimestamp(to_encode["exp"], tz=timezone.utc)


def create_access_token(user_id: int, expires_delta: timedelta = ACCESS_TOKEN_TTL) -> tuple[str, datetime]:
    return _encode(user_id, TokenType.ACCESS, expires_delta)


def create_refresh_token(user_id: int, expires_delta: timedelta = REFRESH_TOKEN_TTL) -> tuple[str, datetime]:
    return _encode(user_id, TokenType.REFRESH, expires_delta, extra={"jti": uuid.uuid4().hex})


def decode_token(token: str, token_type: TokenType) -> dict:
    """Check signature, expiry and token type; return the payload.

    Raises ``TokenExpired`` when ``exp`` has passed and ``TokenInvalid`` for
    anything else (bad signature, malformed token, wrong type, bad subject).
    """
    try:
        payload = jwt.decode(token, _SECRETS[token_type], algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.info(f"Expired {token_type.value} token presented")
        raise TokenExpired()
    except jwt.InvalidTokenError as e:
        logger.warning(f"Invalid {token_type.value} token: {e}")
        raise TokenInvalid()

    if payload.get("type") != token_type.value:
        logger.warning(f"Token type mismatch: expected {token_type.value}, got {payload.get('type')}")
        raise TokenInvalid()

    try:
        payload["sub"] = int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise TokenInvalid()
    return payload
