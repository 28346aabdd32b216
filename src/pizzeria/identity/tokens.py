"""Bearer tokens: HS256 JWTs whose subject is the user id."""

from datetime import UTC, datetime, timedelta

import jwt

from pizzeria.config import get_settings
from pizzeria.shared.errors import TokenExpired, TokenInvalid, TokenMissing


def issue_token(user_id: str, now: datetime | None = None) -> str:
    settings = get_settings()
    now = now or datetime.now(UTC)
    claims = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + timedelta(minutes=settings.jwt_expires_minutes),
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str | None) -> str:
    """Return the subject of a valid token; raise the matching Unauthorized error otherwise."""
    if not token:
        raise TokenMissing()

    settings = get_settings()
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise TokenExpired() from None
    except jwt.InvalidTokenError:
        raise TokenInvalid() from None
    return claims["sub"]


def peek_subject(token: str | None) -> str | None:
    """Subject of a valid token, or None. Never raises."""
    try:
        return decode_token(token)
    except (TokenMissing, TokenInvalid, TokenExpired):
        return None


def bearer_from_header(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() != "bearer" or not credentials.strip():
        return None
    return credentials.strip()
