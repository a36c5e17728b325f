"""JWT token creation and verification.

Session tokens carry the caller identity ({uid, email, displayName}) that the
rest of the service treats as opaque. HS256 with a single shared JWT_SECRET;
no revocation, tokens are valid until expiry.
"""

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from config.settings import settings
from src.sb_common.errors import InvalidCredentialsError, InvalidRefreshTokenError

_ALGORITHM = settings.JWT_ALGORITHM  # "HS256"
_ACCESS_EXPIRE = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
_REFRESH_EXPIRE = timedelta(days=settings.JWT_REFRESH_EXPIRE_DAYS)


def _encode(claims: dict[str, Any], token_type: str, ttl: timedelta) -> str:
    now = datetime.now(UTC)
    payload = {**claims, "type": token_type, "iat": now, "exp": now + ttl}
    return str(jwt.encode(payload, settings.JWT_SECRET, algorithm=_ALGORITHM))


def create_access_token(user_id: str, email: str = "", display_name: str = "") -> str:
    """Issue a short-lived access token (default: 30 min)."""
    return _encode(
        {"sub": user_id, "email": email, "name": display_name},
        "access",
        _ACCESS_EXPIRE,
    )


def create_refresh_token(user_id: str) -> str:
    """Issue a long-lived refresh token (default: 7 days). Not rotated on use."""
    return _encode({"sub": user_id}, "refresh", _REFRESH_EXPIRE)


def decode_token(token: str, expected_type: str) -> dict[str, Any]:
    """Decode and validate a JWT token.

    Args:
        token: Raw JWT string.
        expected_type: "access" or "refresh". Strictly enforced to prevent
                       token type confusion attacks.

    Raises:
        InvalidCredentialsError: Token invalid/expired and expected_type="access".
        InvalidRefreshTokenError: Token invalid/expired and expected_type="refresh".
    """
    payload: dict[str, Any] = {}
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[_ALGORITHM],  # Explicit list prevents algorithm confusion
        )
    except JWTError:
        _raise_auth_error(expected_type)

    if payload.get("type") != expected_type:
        _raise_auth_error(expected_type)

    return payload


def _raise_auth_error(expected_type: str) -> None:
    if expected_type == "refresh":
        raise InvalidRefreshTokenError()
    raise InvalidCredentialsError()
