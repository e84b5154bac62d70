"""Access token handling.

Tokens are issued by the organisation's identity service; this service only
verifies them. ``create_access_token`` exists for local tooling and tests.
"""

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from src.config.settings import get_settings


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """Sign an access token carrying ``data`` as claims.

    Args:
        data: Claims, typically {"sub": user_id, "role": role, "email": email}
        expires_delta: Token lifetime (default 15 minutes)

    Returns:
        Encoded JWT string
    """
    settings = get_settings()
    now = datetime.now(UTC)
    claims = {
        **data,
        "iat": now,
        "exp": now + (expires_delta or timedelta(minutes=15)),
        "type": "access",
    }
    return jwt.encode(claims, settings.auth_secret_key, algorithm=settings.auth_algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and validate an access token.

    Validates the signature, the expiry and that ``type`` is ``access``.

    Raises:
        JWTError: If token is invalid, expired, or wrong type
    """
    settings = get_settings()

    payload = jwt.decode(
        token,
        settings.auth_secret_key,
        algorithms=[settings.auth_algorithm],
    )

    if payload.get("type") != "access":
        msg = "Invalid token type: expected 'access'"
        raise JWTError(msg)
    if not payload.get("sub"):
        msg = "Token has no subject"
        raise JWTError(msg)

    return payload
