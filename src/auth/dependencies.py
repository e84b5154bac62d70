"""FastAPI dependencies for the caller identity.

Routes receive ``Identity | None``: a missing or invalid token is not
rejected here, so that services answer it with the same ``unauthenticated``
envelope as every other failure.
"""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends, Request
from jose import JWTError
from pydantic import ValidationError

from src.auth.schemas import Identity
from src.auth.security import decode_access_token
from src.core.context import set_user


logger = structlog.get_logger(__name__)


def get_token_from_header(request: Request) -> str | None:
    """Extract Bearer token from Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None

    expected_parts = 2
    parts = auth_header.split()
    if len(parts) != expected_parts or parts[0].lower() != "bearer":
        return None

    return parts[1]


async def get_identity(
    token: Annotated[str | None, Depends(get_token_from_header)],
) -> Identity | None:
    """Resolve the caller from the access token, or None when anonymous."""
    if not token:
        return None

    try:
        payload = decode_access_token(token)
        identity = Identity(
            user_id=UUID(payload["sub"]),
            role=str(payload.get("role", "")).upper(),
            email=payload.get("email"),
            name=payload.get("name"),
        )
    except (JWTError, ValidationError, ValueError) as e:
        logger.info("access_token_rejected", error=str(e))
        return None

    set_user(identity.user_id, identity.role.value)
    return identity


CallerDep = Annotated[Identity | None, Depends(get_identity)]
