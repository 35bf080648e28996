from __future__ import annotations

import logging
from typing import Optional

import jwt

from src.core.config import Settings
from src.core.errors import UnauthorizedError

logger = logging.getLogger(__name__)


def decode_access_token(token: Optional[str], settings: Settings) -> str:
    """Return the user id carried by a bearer token issued by the auth service."""
    if not token:
        raise UnauthorizedError("Not authorized, no token")
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError as exc:
        raise UnauthorizedError("Not authorized, token expired") from exc
    except jwt.InvalidTokenError as exc:
        logger.warning("Rejected bearer token: %s", exc)
        raise UnauthorizedError("Not authorized, token failed") from exc

    user_id = payload.get("id") or payload.get("sub")
    if not user_id:
        raise UnauthorizedError("Not authorized, token has no subject")
    return str(user_id)
