"""
JWT utilities for issuing and verifying access tokens.

Functions
---------
create_access_token(data: dict) -> str
    Creates a signed JWT access token with an expiration (`exp`) claim.
verify_token(token: str) -> dict | None
    Verify a JWT's signature & expiration and return its claims if valid.

Claims
------
Tokens carry ``userId`` and ``teamId`` (both UUID strings). The REST
dependencies and the WebSocket handshake bind a caller to that pair.

Environment contract (from `settings`)
--------------------------------------
SECRET_KEY : str
    HMAC signing key for JWTs.
ALGORITHM : str
    JWT signing algorithm (e.g., "HS256").
ACCESS_TOKEN_EXPIRE_MINUTES : int
    Token lifetime window in minutes.
"""

import logging
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from jose import JWTError, jwt

from teamhub.database.config.config import settings

logger = logging.getLogger(__name__)


def create_access_token(data: dict) -> str:
    """
    Create a signed JWT access token.

    Parameters
    ----------
    data : dict
        Claims to embed in the token, typically ``{"userId", "teamId"}``.
        UUID values are converted to strings.

    Returns
    -------
    str
        Encoded JWT string.

    Notes
    -----
    - Adds an `exp` claim calculated from ACCESS_TOKEN_EXPIRE_MINUTES.
    - Uses `settings.SECRET_KEY` and `settings.ALGORITHM` for signing.
    """
    encoding = {k: str(v) if isinstance(v, UUID) else v for k, v in data.items()}
    # exp is a NumericDate (seconds since epoch)
    expires = int(datetime.now(timezone.utc).timestamp()) + int(settings.ACCESS_TOKEN_EXPIRE_MINUTES) * 60
    encoding.update({"exp": expires})
    return jwt.encode(encoding, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_token(token: str) -> Optional[dict]:
    """
    Verify a JWT and return its claims.

    Parameters
    ----------
    token : str
        Encoded JWT string from the client (header or WebSocket query).

    Returns
    -------
    dict | None
        The decoded claims if the token is valid and carries both ``userId``
        and ``teamId``, otherwise None.
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.info("auth.token_rejected reason=%s", e)
        return None
    if not payload.get("userId") or not payload.get("teamId"):
        logger.info("auth.token_rejected reason=missing claims")
        return None
    return payload
