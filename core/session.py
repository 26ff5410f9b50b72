# pillhub/core/session.py
"""End-user sessions: the app sends a bearer JWT whose ``sub`` is the user id."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt

from core.errors import Unauthorized

JWT_ALGORITHM = "HS256"


def user_id_from_token(token: str, secret: str) -> str:
    if not secret:
        raise Unauthorized("Session verification is not configured")
    try:
        claims = jwt.decode(
            token,
            secret,
            algorithms=[JWT_ALGORITHM],
            options={"require": ["sub", "exp"], "verify_aud": False},
        )
    except jwt.ExpiredSignatureError:
        raise Unauthorized("Session expired")
    except jwt.InvalidTokenError:
        raise Unauthorized("Invalid session token")
    sub = claims.get("sub")
    if not sub:
        raise Unauthorized("Invalid session token")
    return str(sub)


def issue_token(user_id: str, secret: str, expires_in: timedelta = timedelta(hours=1)) -> str:
    # Used by tests and local tooling; production tokens come from the auth provider.
    now = datetime.now(timezone.utc)
    payload = {"sub": user_id, "iat": now, "exp": now + expires_in}
    return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)
