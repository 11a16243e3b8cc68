# Overview: Service-layer operations for bearer tokens (JWT issue/verify).

"""
Bearer token service.

Tokens are HS256 JWTs signed with JWT_SECRET and carrying:
- sub: user id (string)
- role: role at issue time (informational; authorization re-reads the user row)
- iat / exp: issue and expiry timestamps (JWT_EXPIRES_SECONDS)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

import jwt
from flask import current_app

from ..models import User
from ..time_utils import utcnow


class TokenError(Exception):
    """Raised when a bearer token is missing, malformed, expired or forged."""


@dataclass
class TokenClaims:
    user_id: int
    role: str | None


def issue_token(user: User) -> str:
    now = utcnow()
    payload = {
        "sub": str(user.id),
        "role": user.role,
        "iat": now,
        "exp": now + timedelta(seconds=current_app.config["JWT_EXPIRES_SECONDS"]),
    }
    return jwt.encode(
        payload,
        current_app.config["JWT_SECRET"],
        algorithm=current_app.config["JWT_ALGORITHM"],
    )


def decode_token(token: str) -> TokenClaims:
    try:
        payload = jwt.decode(
            token,
            current_app.config["JWT_SECRET"],
            algorithms=[current_app.config["JWT_ALGORITHM"]],
        )
    except jwt.ExpiredSignatureError:
        raise TokenError("Token expired")
    except jwt.InvalidTokenError:
        raise TokenError("Invalid token")

    try:
        user_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise TokenError("Invalid token")

    return TokenClaims(user_id=user_id, role=payload.get("role"))
