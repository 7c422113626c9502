"""
Helpers for JWT bearer tokens and current-user lookup.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

import jwt
from fastapi import Request

from app.config import JWT_ALG, JWT_EXPIRE, JWT_SECRET
from app.errors import ApiError
from core.database import get_user_by_id


def create_access_token(user: Dict, expires_in: Optional[timedelta] = None) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user["id"]),
        "email": user["email"],
        "iat": now,
        "exp": now + (expires_in or JWT_EXPIRE),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALG)


def decode_access_token(token: str) -> Optional[Dict]:
    """Return the token payload, or None when the signature/expiry check fails."""
    try:
        return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALG])
    except jwt.PyJWTError:
        return None


def get_bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("authorization") or ""
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_current_user(request: Request) -> Dict:
    """
    FastAPI dependency: resolve the user behind the Authorization bearer token.
    Raises ApiError(401) when the token is missing, invalid or the user is gone.
    """
    token = get_bearer_token(request)
    if not token:
        raise ApiError("No token provided", 401)

    payload = decode_access_token(token)
    if not payload or not str(payload.get("sub", "")).isdigit():
        raise ApiError("Invalid token", 401)

    user = get_user_by_id(int(payload["sub"]))
    if not user:
        raise ApiError("User not found", 401)
    return user


def public_user(user: Dict) -> Dict:
    """The user fields safe to return to clients."""
    return {
        "id": user["id"],
        "name": user.get("name"),
        "email": user["email"],
        "avatar": user.get("avatar"),
        "isVerified": bool(user.get("is_verified") or user.get("is_email_verified")),
    }
