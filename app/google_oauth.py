from typing import Any, Dict
from urllib.parse import urlencode

import httpx
from itsdangerous import BadSignature, URLSafeTimedSerializer

from app.config import GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET, GOOGLE_REDIRECT_URI, SESSION_SECRET

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"
STATE_MAX_AGE = 600

_state_serializer = URLSafeTimedSerializer(SESSION_SECRET, salt="google-oauth-state")


class GoogleOAuthError(Exception):
    pass


def create_state() -> str:
    return _state_serializer.dumps({"p": "google"})


def verify_state(state: str) -> bool:
    if not state:
        return False
    try:
        _state_serializer.loads(state, max_age=STATE_MAX_AGE)
    except BadSignature:
        return False
    return True


def authorization_url(state: str) -> str:
    params = {
        "client_id": GOOGLE_CLIENT_ID,
        "redirect_uri": GOOGLE_REDIRECT_URI,
        "response_type": "code",
        "scope": "openid email profile",
        "state": state,
        "access_type": "online",
        "prompt": "select_account",
    }
    return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"


async def exchange_code(code: str) -> str:
    """Trade the authorization code for an access token."""
    async with httpx.AsyncClient(timeout=10) as client:
        resp = await client.post(
            GOOGLE_TOKEN_URL,
            data={
                "code": code,
                "client_id": GOOGLE_CLIENT_ID,
                "client_secret": GOOGLE_CLIENT_SECRET,
                "redirect_uri": GOOGLE_REDIRECT_URI,
                "grant_type": "authorization_code",
            },
        )
    tokens = resp.json()
    if "error" in tokens or not tokens.get("access_token"):
        raise GoogleOAuthError(tokens.get("error_description") or tokens.get("error") or "Google OAuth failed")
    return tokens["access_token"]


async def get_google_user(access_token: str) -> Dict[str, Any]:
    async with httpx.AsyncClient(timeout=10) as client:
        resp = await client.get(
            GOOGLE_USERINFO_URL,
            headers={"Authorization": f"Bearer {access_token}"},
        )
        resp.raise_for_status()
        return resp.json()


__all__ = [
    "GoogleOAuthError",
    "create_state",
    "verify_state",
    "authorization_url",
    "exchange_code",
    "get_google_user",
]
