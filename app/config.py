"""
Environment-driven settings for the web app.
"""
import os
from datetime import timedelta

from dotenv import load_dotenv

# Ensure .env values are loaded even if uvicorn is launched without `dotenv run`.
load_dotenv(override=True)

JWT_SECRET = os.getenv("JWT_SECRET", "dev-change-me-to-a-long-random-secret")
JWT_ALG = "HS256"
JWT_EXPIRE = timedelta(hours=int(os.getenv("JWT_EXPIRE_HOURS", "24")))
OAUTH_JWT_EXPIRE = timedelta(days=7)

# Signs short-lived values (OAuth state, pending 2FA logins)
SESSION_SECRET = os.getenv("SESSION_SECRET", "dev-session-secret")

FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173").rstrip("/")

# Shown in authenticator apps
ISSUER_NAME = os.getenv("ISSUER_NAME", "Price Tracker")

GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID", "")
GOOGLE_CLIENT_SECRET = os.getenv("GOOGLE_CLIENT_SECRET", "")
GOOGLE_REDIRECT_URI = os.getenv("GOOGLE_REDIRECT_URI", "http://localhost:3001/api/auth/google/callback")

APP_VERSION = "1.0.0"


def google_oauth_configured() -> bool:
    return bool(GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET)
