import logging
from urllib.parse import urlencode

from fastapi import APIRouter
from fastapi.responses import JSONResponse, RedirectResponse

from app import config
from app.auth_utils import create_access_token
from app.google_oauth import (
    GoogleOAuthError,
    authorization_url,
    create_state,
    exchange_code,
    get_google_user,
    verify_state,
)
from app.mfa_utils import sign_pending
from core.database import (
    create_user,
    get_two_factor,
    get_user_by_email,
    get_user_by_google_id,
    get_user_by_id,
    link_google_account,
)

log = logging.getLogger(__name__)
router = APIRouter(prefix="/api/auth", tags=["auth"])


def _frontend_redirect(path: str, **params) -> RedirectResponse:
    url = f"{config.FRONTEND_URL}{path}"
    if params:
        url = f"{url}?{urlencode(params)}"
    return RedirectResponse(url=url, status_code=302)


def find_or_create_google_user(profile: dict) -> dict:
    """
    Resolve the local account for a Google profile:
    by Google ID, else link the account with the same email, else create one.
    """
    google_id = str(profile["id"])
    user = get_user_by_google_id(google_id)
    if user:
        return user

    email = (profile.get("email") or "").strip().lower()
    if not email:
        raise GoogleOAuthError("Google account has no email address")

    avatar = profile.get("picture")
    user = get_user_by_email(email)
    if user:
        link_google_account(user["id"], google_id, avatar)
        return get_user_by_id(user["id"])

    user_id = create_user(
        email,
        None,
        profile.get("name") or email.split("@")[0],
        google_id=google_id,
        avatar=avatar,
        verified=True,
    )
    return get_user_by_id(user_id)


@router.get("/google")
def google_login():
    if not config.google_oauth_configured():
        return JSONResponse(
            {
                "error": "Google OAuth not configured",
                "message": "Google OAuth is not set up on this server. Please contact the administrator.",
            },
            status_code=400,
        )
    return RedirectResponse(url=authorization_url(create_state()), status_code=302)


@router.get("/google/callback")
async def google_callback(code: str = "", state: str = "", error: str = ""):
    if not config.google_oauth_configured():
        return _frontend_redirect("/login", error="oauth_not_configured")

    if error or not code or not verify_state(state):
        return _frontend_redirect("/login", error="auth_failed")

    try:
        access_token = await exchange_code(code)
        profile = await get_google_user(access_token)
        user = find_or_create_google_user(profile)
    except GoogleOAuthError as e:
        log.warning("Google OAuth failed: %s", e)
        return _frontend_redirect("/login", error="auth_failed")
    except Exception:
        log.exception("Google OAuth callback error")
        return _frontend_redirect("/login", error="server_error")

    if not user:
        return _frontend_redirect("/login", error="auth_failed")

    two_factor = get_two_factor(user["id"])
    if two_factor and two_factor.get("is_enabled"):
        return _frontend_redirect("/login", pendingToken=sign_pending(user["id"]))

    token = create_access_token(user, expires_in=config.OAUTH_JWT_EXPIRE)
    return _frontend_redirect("/auth/callback", token=token)
