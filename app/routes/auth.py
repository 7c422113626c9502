import logging
import os

from fastapi import APIRouter, Depends, Request

from app.auth_utils import create_access_token, get_current_user, public_user
from app.config import FRONTEND_URL
from app.email_utils import send_password_reset_email, send_verification_email
from app.errors import ApiError
from app.mfa_utils import sign_pending, unsign_pending, verify_totp
from app.schemas import (
    EmailRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TwoFactorLoginRequest,
)
from app.security import allow_request, allow_request_with_remaining, client_ip
from core.database import (
    DuplicateUserError,
    consume_backup_code,
    create_email_verification_token,
    create_password_reset_token,
    create_user,
    get_email_verification_token,
    get_password_reset_token,
    get_two_factor,
    get_user_by_email,
    get_user_by_id,
    mark_email_verification_token_used,
    mark_reset_token_used,
    mark_user_email_verified,
    update_user_password,
    verify_password,
)

log = logging.getLogger(__name__)
router = APIRouter(prefix="/api/auth", tags=["auth"])

RESET_SENT_MESSAGE = "If that email exists, a reset link has been sent."


def _build_public_url(request: Request, path: str) -> str:
    base = (os.getenv("PUBLIC_BASE_URL") or str(request.base_url)).rstrip("/")
    return f"{base}{path}"


def _auth_response(user, message: str) -> dict:
    return {
        "message": message,
        "token": create_access_token(user),
        "user": public_user(user),
    }


def _send_verification(request: Request, user) -> None:
    try:
        token = create_email_verification_token(user["id"])
        link = _build_public_url(request, f"/api/auth/verify-email?token={token}")
        send_verification_email(user["email"], user.get("name") or "", link)
    except Exception as e:
        # Registration/resend still succeeds; the user can ask for another link
        log.warning("Failed to send verification email to %s: %s", user["email"], e)


@router.post("/register", status_code=201)
def register(payload: RegisterRequest, request: Request):
    if not allow_request(f"register:{client_ip(request)}", limit=5, window_seconds=3600):
        raise ApiError("Too many accounts created from this IP, please try again later.", 429)

    if get_user_by_email(payload.email):
        raise ApiError("User already exists", 400)

    try:
        user_id = create_user(payload.email, payload.password, payload.name)
    except DuplicateUserError:
        raise ApiError("User already exists", 400)
    user = get_user_by_id(user_id)
    if not user:
        raise ApiError("Failed to register user", 500)

    _send_verification(request, user)
    log.info("Registered user_id=%s", user_id)
    return _auth_response(user, "User registered successfully")


@router.post("/login")
def login(payload: LoginRequest, request: Request):
    allowed, _ = allow_request_with_remaining(f"login:{client_ip(request)}", limit=10, window_seconds=300)
    if not allowed:
        raise ApiError("Too many login attempts. Please try again later.", 429)

    user = get_user_by_email(payload.email)
    if not user or not verify_password(payload.password, user.get("password_hash")):
        raise ApiError("Invalid credentials", 400)

    two_factor = get_two_factor(user["id"])
    if two_factor and two_factor.get("is_enabled"):
        return {
            "message": "Two-factor authentication required",
            "twoFactorRequired": True,
            "pendingToken": sign_pending(user["id"]),
        }

    return _auth_response(user, "Login successful")


@router.post("/login/2fa")
def login_two_factor(payload: TwoFactorLoginRequest, request: Request):
    if not allow_request(f"login2fa:{client_ip(request)}", limit=10, window_seconds=300):
        raise ApiError("Too many attempts. Please try again later.", 429)

    user_id = unsign_pending(payload.pending_token)
    if user_id is None:
        raise ApiError("Two-factor session expired. Please log in again.", 401)

    user = get_user_by_id(user_id)
    two_factor = get_two_factor(user_id) if user else None
    if not user or not two_factor or not two_factor.get("is_enabled"):
        raise ApiError("Two-factor authentication is not enabled", 400)

    code = payload.code.strip()
    if not verify_totp(two_factor["secret"], code) and not consume_backup_code(user_id, code.upper()):
        raise ApiError("Invalid code", 401)

    return _auth_response(user, "Login successful")


@router.post("/logout")
def logout():
    # Tokens are stateless; the client discards its copy
    return {"message": "Logged out successfully"}


@router.get("/me")
def me(user=Depends(get_current_user)):
    two_factor = get_two_factor(user["id"])
    data = public_user(user)
    data["twoFactorEnabled"] = bool(two_factor and two_factor.get("is_enabled"))
    return data


@router.post("/forgot-password")
def forgot_password(payload: EmailRequest, request: Request):
    allowed, remaining = allow_request_with_remaining(
        f"pwdreset:{client_ip(request)}", limit=3, window_seconds=3600
    )
    if not allowed:
        raise ApiError("Too many password reset attempts, please try again after an hour", 429)

    user = get_user_by_email(payload.email)
    if user:
        token = create_password_reset_token(user["id"])
        reset_link = f"{FRONTEND_URL}/reset-password?token={token}"
        try:
            send_password_reset_email(user["email"], user.get("name") or "", reset_link)
            log.info("Sent reset link for user_id=%s", user["id"])
        except Exception as e:
            log.error("Failed to send reset link for user_id=%s: %s", user["id"], e)
    else:
        log.info("Reset requested for unknown email")

    return {"message": RESET_SENT_MESSAGE, "attemptsRemaining": remaining}


@router.post("/reset-password")
def reset_password(payload: ResetPasswordRequest, request: Request):
    if not allow_request(f"pwdreset_conf:{client_ip(request)}", limit=5, window_seconds=300):
        raise ApiError("Too many attempts. Please try again later.", 429)

    token_data = get_password_reset_token(payload.token)
    if not token_data or not get_user_by_id(token_data["user_id"]):
        raise ApiError("Reset link is invalid or expired", 400)

    update_user_password(token_data["user_id"], payload.password)
    mark_reset_token_used(payload.token)
    return {"message": "Password updated. You can now log in."}


@router.get("/verify-email")
def verify_email(token: str = ""):
    token_data = get_email_verification_token(token)
    if not token_data or not get_user_by_id(token_data["user_id"]):
        raise ApiError("This verification link is invalid or expired", 400)

    mark_user_email_verified(token_data["user_id"])
    mark_email_verification_token_used(token)
    return {"message": "Email verified successfully"}


@router.post("/verify-email/resend")
def verify_email_resend(payload: EmailRequest, request: Request):
    if not allow_request(f"verify_resend:{client_ip(request)}", limit=3, window_seconds=3600):
        raise ApiError("Too many email verification attempts, please try again after an hour", 429)

    user = get_user_by_email(payload.email)
    if user and not user.get("is_email_verified"):
        _send_verification(request, user)

    return {"message": "If that email exists, a verification link has been sent."}
