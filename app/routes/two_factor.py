from fastapi import APIRouter, Depends

from app.auth_utils import get_current_user
from app.errors import ApiError
from app.mfa_utils import (
    create_totp_secret,
    generate_backup_codes,
    qr_code_data_url,
    totp_uri,
    verify_totp,
)
from app.schemas import BackupCodeRequest, TotpTokenRequest
from core.database import (
    consume_backup_code,
    get_backup_codes,
    get_two_factor,
    save_two_factor_secret,
    set_two_factor_enabled,
)

router = APIRouter(prefix="/api/2fa", tags=["2fa"])


def _check_totp(user, token: str | None) -> None:
    if not token:
        raise ApiError("Token is required", 400)
    record = get_two_factor(user["id"])
    if not record or not verify_totp(record["secret"], token):
        raise ApiError("Invalid token", 400)


@router.post("/setup")
def setup(user=Depends(get_current_user)):
    secret = create_totp_secret()
    backup_codes = generate_backup_codes()
    save_two_factor_secret(user["id"], secret, backup_codes)

    otpauth = totp_uri(secret, user["email"])
    return {
        "secret": secret,
        "otpauth": otpauth,
        "qrCode": qr_code_data_url(otpauth),
        "backupCodes": backup_codes,
    }


@router.post("/verify")
def verify(payload: TotpTokenRequest, user=Depends(get_current_user)):
    _check_totp(user, payload.token)
    set_two_factor_enabled(user["id"], True)
    return {"message": "2FA enabled successfully"}


@router.post("/verify-backup")
def verify_backup(payload: BackupCodeRequest, user=Depends(get_current_user)):
    if not payload.code:
        raise ApiError("Backup code is required", 400)
    if not consume_backup_code(user["id"], payload.code.strip().upper()):
        raise ApiError("Invalid backup code", 400)
    return {"message": "Backup code verified successfully"}


@router.post("/disable")
def disable(payload: TotpTokenRequest, user=Depends(get_current_user)):
    _check_totp(user, payload.token)
    set_two_factor_enabled(user["id"], False)
    return {"message": "2FA disabled successfully"}


@router.get("/backup-codes")
def backup_codes(user=Depends(get_current_user)):
    return {"backupCodes": get_backup_codes(user["id"])}
