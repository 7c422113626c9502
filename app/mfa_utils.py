import base64
import io
import secrets

import pyotp
import qrcode
from itsdangerous import BadSignature, SignatureExpired, TimestampSigner

from app.config import ISSUER_NAME, SESSION_SECRET

BACKUP_CODE_COUNT = 10
PENDING_LOGIN_MAX_AGE = 300  # seconds to finish the second login step

_signer = TimestampSigner(SESSION_SECRET, salt="pending-2fa")


def create_totp_secret() -> str:
    return pyotp.random_base32()


def totp_uri(secret: str, email: str) -> str:
    return pyotp.totp.TOTP(secret).provisioning_uri(name=email, issuer_name=ISSUER_NAME)


def verify_totp(secret: str, code: str, valid_window: int = 1) -> bool:
    code = (code or "").strip().replace(" ", "")
    if not secret or not code.isdigit():
        return False
    return pyotp.TOTP(secret).verify(code, valid_window=valid_window)


def generate_backup_codes(n: int = BACKUP_CODE_COUNT) -> list[str]:
    # 8 upper-case hex chars each
    return [secrets.token_hex(4).upper() for _ in range(n)]


def qr_code_data_url(data: str) -> str:
    img = qrcode.make(data)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


def sign_pending(user_id: int) -> str:
    return _signer.sign(str(user_id).encode()).decode()


def unsign_pending(value: str, max_age: int = PENDING_LOGIN_MAX_AGE) -> int | None:
    try:
        raw = _signer.unsign(value, max_age=max_age).decode()
    except (BadSignature, SignatureExpired):
        return None
    return int(raw) if raw.isdigit() else None
