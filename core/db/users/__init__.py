"""
User-related storage helpers, split by responsibility.
"""
from core.db.users.auth import hash_password, verify_password
from core.db.users.user_store import (
    DuplicateUserError,
    create_user,
    get_user_by_email,
    get_user_by_id,
    get_user_by_google_id,
    link_google_account,
    update_user_password,
)
from core.db.users.password_reset import (
    create_password_reset_token,
    get_password_reset_token,
    mark_reset_token_used,
    RESET_TOKEN_MINUTES,
)
from core.db.users.email_verification import (
    VERIFY_TOKEN_HOURS,
    create_email_verification_token,
    get_email_verification_token,
    mark_email_verification_token_used,
    mark_user_email_verified,
)

__all__ = [
    "DuplicateUserError",
    "hash_password",
    "verify_password",
    "create_user",
    "get_user_by_email",
    "get_user_by_id",
    "get_user_by_google_id",
    "link_google_account",
    "update_user_password",
    "create_password_reset_token",
    "get_password_reset_token",
    "mark_reset_token_used",
    "RESET_TOKEN_MINUTES",
    "VERIFY_TOKEN_HOURS",
    "create_email_verification_token",
    "get_email_verification_token",
    "mark_email_verification_token_used",
    "mark_user_email_verified",
]
