"""
Two-factor (TOTP) storage re-exports.
"""
from core.db.two_factor.two_factor_store import (
    save_two_factor_secret,
    get_two_factor,
    set_two_factor_enabled,
    consume_backup_code,
    get_backup_codes,
)

__all__ = [
    "save_two_factor_secret",
    "get_two_factor",
    "set_two_factor_enabled",
    "consume_backup_code",
    "get_backup_codes",
]
