"""
Per-user TOTP secrets and single-use backup codes.
"""
from __future__ import annotations

from typing import Dict, List, Optional

from core.db.base import get_conn


def save_two_factor_secret(user_id: int, secret: str, backup_codes: List[str]) -> None:
    """Create or replace the user's 2FA record. The record starts disabled until a code is verified."""
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        """
        INSERT INTO two_factor_auth (user_id, secret, is_enabled, backup_codes)
        VALUES (?, ?, FALSE, ?)
        ON CONFLICT (user_id) DO UPDATE
        SET secret = EXCLUDED.secret,
            is_enabled = FALSE,
            backup_codes = EXCLUDED.backup_codes,
            updated_at = now()
        """,
        (user_id, secret, list(backup_codes)),
    )
    conn.commit()
    conn.close()


def get_two_factor(user_id: int) -> Optional[Dict]:
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        """
        SELECT id, user_id, secret, is_enabled, backup_codes, created_at, updated_at
        FROM two_factor_auth
        WHERE user_id = ?
        """,
        (user_id,),
    )
    row = cur.fetchone()
    conn.close()
    return dict(row) if row else None


def set_two_factor_enabled(user_id: int, enabled: bool) -> None:
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        "UPDATE two_factor_auth SET is_enabled = ?, updated_at = now() WHERE user_id = ?",
        (enabled, user_id),
    )
    conn.commit()
    conn.close()


def consume_backup_code(user_id: int, code: str) -> bool:
    """
    Remove `code` from the user's backup codes. Returns True only for the caller
    that actually removed it, so a code can be redeemed once.
    """
    if not code:
        return False
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        """
        UPDATE two_factor_auth
        SET backup_codes = array_remove(backup_codes, ?), updated_at = now()
        WHERE user_id = ? AND ? = ANY(backup_codes)
        RETURNING id
        """,
        (code, user_id, code),
    )
    row = cur.fetchone()
    conn.commit()
    conn.close()
    return row is not None


def get_backup_codes(user_id: int) -> List[str]:
    record = get_two_factor(user_id)
    return list(record["backup_codes"]) if record else []


__all__ = [
    "save_two_factor_secret",
    "get_two_factor",
    "set_two_factor_enabled",
    "consume_backup_code",
    "get_backup_codes",
]
