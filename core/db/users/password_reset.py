"""
Password reset token storage.
"""
from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from core.db.base import get_conn

RESET_TOKEN_MINUTES = 60


def create_password_reset_token(user_id: int) -> str:
    token = secrets.token_urlsafe(32)
    now = datetime.now(timezone.utc)
    expires = now + timedelta(minutes=RESET_TOKEN_MINUTES)

    conn = get_conn()
    cur = conn.cursor()
    # Invalidate any existing tokens for this user
    cur.execute("DELETE FROM password_reset_tokens WHERE user_id = ?", (user_id,))
    cur.execute(
        """
        INSERT INTO password_reset_tokens (user_id, token, created_at, expires_at)
        VALUES (?, ?, ?, ?)
        """,
        (user_id, token, now, expires),
    )
    conn.commit()
    conn.close()
    return token


def get_password_reset_token(token: str) -> Optional[Dict]:
    if not token:
        return None

    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        """
        SELECT id, user_id, token, created_at, expires_at, used_at
        FROM password_reset_tokens
        WHERE token = ?
        """,
        (token,),
    )
    row = cur.fetchone()

    if not row:
        conn.close()
        return None

    data = dict(row)
    if data.get("used_at") or data["expires_at"] < datetime.now(timezone.utc):
        cur.execute("DELETE FROM password_reset_tokens WHERE token = ?", (token,))
        conn.commit()
        conn.close()
        return None

    conn.close()
    return data


def mark_reset_token_used(token: str) -> None:
    if not token:
        return
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        "UPDATE password_reset_tokens SET used_at=? WHERE token=? RETURNING user_id",
        (datetime.now(timezone.utc), token),
    )
    row = cur.fetchone()
    if row:
        cur.execute(
            "DELETE FROM password_reset_tokens WHERE user_id = ? AND token != ?",
            (row["user_id"], token),
        )
    conn.commit()
    conn.close()


__all__ = [
    "RESET_TOKEN_MINUTES",
    "create_password_reset_token",
    "get_password_reset_token",
    "mark_reset_token_used",
]
