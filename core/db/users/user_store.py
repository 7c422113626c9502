"""
User CRUD and Google account linking helpers.
"""
from __future__ import annotations

from typing import Dict, Optional

import psycopg

from core.db.base import get_conn
from core.db.users.auth import hash_password

_USER_COLUMNS = """
    id, email, password_hash, name, is_verified, is_email_verified,
    google_id, avatar, created_at, updated_at
"""


class DuplicateUserError(Exception):
    """Raised when the email (or Google ID) already belongs to a user."""


def create_user(
    email: str,
    raw_password: str | None,
    name: str,
    *,
    google_id: str | None = None,
    avatar: str | None = None,
    verified: bool = False,
) -> int:
    """
    Insert a user and return its id. Google users are created without a password.
    Raises DuplicateUserError when the email or Google ID is taken.
    """
    conn = get_conn()
    cur = conn.cursor()

    password_hash = hash_password(raw_password) if raw_password else None

    try:
        cur.execute(
            """
            INSERT INTO users (email, password_hash, name, is_verified, is_email_verified, google_id, avatar)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            RETURNING id
            """,
            (email.strip().lower(), password_hash, name.strip(), verified, verified, google_id, avatar),
        )
    except psycopg.errors.UniqueViolation as exc:
        conn.rollback()
        conn.close()
        raise DuplicateUserError(email) from exc
    row = cur.fetchone()
    user_id = int(row["id"]) if row else 0

    conn.commit()
    conn.close()
    return user_id


def _fetch_user(where: str, value) -> Optional[Dict]:
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE {where} = ?", (value,))
    row = cur.fetchone()
    conn.close()
    return dict(row) if row else None


def get_user_by_email(email: str) -> Dict | None:
    return _fetch_user("email", (email or "").strip().lower())


def get_user_by_id(user_id: int) -> Optional[Dict]:
    """Look up a user by numeric id. Returns dict or None."""
    return _fetch_user("id", user_id)


def get_user_by_google_id(google_id: str) -> Optional[Dict]:
    return _fetch_user("google_id", google_id)


def link_google_account(user_id: int, google_id: str, avatar: str | None) -> None:
    """Attach a Google identity to an existing (email-matched) account."""
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        """
        UPDATE users
        SET google_id = ?,
            is_email_verified = TRUE,
            avatar = COALESCE(?, avatar),
            updated_at = now()
        WHERE id = ?
        """,
        (google_id, avatar, user_id),
    )
    conn.commit()
    conn.close()


def update_user_password(user_id: int, raw_password: str) -> None:
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        "UPDATE users SET password_hash=?, updated_at=now() WHERE id=?",
        (hash_password(raw_password), user_id),
    )
    conn.commit()
    conn.close()


__all__ = [
    "DuplicateUserError",
    "create_user",
    "get_user_by_email",
    "get_user_by_id",
    "get_user_by_google_id",
    "link_google_account",
    "update_user_password",
]
