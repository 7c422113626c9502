"""
Price alert delivery store.

Records each target-price notification the worker attempts for a product/user,
and whether the email went out.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List

from core.db.base import get_conn


def create_price_alert(*, user_id: int, product_id: int, price: float) -> int:
    """Insert a queued alert row and return its id."""
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        """
        INSERT INTO price_alerts (user_id, product_id, price, status, created_at, sent_at, error)
        VALUES (?, ?, ?, 'queued', ?, NULL, NULL)
        RETURNING id
        """,
        (user_id, product_id, price, datetime.now(timezone.utc)),
    )
    row = cur.fetchone()
    conn.commit()
    conn.close()
    return int(row["id"]) if row else 0


def mark_price_alert_sent(alert_id: int) -> None:
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        "UPDATE price_alerts SET status='sent', sent_at=?, error=NULL WHERE id=?",
        (datetime.now(timezone.utc), alert_id),
    )
    conn.commit()
    conn.close()


def mark_price_alert_failed(alert_id: int, error: str) -> None:
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        "UPDATE price_alerts SET status='failed', sent_at=NULL, error=? WHERE id=?",
        (f"{error}".strip()[:500], alert_id),
    )
    conn.commit()
    conn.close()


def get_price_alerts_for_product(product_id: int, limit: int = 50) -> List[Dict]:
    """Alert history for one product, newest first."""
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        """
        SELECT id, user_id, product_id, price, status, created_at, sent_at, error
        FROM price_alerts
        WHERE product_id = ?
        ORDER BY created_at DESC, id DESC
        LIMIT ?
        """,
        (product_id, int(limit)),
    )
    rows = cur.fetchall()
    conn.close()
    return [dict(r) for r in rows]
