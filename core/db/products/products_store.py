"""
Tracked products and their price history.

Each product belongs to exactly one user; every read/write helper that takes a
user_id scopes the query to that owner so callers never see another user's rows.
Price history rows are only ever inserted, never updated.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

import psycopg

from core.db.base import get_conn

_PRODUCT_COLUMNS = """
    id, user_id, url, title, image_url, current_price, target_price, created_at, updated_at
"""


class DuplicateProductError(Exception):
    """Raised when a user already tracks the given URL."""


def _history_for(cur, product_ids: Iterable[int]) -> Dict[int, List[Dict]]:
    ids = [int(p) for p in product_ids]
    history: Dict[int, List[Dict]] = {pid: [] for pid in ids}
    if not ids:
        return history
    cur.execute(
        """
        SELECT id, product_id, price, recorded_at
        FROM price_history
        WHERE product_id = ANY(?)
        ORDER BY recorded_at ASC, id ASC
        """,
        (ids,),
    )
    for row in cur.fetchall():
        history[row["product_id"]].append({"price": row["price"], "date": row["recorded_at"]})
    return history


def create_product(
    *,
    user_id: int,
    url: str,
    target_price: float,
    title: str,
    image_url: str = "",
    current_price: Optional[float] = None,
) -> Dict:
    """
    Insert a product for a user. A known current_price seeds the first history entry.
    Raises DuplicateProductError when (user_id, url) already exists.
    """
    now = datetime.now(timezone.utc)
    conn = get_conn()
    cur = conn.cursor()
    try:
        cur.execute(
            f"""
            INSERT INTO products (user_id, url, title, image_url, current_price, target_price, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            RETURNING {_PRODUCT_COLUMNS}
            """,
            (user_id, url, title, image_url or "", current_price or 0, target_price, now, now),
        )
    except psycopg.errors.UniqueViolation as exc:
        conn.rollback()
        conn.close()
        raise DuplicateProductError(url) from exc

    product = dict(cur.fetchone())
    product["price_history"] = []
    if current_price:
        cur.execute(
            "INSERT INTO price_history (product_id, price, recorded_at) VALUES (?, ?, ?)",
            (product["id"], current_price, now),
        )
        product["price_history"].append({"price": current_price, "date": now})

    conn.commit()
    conn.close()
    return product


def get_product_by_url(user_id: int, url: str) -> Optional[Dict]:
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        f"SELECT {_PRODUCT_COLUMNS} FROM products WHERE user_id = ? AND url = ?",
        (user_id, url),
    )
    row = cur.fetchone()
    conn.close()
    return dict(row) if row else None


def get_products_for_user(user_id: int) -> List[Dict]:
    """Return the user's products with their history attached, newest first."""
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        f"""
        SELECT {_PRODUCT_COLUMNS}
        FROM products
        WHERE user_id = ?
        ORDER BY created_at DESC, id DESC
        """,
        (user_id,),
    )
    products = [dict(r) for r in cur.fetchall()]
    history = _history_for(cur, [p["id"] for p in products])
    conn.close()

    for product in products:
        product["price_history"] = history.get(product["id"], [])
    return products


def get_product_for_user(product_id: int, user_id: int) -> Optional[Dict]:
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        f"SELECT {_PRODUCT_COLUMNS} FROM products WHERE id = ? AND user_id = ?",
        (product_id, user_id),
    )
    row = cur.fetchone()
    if not row:
        conn.close()
        return None

    product = dict(row)
    product["price_history"] = _history_for(cur, [product["id"]])[product["id"]]
    conn.close()
    return product


def update_product(
    product_id: int,
    user_id: int,
    *,
    title: Optional[str] = None,
    target_price: Optional[float] = None,
) -> Optional[Dict]:
    """Update title and/or target price. Returns the updated product or None when not owned."""
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        f"""
        UPDATE products
        SET title = COALESCE(?, title),
            target_price = COALESCE(?, target_price),
            updated_at = now()
        WHERE id = ? AND user_id = ?
        RETURNING {_PRODUCT_COLUMNS}
        """,
        (title, target_price, product_id, user_id),
    )
    row = cur.fetchone()
    if not row:
        conn.close()
        return None

    product = dict(row)
    product["price_history"] = _history_for(cur, [product["id"]])[product["id"]]
    conn.commit()
    conn.close()
    return product


def delete_product(product_id: int, user_id: int) -> bool:
    conn = get_conn()
    cur = conn.cursor()
    cur.execute("DELETE FROM products WHERE id = ? AND user_id = ?", (product_id, user_id))
    deleted = cur.rowcount > 0
    conn.commit()
    conn.close()
    return deleted


def get_all_products() -> List[Dict]:
    """Every tracked product (all users), oldest first, for the price-check worker."""
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(f"SELECT {_PRODUCT_COLUMNS} FROM products ORDER BY id")
    rows = cur.fetchall()
    conn.close()
    return [dict(r) for r in rows]


def record_price(
    product_id: int,
    price: float,
    *,
    title: Optional[str] = None,
    image_url: Optional[str] = None,
) -> None:
    """
    Set the product's current price and append a history entry in one transaction.
    Scraped title/image only fill in values the product does not have yet.
    """
    now = datetime.now(timezone.utc)
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        """
        UPDATE products
        SET current_price = ?,
            title = COALESCE(NULLIF(title, ''), ?, title),
            image_url = COALESCE(NULLIF(image_url, ''), ?, image_url),
            updated_at = ?
        WHERE id = ?
        """,
        (price, title or None, image_url or None, now, product_id),
    )
    cur.execute(
        "INSERT INTO price_history (product_id, price, recorded_at) VALUES (?, ?, ?)",
        (product_id, price, now),
    )
    conn.commit()
    conn.close()


def get_price_history(product_id: int, since: Optional[datetime] = None) -> List[Dict]:
    """History entries for a product in chronological order, optionally only those at/after `since`."""
    conn = get_conn()
    cur = conn.cursor()
    if since is None:
        cur.execute(
            """
            SELECT price, recorded_at FROM price_history
            WHERE product_id = ?
            ORDER BY recorded_at ASC, id ASC
            """,
            (product_id,),
        )
    else:
        cur.execute(
            """
            SELECT price, recorded_at FROM price_history
            WHERE product_id = ? AND recorded_at >= ?
            ORDER BY recorded_at ASC, id ASC
            """,
            (product_id, since),
        )
    rows = cur.fetchall()
    conn.close()
    return [{"price": r["price"], "date": r["recorded_at"]} for r in rows]


__all__ = [
    "DuplicateProductError",
    "create_product",
    "get_product_by_url",
    "get_products_for_user",
    "get_product_for_user",
    "update_product",
    "delete_product",
    "get_all_products",
    "record_price",
    "get_price_history",
]
