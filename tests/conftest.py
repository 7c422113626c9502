import os

import pytest

from app.security import reset_rate_limits


def _truncate_all():
    from core.db.base import get_conn
    from core.db.schema import TABLES

    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        "TRUNCATE " + ", ".join(TABLES) + " RESTART IDENTITY CASCADE"
    )
    conn.commit()
    conn.close()


@pytest.fixture
def clean_db():
    """Postgres-backed tests only: needs DATABASE_URL, empties every table around the test."""
    if not os.getenv("DATABASE_URL"):
        pytest.skip("DATABASE_URL must be set for Postgres-only tests.")

    from core.db.schema import init_db

    init_db()
    _truncate_all()
    yield
    _truncate_all()


@pytest.fixture(autouse=True)
def _reset_rate_limits():
    reset_rate_limits()
    yield
    reset_rate_limits()
