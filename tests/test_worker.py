import asyncio

import pytest

import worker.main as worker_main


def _make_product(id_=1, current_price=100.0, target_price=80.0):
    return {
        "id": id_,
        "user_id": 10,
        "url": f"https://www.amazon.com/dp/B00000000{id_}",
        "title": f"Product {id_}",
        "image_url": "",
        "current_price": current_price,
        "target_price": target_price,
    }


def _patch_scrape(monkeypatch, products, results):
    monkeypatch.setattr(worker_main, "get_all_products", lambda: products)

    async def _scrape_products(_products, headless=True):
        return [(p, results.get(p["id"])) for p in _products]

    monkeypatch.setattr(worker_main, "scrape_products", _scrape_products)


@pytest.fixture
def alert_calls(monkeypatch):
    calls = []
    monkeypatch.setattr(worker_main, "get_user_by_id", lambda uid: {"id": uid, "email": "owner@example.com"})
    monkeypatch.setattr(worker_main, "create_price_alert", lambda **kw: calls.append(("create", kw)) or 99)
    monkeypatch.setattr(worker_main, "mark_price_alert_sent", lambda alert_id: calls.append(("sent", alert_id)))
    monkeypatch.setattr(
        worker_main, "mark_price_alert_failed", lambda alert_id, error: calls.append(("failed", alert_id, error))
    )
    return calls


def test_run_once_records_changes_and_alerts_at_target(monkeypatch, alert_calls):
    products = [
        _make_product(1, current_price=100.0, target_price=80.0),  # drops below target
        _make_product(2, current_price=50.0, target_price=10.0),   # unchanged
        _make_product(3, current_price=30.0, target_price=10.0),   # scrape failed
        _make_product(4, current_price=30.0, target_price=10.0),   # changed, above target
    ]
    _patch_scrape(
        monkeypatch,
        products,
        {
            1: {"title": "Product 1", "price": 79.99, "image_url": None},
            2: {"title": "Product 2", "price": 50.0, "image_url": None},
            3: None,
            4: {"title": None, "price": 35.0, "image_url": "https://img/4.jpg"},
        },
    )
    recorded = []
    sent = []
    monkeypatch.setattr(
        worker_main,
        "record_price",
        lambda pid, price, title=None, image_url=None: recorded.append((pid, price, title, image_url)),
    )
    monkeypatch.setattr(worker_main, "send_text_email", lambda to_email, subject, body: sent.append((to_email, body)))

    updated = asyncio.run(worker_main.run_once())

    assert updated == 2
    assert recorded == [(1, 79.99, "Product 1", None), (4, 35.0, None, "https://img/4.jpg")]
    assert len(sent) == 1
    assert sent[0][0] == "owner@example.com"
    assert "$79.99" in sent[0][1]
    assert alert_calls == [("create", {"user_id": 10, "product_id": 1, "price": 79.99}), ("sent", 99)]


def test_run_once_alerts_when_price_equals_target(monkeypatch, alert_calls):
    products = [_make_product(1, current_price=100.0, target_price=80.0)]
    _patch_scrape(monkeypatch, products, {1: {"title": None, "price": 80.0, "image_url": None}})
    monkeypatch.setattr(worker_main, "record_price", lambda *a, **k: None)
    monkeypatch.setattr(worker_main, "send_text_email", lambda **kw: None)

    assert asyncio.run(worker_main.run_once()) == 1
    assert ("sent", 99) in alert_calls


def test_run_once_without_products_skips_scraping(monkeypatch):
    monkeypatch.setattr(worker_main, "get_all_products", lambda: [])

    async def _fail(*args, **kwargs):
        raise AssertionError("scraper should not run")

    monkeypatch.setattr(worker_main, "scrape_products", _fail)
    assert asyncio.run(worker_main.run_once()) == 0


def test_run_once_logs_and_continues_on_smtp_failure(monkeypatch, caplog, alert_calls):
    products = [_make_product(1, current_price=100.0, target_price=80.0)]
    _patch_scrape(monkeypatch, products, {1: {"title": None, "price": 70.0, "image_url": None}})
    monkeypatch.setattr(worker_main, "record_price", lambda *a, **k: None)

    def _fail(*args, **kwargs):
        raise RuntimeError("SMTP down")

    monkeypatch.setattr(worker_main, "send_text_email", _fail)

    with caplog.at_level("ERROR"):
        updated = asyncio.run(worker_main.run_once())
        assert any("Failed to send price alert" in rec.message for rec in caplog.records)

    # The price change is still stored; only the email failed
    assert updated == 1
    assert ("failed", 99, "SMTP down") in alert_calls


def test_run_once_isolates_store_errors(monkeypatch, caplog):
    products = [_make_product(1), _make_product(2)]
    _patch_scrape(
        monkeypatch,
        products,
        {1: {"title": None, "price": 95.0, "image_url": None}, 2: {"title": None, "price": 96.0, "image_url": None}},
    )
    recorded = []

    def _record(pid, price, title=None, image_url=None):
        if pid == 1:
            raise RuntimeError("db gone")
        recorded.append(pid)

    monkeypatch.setattr(worker_main, "record_price", _record)

    with caplog.at_level("ERROR"):
        updated = asyncio.run(worker_main.run_once())
    assert updated == 1
    assert recorded == [2]
    assert any("Failed to update product" in rec.message for rec in caplog.records)


def test_notify_skips_missing_owner(monkeypatch):
    monkeypatch.setattr(worker_main, "get_user_by_id", lambda uid: None)
    assert worker_main.notify_target_reached(_make_product(), 70.0) is False
