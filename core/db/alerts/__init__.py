"""
Target-price alert history.

Products are owned by users; `price_alerts` records every notification the worker
tried to send when a product's price reached its target, so failed emails stay visible.
"""
from core.db.alerts.deliveries_store import (
    create_price_alert,
    mark_price_alert_sent,
    mark_price_alert_failed,
    get_price_alerts_for_product,
)

__all__ = [
    "create_price_alert",
    "mark_price_alert_sent",
    "mark_price_alert_failed",
    "get_price_alerts_for_product",
]
