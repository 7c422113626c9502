"""
Price statistics over a product's history.

Everything is recomputed from the full history on each call; histories are small.
History entries are dicts with "price" and "date" keys, oldest first.
"""
from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Dict, List, Optional


def calculate_price_volatility(price_history: List[Dict]) -> float:
    """Population standard deviation of the recorded prices (0 with fewer than two entries)."""
    if len(price_history) < 2:
        return 0.0

    prices = [p["price"] for p in price_history]
    mean = sum(prices) / len(prices)
    variance = sum((price - mean) ** 2 for price in prices) / len(prices)
    return math.sqrt(variance)


def find_best_time_to_buy(price_history: List[Dict]) -> str:
    if not price_history:
        return "No data available"

    lowest = min(price_history, key=lambda p: p["price"])
    return f"Best price was ${lowest['price']:.2f} on {lowest['date']:%Y-%m-%d}"


def product_stats(product: Dict, now: Optional[datetime] = None) -> Dict:
    """Summary shown on the product list: range, last change, target state, savings."""
    now = now or datetime.now(timezone.utc)
    history = product.get("price_history") or []
    current_price = product["current_price"]
    target_price = product["target_price"]

    lowest_price = current_price
    highest_price = current_price
    price_change = 0.0
    price_change_percent = 0.0

    if history:
        prices = [p["price"] for p in history]
        lowest_price = min(prices + [current_price])
        highest_price = max(prices + [current_price])

        if len(history) > 1:
            previous_price = history[-2]["price"]
            price_change = current_price - previous_price
            if previous_price:
                price_change_percent = price_change / previous_price * 100

    savings_from_highest = highest_price - current_price
    savings_percent = savings_from_highest / highest_price * 100 if highest_price > 0 else 0.0
    days_tracked = math.ceil((now - product["created_at"]).total_seconds() / 86400)

    return {
        "lowestPrice": lowest_price,
        "highestPrice": highest_price,
        "priceChange": price_change,
        "priceChangePercent": round(price_change_percent, 2),
        "isAtTarget": current_price <= target_price,
        "savingsFromHighest": savings_from_highest,
        "savingsPercent": round(savings_percent, 2),
        "daysTracked": days_tracked,
    }


def product_analytics(product: Dict) -> Dict:
    """Detailed analytics for a single product page."""
    history = product.get("price_history") or []
    if history:
        average_price = sum(p["price"] for p in history) / len(history)
        last_updated = history[-1]["date"]
    else:
        average_price = product["current_price"]
        last_updated = product["updated_at"]

    return {
        "totalDataPoints": len(history),
        "averagePrice": average_price,
        "priceVolatility": calculate_price_volatility(history),
        "bestTimeToBuy": find_best_time_to_buy(history),
        "priceDropAlerts": len([p for p in history if p["price"] <= product["target_price"]]),
        "lastUpdated": last_updated,
    }


__all__ = [
    "calculate_price_volatility",
    "find_best_time_to_buy",
    "product_stats",
    "product_analytics",
]
