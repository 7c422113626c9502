import asyncio
import logging
import os
from typing import Dict

from dotenv import load_dotenv

from app.email_utils import send_text_email
from core.database import (
    create_price_alert,
    get_all_products,
    get_user_by_id,
    init_db,
    mark_price_alert_failed,
    mark_price_alert_sent,
    record_price,
)
from worker.scraper import scrape_products

# Load `.env` for local/dev runs (override=True so updates take effect after restart).
load_dotenv(override=True)

# -------- CONFIG --------
CHECK_INTERVAL = int(os.getenv("SCRAPE_INTERVAL_SECONDS", "3600"))  # hourly by default
RUN_ONCE = os.getenv("RUN_ONCE", "false").lower() == "true"
HEADLESS = os.getenv("PLAYWRIGHT_HEADLESS", "true").lower() == "true"
# ------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
log = logging.getLogger("worker")


def _alert_body(product: Dict, price: float) -> str:
    lines = [
        "Good news! A product you are tracking reached your target price.",
        "",
        f"Product: {product.get('title') or product['url']}",
        f"Current price: ${price:.2f}",
        f"Target price: ${product['target_price']:.2f}",
        f"URL: {product['url']}",
    ]
    return "\n".join(lines)


def notify_target_reached(product: Dict, price: float) -> bool:
    """Record and email a target-price alert for the product's owner. Returns True when sent."""
    user = get_user_by_id(product["user_id"])
    if not user or not user.get("email"):
        log.warning("Owner missing for product", extra={"product_id": product["id"]})
        return False

    alert_id = create_price_alert(user_id=user["id"], product_id=product["id"], price=price)
    try:
        send_text_email(
            to_email=user["email"],
            subject=f"Price alert: {product.get('title') or 'your product'}",
            body=_alert_body(product, price),
        )
    except Exception as e:
        log.error("Failed to send price alert", extra={"to": user["email"], "error": str(e)})
        mark_price_alert_failed(alert_id, str(e))
        return False

    mark_price_alert_sent(alert_id)
    log.info("Price alert sent", extra={"to": user["email"], "product_id": product["id"]})
    return True


async def run_once() -> int:
    """
    Do one full pass:
    - load every tracked product
    - scrape them one by one in a single browser
    - store changed prices and append history
    - email owners whose target price was reached
    Returns number of products whose price changed.
    """
    products = get_all_products()
    log.info("Checking prices...", extra={"products": len(products)})
    if not products:
        return 0

    results = await scrape_products(products, headless=HEADLESS)

    updated = 0
    for product, data in results:
        price = (data or {}).get("price")
        if not price or price == product["current_price"]:
            continue

        try:
            record_price(
                product["id"],
                price,
                title=data.get("title"),
                image_url=data.get("image_url"),
            )
            updated += 1
            log.info(
                "Price updated",
                extra={"product_id": product["id"], "old": product["current_price"], "new": price},
            )
            if price <= product["target_price"]:
                notify_target_reached(product, price)
        except Exception as e:
            log.error("Failed to update product", extra={"product_id": product["id"], "error": str(e)})

    log.info("Cycle complete", extra={"updated": updated})
    return updated


async def main():
    init_db()

    while True:
        try:
            await run_once()
        except Exception as e:
            log.exception("Error during run", extra={"error": str(e)})

        if RUN_ONCE:
            break

        log.info("Sleeping", extra={"seconds": CHECK_INTERVAL})
        await asyncio.sleep(CHECK_INTERVAL)


if __name__ == "__main__":
    asyncio.run(main())
