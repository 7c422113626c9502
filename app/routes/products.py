import logging
from datetime import datetime, timedelta, timezone
from typing import Dict

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, Response

from app.auth_utils import get_current_user
from app.errors import ApiError
from app.schemas import ProductCreate, ProductUpdate
from core.database import (
    DuplicateProductError,
    create_product,
    delete_product,
    get_price_alerts_for_product,
    get_price_history,
    get_product_by_url,
    get_product_for_user,
    get_products_for_user,
    record_price,
    update_product,
)
from core.price_stats import product_analytics, product_stats
from worker.scraper import scrape_product

log = logging.getLogger(__name__)
router = APIRouter(prefix="/api/products", tags=["products"])


def serialize_product(product: Dict) -> Dict:
    return {
        "id": product["id"],
        "url": product["url"],
        "title": product["title"],
        "imageUrl": product.get("image_url") or "",
        "currentPrice": product["current_price"],
        "targetPrice": product["target_price"],
        "priceHistory": product.get("price_history") or [],
        "user": product["user_id"],
        "createdAt": product["created_at"],
        "updatedAt": product["updated_at"],
    }


def _owned_product(product_id: int, user) -> Dict:
    product = get_product_for_user(product_id, user["id"])
    if not product:
        raise ApiError("Product not found", 404)
    return product


@router.get("")
def list_products(user=Depends(get_current_user)):
    products = get_products_for_user(user["id"])
    now = datetime.now(timezone.utc)
    data = []
    for product in products:
        item = serialize_product(product)
        item["stats"] = product_stats(product, now=now)
        data.append(item)
    return {"status": "success", "results": len(data), "data": data}


@router.get("/{product_id}")
def get_product(product_id: int, user=Depends(get_current_user)):
    product = _owned_product(product_id, user)
    data = serialize_product(product)
    data["analytics"] = product_analytics(product)
    return {"status": "success", "data": data}


@router.post("", status_code=201)
async def add_product(payload: ProductCreate, user=Depends(get_current_user)):
    if get_product_by_url(user["id"], payload.url):
        raise ApiError("Product already being tracked", 400)

    scraped = None
    try:
        scraped = await scrape_product(payload.url)
    except Exception as e:
        log.warning("Initial scraping failed for %s, will retry later: %s", payload.url, e)
    scraped = scraped or {}

    try:
        product = create_product(
            user_id=user["id"],
            url=payload.url,
            target_price=payload.target_price,
            title=payload.title or scraped.get("title") or "Product",
            image_url=scraped.get("image_url") or "",
            current_price=scraped.get("price"),
        )
    except DuplicateProductError:
        raise ApiError("Product already being tracked", 400)

    return {"status": "success", "data": serialize_product(product)}


@router.patch("/{product_id}")
def edit_product(product_id: int, payload: ProductUpdate, user=Depends(get_current_user)):
    product = update_product(
        product_id,
        user["id"],
        title=payload.title,
        target_price=payload.target_price,
    )
    if not product:
        raise ApiError("Product not found", 404)
    return {"status": "success", "data": serialize_product(product)}


@router.delete("/{product_id}", status_code=204)
def remove_product(product_id: int, user=Depends(get_current_user)):
    if not delete_product(product_id, user["id"]):
        raise ApiError("Product not found", 404)
    return Response(status_code=204)


@router.post("/{product_id}/refresh")
async def refresh_product_price(product_id: int, user=Depends(get_current_user)):
    product = _owned_product(product_id, user)

    try:
        scraped = await scrape_product(product["url"])
    except Exception as e:
        log.error("Refresh failed for product_id=%s: %s", product_id, e)
        return JSONResponse(
            {"message": "Failed to refresh price", "error": str(e) or "Unknown error"},
            status_code=500,
        )

    new_price = (scraped or {}).get("price")
    price_changed = bool(new_price) and new_price != product["current_price"]
    if price_changed:
        record_price(
            product["id"],
            new_price,
            title=scraped.get("title"),
            image_url=scraped.get("image_url"),
        )
        product = _owned_product(product_id, user)

    data = serialize_product(product)
    if price_changed:
        data["message"] = "Price updated successfully"
    elif new_price:
        data["message"] = "Price unchanged"
    else:
        data["message"] = "Could not read a price from the page"
    data["newPrice"] = new_price
    data["priceChanged"] = price_changed
    return data


@router.get("/{product_id}/history")
def price_history(
    product_id: int,
    days: int = Query(30, ge=1, le=3650),
    user=Depends(get_current_user),
):
    product = _owned_product(product_id, user)
    since = datetime.now(timezone.utc) - timedelta(days=days)
    return {
        "productId": product["id"],
        "title": product["title"],
        "currentPrice": product["current_price"],
        "targetPrice": product["target_price"],
        "priceHistory": get_price_history(product["id"], since=since),
        "period": f"{days} days",
    }


@router.get("/{product_id}/alerts")
def price_alerts(product_id: int, user=Depends(get_current_user)):
    product = _owned_product(product_id, user)
    alerts = get_price_alerts_for_product(product["id"])
    return {"status": "success", "results": len(alerts), "data": alerts}
