"""
Product and price history storage re-exports.
"""
from core.db.products.products_store import (
    DuplicateProductError,
    create_product,
    get_product_by_url,
    get_products_for_user,
    get_product_for_user,
    update_product,
    delete_product,
    get_all_products,
    record_price,
    get_price_history,
)

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
