"""
Flat storage API used by the web app and the worker.
"""
from core.db.base import get_conn
from core.db.schema import init_db
from core.db.users import (
    DuplicateUserError,
    hash_password,
    verify_password,
    create_user,
    get_user_by_email,
    get_user_by_id,
    get_user_by_google_id,
    link_google_account,
    update_user_password,
    create_password_reset_token,
    get_password_reset_token,
    mark_reset_token_used,
    create_email_verification_token,
    get_email_verification_token,
    mark_email_verification_token_used,
    mark_user_email_verified,
)
from core.db.products import (
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
from core.db.two_factor import (
    save_two_factor_secret,
    get_two_factor,
    set_two_factor_enabled,
    consume_backup_code,
    get_backup_codes,
)
from core.db.alerts import (
    create_price_alert,
    mark_price_alert_sent,
    mark_price_alert_failed,
    get_price_alerts_for_product,
)

__all__ = [
    "get_conn",
    "init_db",
    "DuplicateUserError",
    "hash_password",
    "verify_password",
    "create_user",
    "get_user_by_email",
    "get_user_by_id",
    "get_user_by_google_id",
    "link_google_account",
    "update_user_password",
    "create_password_reset_token",
    "get_password_reset_token",
    "mark_reset_token_used",
    "create_email_verification_token",
    "get_email_verification_token",
    "mark_email_verification_token_used",
    "mark_user_email_verified",
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
    "save_two_factor_secret",
    "get_two_factor",
    "set_two_factor_enabled",
    "consume_backup_code",
    "get_backup_codes",
    "create_price_alert",
    "mark_price_alert_sent",
    "mark_price_alert_failed",
    "get_price_alerts_for_product",
]
