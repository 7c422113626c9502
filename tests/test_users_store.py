import pytest

from core.db.users import auth as user_auth
from core.db.users import user_store

pytestmark = pytest.mark.usefixtures("clean_db")


def test_create_user_normalizes_email_and_hashes_password():
    user_id = user_store.create_user("  Mixed@Example.COM ", "Passw0rd1", " Jane ")
    user = user_store.get_user_by_email("mixed@example.com")

    assert user["id"] == user_id
    assert user["name"] == "Jane"
    assert user["password_hash"] != "Passw0rd1"
    assert user_auth.verify_password("Passw0rd1", user["password_hash"]) is True


def test_duplicate_email_is_rejected_by_database():
    user_store.create_user("dup@example.com", "Passw0rd1", "Jane")
    with pytest.raises(user_store.DuplicateUserError):
        user_store.create_user("DUP@example.com", "Passw0rd1", "Jane")


def test_google_user_has_no_password():
    user_id = user_store.create_user(
        "g@example.com", None, "Google User", google_id="g-1", avatar="https://pic", verified=True
    )
    user = user_store.get_user_by_google_id("g-1")

    assert user["id"] == user_id
    assert user["password_hash"] is None
    assert user["is_verified"] is True
    assert user_auth.verify_password("anything1", user["password_hash"]) is False


def test_link_google_account_keeps_password_and_verifies_email():
    user_id = user_store.create_user("link@example.com", "Passw0rd1", "Jane")
    user_store.link_google_account(user_id, "g-2", "https://avatar")
    user = user_store.get_user_by_id(user_id)

    assert user["google_id"] == "g-2"
    assert user["avatar"] == "https://avatar"
    assert user["is_email_verified"] is True
    assert user_auth.verify_password("Passw0rd1", user["password_hash"]) is True

