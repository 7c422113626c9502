import pytest

from app.validation import is_valid_email, is_valid_password, is_valid_product_url


@pytest.mark.parametrize(
    "email,expected",
    [
        ("user@example.com", True),
        ("User.Name+tag@example.co.uk", True),
        ("  user@example.com  ", True),  # trims spaces
        ("bademail", False),
        ("", False),
        ("user@no-tld", False),
        ("user @example.com", False),
        ("@gmail.com", False),
        ("user..name@example.com", False),
        ("user@.example.com", False),
    ],
)
def test_is_valid_email(email: str, expected: bool):
    assert is_valid_email(email) is expected


@pytest.mark.parametrize(
    "pw,expected",
    [
        ("Passw0rd", True),
        ("abc12345", True),
        ("Abcdef1!", True),
        ("a" * 63 + "1", True),     # 64 chars
        ("a" * 64 + "1", False),    # too long
        ("short1", False),
        ("Abcdef1", False),         # 7 chars
        ("pass word1", False),
        ("Passw0rd\n", False),
        ("lettersOnly", False),
        ("12345678", False),
        ("", False),
    ],
)
def test_is_valid_password(pw: str, expected: bool):
    assert is_valid_password(pw) is expected


@pytest.mark.parametrize(
    "url,expected",
    [
        ("https://www.amazon.com/dp/B000000000", True),
        ("http://walmart.com/ip/123", True),
        ("  https://www.aliexpress.com/item/1.html  ", True),
        ("ftp://example.com/file", False),
        ("www.amazon.com/dp/B0", False),
        ("https://localhost/item", False),
        ("not a url", False),
        ("", False),
    ],
)
def test_is_valid_product_url(url: str, expected: bool):
    assert is_valid_product_url(url) is expected
