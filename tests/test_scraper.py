import asyncio

import pytest

from worker import scraper


@pytest.mark.parametrize(
    "text,expected",
    [
        ("$1,299.99", 1299.99),
        ("  49.", 49.0),
        ("US $12.50", 12.5),
        ("Price: 7", 7.0),
        ("", None),
        (None, None),
        ("Currently unavailable", None),
        ("1.2.3", None),
    ],
)
def test_parse_price(text, expected):
    assert scraper.parse_price(text) == expected


@pytest.mark.parametrize(
    "url,site",
    [
        ("https://www.amazon.com/dp/B000000001", "amazon.com"),
        ("https://amazon.com/dp/B000000001", "amazon.com"),
        ("https://www.walmart.com/ip/123", "walmart.com"),
        ("https://m.aliexpress.com/item/1.html", "aliexpress.com"),
    ],
)
def test_selectors_for_supported_sites(url, site):
    assert scraper.selectors_for_url(url) is scraper.SITE_SELECTORS[site]


@pytest.mark.parametrize(
    "url",
    [
        "https://www.example.com/product",
        "https://notamazon.com/dp/B0",
        "https://amazon.com.evil.io/dp/B0",
    ],
)
def test_selectors_for_unsupported_sites(url):
    assert scraper.selectors_for_url(url) is None


class _FakeElement:
    def __init__(self, text="", attrs=None):
        self._text = text
        self._attrs = attrs or {}

    async def text_content(self):
        return self._text

    async def get_attribute(self, name):
        return self._attrs.get(name)


class _FakePage:
    def __init__(self, elements):
        self._elements = elements

    async def query_selector(self, selector):
        return self._elements.get(selector)


def test_extract_product_data_uses_first_matching_selector():
    page = _FakePage(
        {
            "#productTitle": _FakeElement("  Noise Cancelling Headphones \n"),
            ".a-price-whole": _FakeElement("   "),
            "#priceblock_ourprice": _FakeElement("$249.00"),
            "#landingImage": _FakeElement(attrs={"src": "https://images.example/h.jpg"}),
        }
    )

    data = asyncio.run(scraper.extract_product_data(page, "https://www.amazon.com/dp/B000000001"))
    assert data == {
        "title": "Noise Cancelling Headphones",
        "price": 249.0,
        "image_url": "https://images.example/h.jpg",
    }


def test_extract_product_data_missing_fields_are_none():
    page = _FakePage({"h1": _FakeElement("Walmart Item")})

    data = asyncio.run(scraper.extract_product_data(page, "https://www.walmart.com/ip/1"))
    assert data == {"title": "Walmart Item", "price": None, "image_url": None}


def test_extract_product_data_unsupported_site():
    data = asyncio.run(scraper.extract_product_data(_FakePage({}), "https://shop.example.com/p/1"))
    assert data == {"title": None, "price": None, "image_url": None}


def test_scrape_products_empty_list_skips_browser(monkeypatch):
    def _no_browser():
        raise AssertionError("browser should not start")

    monkeypatch.setattr(scraper, "async_playwright", _no_browser)
    assert asyncio.run(scraper.scrape_products([])) == []


class _FakeBrowserPage(_FakePage):
    def __init__(self, elements, fail_urls, opened):
        super().__init__(elements)
        self._fail_urls = fail_urls
        self.closed = False
        opened.append(self)

    async def goto(self, url, **kwargs):
        if url in self._fail_urls:
            raise RuntimeError("net::ERR_NAME_NOT_RESOLVED")

    async def close(self):
        self.closed = True


class _FakeContext:
    def __init__(self, browser):
        self._browser = browser

    async def new_page(self):
        return _FakeBrowserPage(self._browser.elements, self._browser.fail_urls, self._browser.pages)


class _FakeBrowser:
    def __init__(self, elements, fail_urls):
        self.elements = elements
        self.fail_urls = fail_urls
        self.pages = []
        self.closed = False

    async def new_context(self):
        return _FakeContext(self)

    async def close(self):
        self.closed = True


class _FakePlaywright:
    def __init__(self, browser):
        self._browser = browser
        self.chromium = self

    async def launch(self, headless=True):
        return self._browser

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


def test_scrape_products_isolates_failing_urls(monkeypatch, caplog):
    browser = _FakeBrowser(
        {
            "#productTitle": _FakeElement("Headphones"),
            ".a-price-whole": _FakeElement("$89.99"),
            "#landingImage": _FakeElement(attrs={"src": "https://images.example/h.jpg"}),
        },
        fail_urls={"https://www.amazon.com/dp/B000000002"},
    )
    monkeypatch.setattr(scraper, "async_playwright", lambda: _FakePlaywright(browser))
    products = [
        {"id": 1, "url": "https://www.amazon.com/dp/B000000001"},
        {"id": 2, "url": "https://www.amazon.com/dp/B000000002"},
        {"id": 3, "url": "https://www.amazon.com/dp/B000000003"},
    ]

    with caplog.at_level("ERROR"):
        results = asyncio.run(scraper.scrape_products(products))

    scraped = {"title": "Headphones", "price": 89.99, "image_url": "https://images.example/h.jpg"}
    assert results == [(products[0], scraped), (products[1], None), (products[2], scraped)]
    assert len(browser.pages) == 3
    assert all(page.closed for page in browser.pages)
    assert browser.closed is True
    assert any("Error scraping product" in rec.message for rec in caplog.records)
