import logging
import os
import re
from typing import Dict, List, Optional, Tuple
from urllib.parse import urlparse

from playwright.async_api import async_playwright

HEADLESS = os.getenv("PLAYWRIGHT_HEADLESS", "true").lower() == "true"
NAVIGATION_TIMEOUT_MS = 45000

log = logging.getLogger("scraper")

# domain -> selectors tried in order for each field
SITE_SELECTORS: Dict[str, Dict[str, List[str]]] = {
    "amazon.com": {
        "title": ["#productTitle"],
        "price": [".a-price-whole", "#priceblock_ourprice", "#priceblock_dealprice"],
        "image": ["#landingImage"],
    },
    "walmart.com": {
        "title": ["h1[itemprop='name']", "h1"],
        "price": ['[data-automation-id="product-price"]'],
        "image": ['[data-testid="hero-image-container"] img'],
    },
    "aliexpress.com": {
        "title": ["h1"],
        "price": [".product-price-value"],
        "image": [".magnifier--image--EYYoSlr", ".image-view-magnifier-wrap img"],
    },
}


def selectors_for_url(url: str) -> Optional[Dict[str, List[str]]]:
    """Return the selector set for the URL's retailer, or None for unsupported sites."""
    host = (urlparse(url).hostname or "").lower()
    for domain, selectors in SITE_SELECTORS.items():
        if host == domain or host.endswith("." + domain):
            return selectors
    return None


def parse_price(text: Optional[str]) -> Optional[float]:
    """
    Turn a displayed price like "$1,299.99" into 1299.99.
    Everything except digits and dots is dropped; unparseable text gives None.
    """
    cleaned = re.sub(r"[^0-9.]", "", text or "")
    if not cleaned:
        return None
    try:
        return float(cleaned)
    except ValueError:
        return None


async def _first_text(page, selectors: List[str]) -> Optional[str]:
    for selector in selectors:
        element = await page.query_selector(selector)
        if not element:
            continue
        text = (await element.text_content() or "").strip()
        if text:
            return text
    return None


async def _first_attribute(page, selectors: List[str], name: str) -> Optional[str]:
    for selector in selectors:
        element = await page.query_selector(selector)
        if not element:
            continue
        value = (await element.get_attribute(name) or "").strip()
        if value:
            return value
    return None


async def extract_product_data(page, url: str) -> Dict:
    """
    Read title/price/image from an already-loaded page:
    {title, price, image_url}; fields the site does not expose are None.
    """
    selectors = selectors_for_url(url)
    if not selectors:
        log.info("No selectors for site", extra={"url": url})
        return {"title": None, "price": None, "image_url": None}

    title = await _first_text(page, selectors.get("title", []))
    price = parse_price(await _first_text(page, selectors.get("price", [])))
    image_url = await _first_attribute(page, selectors.get("image", []), "src")
    return {"title": title, "price": price, "image_url": image_url}


async def scrape_product(url: str, headless: bool = HEADLESS) -> Optional[Dict]:
    """
    Open the URL in a fresh headless browser and extract product data.
    Any failure (launch, navigation, extraction) is logged and gives None.
    """
    try:
        async with async_playwright() as p:
            browser = await p.chromium.launch(headless=headless)
            try:
                page = await browser.new_page()
                await page.goto(url, wait_until="networkidle", timeout=NAVIGATION_TIMEOUT_MS)
                return await extract_product_data(page, url)
            finally:
                await browser.close()
    except Exception as e:
        log.warning("Scraping failed", extra={"url": url, "error": str(e)})
        return None


async def scrape_products(products: List[Dict], headless: bool = HEADLESS) -> List[Tuple[Dict, Optional[Dict]]]:
    """
    Scrape every product strictly one after another in a single browser.
    Returns (product, data) pairs; data is None when that URL failed.
    """
    results: List[Tuple[Dict, Optional[Dict]]] = []
    if not products:
        return results

    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=headless)
        context = await browser.new_context()
        try:
            for product in products:
                url = product["url"]
                page = await context.new_page()
                try:
                    await page.goto(url, wait_until="domcontentloaded", timeout=NAVIGATION_TIMEOUT_MS)
                    data = await extract_product_data(page, url)
                except Exception as e:
                    log.error("Error scraping product", extra={"url": url, "error": str(e)})
                    data = None
                finally:
                    await page.close()
                results.append((product, data))
        finally:
            await browser.close()

    return results
