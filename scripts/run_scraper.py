"""
Run the price checker once, or scrape a single URL to debug selectors.

Usage:
  DATABASE_URL=... python -m scripts.run_scraper                 # one pass over all products
  python -m scripts.run_scraper --url "https://www.amazon.com/dp/B0..."   # print scraped data only
"""
from __future__ import annotations

import argparse
import asyncio

from worker.main import run_once
from worker.scraper import scrape_product


def main() -> None:
    parser = argparse.ArgumentParser(description="Run one price-check pass.")
    parser.add_argument("--url", help="scrape only this URL and print the result")
    parser.add_argument("--headed", action="store_true", help="show the browser window")
    args = parser.parse_args()

    if args.url:
        data = asyncio.run(scrape_product(args.url, headless=not args.headed))
        print(data if data else "No data scraped.")
        return

    updated = asyncio.run(run_once())
    print(f"Updated {updated} product(s).")


if __name__ == "__main__":
    main()
