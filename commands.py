# Quick reference commands (run from repo root). These are comments only; copy/paste as needed.

# Install the app with test dependencies, then the browser used by the scraper
# python -m pip install -e ".[test]"
# python -m playwright install chromium

# Run the full test suite (Postgres-backed tests are skipped without DATABASE_URL)
# python -m pytest
# DATABASE_URL=postgresql://localhost/price_tracker_test python -m pytest

# Run focused test files
# python -m pytest tests/test_validation.py tests/test_tokens.py
# python -m pytest tests/test_auth_flow.py tests/test_rate_limits.py
# python -m pytest tests/test_products_api.py tests/test_price_stats.py
# python -m pytest tests/test_two_factor.py tests/test_google_oauth.py
# python -m pytest tests/test_scraper.py tests/test_worker.py
# python -m pytest tests/test_products_store.py tests/test_two_factor_store.py

# Start the API locally (with env vars loaded)
# python -m dotenv run -- python -m uvicorn app.api:app --reload --port 3001

# Run the hourly price-check worker
# python -m dotenv run -- python main.py

# One pass over every product, or debug selectors for a single page
# python -m dotenv run -- python -m scripts.run_scraper
# python -m scripts.run_scraper --url "https://www.amazon.com/dp/B0..." --headed
