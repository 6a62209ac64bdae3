"""
Reads the top ASIN revenue for a brand from Helium 10 Black Box.

For one brand it opens the Black Box products search, runs an exact brand name
search, sorts the results by ASIN revenue and reads the first revenue cell.

It is designed to be used with a browser session that is already logged into
Helium 10. The login is stored as a Playwright storage state file, so you only
need to log in manually once:

    python helium10_session_runner.py --setup

The browser is accessed through a small page interface (navigate, settle, fill,
click, wait_for_selector, count, read_text). PlaywrightSearchPage implements it
on top of a real Playwright page; tests pass in a fake with the same methods.
"""
import os
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Optional

from playwright.sync_api import sync_playwright

# --- Configuration ---
HELIUM10_SEARCH_URL = "https://members.helium10.com/black-box/products"
HELIUM10_LOGIN_URL = "https://members.helium10.com/"
STORAGE_STATE_FILE = "auth.json"
BRANDS_CSV = "./brands.csv"

BRAND_INPUT_SELECTOR = 'input[data-testid="exactbrandsearch"]'
SEARCH_BUTTON_SELECTOR = 'button[data-testid="search"]'
REVENUE_HEADER_SELECTOR = 'div[data-field-name="childMonthlyRevenue"] div:has-text("ASIN Revenue")'
REVENUE_CELL_SELECTOR = 'div[data-testid="table-cell-childMonthlyRevenue"]'

# Returned when the results table never shows up, as opposed to "" for a brand without data
ERROR_SENTINEL = "error"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        print(f"⚠️  Invalid value for {name}: '{raw}', using default {default}")
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


@dataclass
class FetchConfig:
    """Browser and page settings for a revenue run"""
    search_url: str = HELIUM10_SEARCH_URL
    account_id: str = ""
    login_url: str = HELIUM10_LOGIN_URL
    storage_state_path: str = STORAGE_STATE_FILE
    csv_path: str = BRANDS_CSV
    settle_seconds: float = 3
    result_timeout_seconds: float = 10
    headless: bool = False
    brand_input_selector: str = BRAND_INPUT_SELECTOR
    search_button_selector: str = SEARCH_BUTTON_SELECTOR
    revenue_header_selector: str = REVENUE_HEADER_SELECTOR
    revenue_cell_selector: str = REVENUE_CELL_SELECTOR

    @property
    def page_url(self) -> str:
        if not self.account_id:
            return self.search_url
        separator = "&" if "?" in self.search_url else "?"
        return f"{self.search_url}{separator}accountId={self.account_id}"

    @classmethod
    def from_env(cls) -> "FetchConfig":
        return cls(
            search_url=os.getenv("HELIUM10_SEARCH_URL", "").strip() or HELIUM10_SEARCH_URL,
            account_id=os.getenv("HELIUM10_ACCOUNT_ID", "").strip(),
            storage_state_path=os.getenv("HELIUM10_STORAGE_STATE", "").strip() or STORAGE_STATE_FILE,
            csv_path=os.getenv("HELIUM10_BRANDS_CSV", "").strip() or BRANDS_CSV,
            settle_seconds=_env_float("HELIUM10_SETTLE_SECONDS", 3),
            result_timeout_seconds=_env_float("HELIUM10_RESULT_TIMEOUT_SECONDS", 10),
            headless=_env_bool("HELIUM10_HEADLESS", False),
        )


class PlaywrightSearchPage:
    """Page interface backed by a Playwright sync page"""

    def __init__(self, page):
        self.page = page

    def navigate(self, url: str):
        self.page.goto(url)

    def settle(self, seconds: float):
        self.page.wait_for_timeout(seconds * 1000)

    def fill(self, selector: str, value: str):
        self.page.fill(selector, value)

    def click(self, selector: str):
        self.page.click(selector)

    def wait_for_selector(self, selector: str, timeout_seconds: float):
        self.page.wait_for_selector(selector, timeout=timeout_seconds * 1000)

    def count(self, selector: str) -> int:
        return self.page.locator(selector).count()

    def read_text(self, selector: str) -> Optional[str]:
        return self.page.locator(selector).first.text_content()


def fetch_brand_revenue(page, brand: str, config: FetchConfig) -> str:
    """
    Search one brand and return the top ASIN revenue text.

    Returns the revenue string, "" when the search has no revenue data, or
    ERROR_SENTINEL when the results table did not appear in time.
    """
    page.navigate(config.page_url)
    # Give the client-side app time to render the search form
    page.settle(config.settle_seconds)

    page.fill(config.brand_input_selector, brand)
    page.click(config.search_button_selector)

    try:
        page.wait_for_selector(config.revenue_header_selector, config.result_timeout_seconds)
    except Exception as e:
        print(f"❌ Error waiting for ASIN Revenue: {e}")
        return ERROR_SENTINEL

    if not page.count(config.revenue_cell_selector):
        return ""

    # Sort by revenue so the first row holds the best seller
    page.click(config.revenue_header_selector)

    revenue = page.read_text(config.revenue_cell_selector)
    return (revenue or "").strip()


@contextmanager
def open_search_page(config: FetchConfig):
    """Launch Chromium with the stored Helium 10 login and yield a PlaywrightSearchPage"""
    with sync_playwright() as p:
        browser = p.chromium.launch(headless=config.headless)
        context_kwargs = {}
        if os.path.exists(config.storage_state_path):
            context_kwargs["storage_state"] = config.storage_state_path
        else:
            print(f"⚠️  Session file not found: {config.storage_state_path}")
            print("💡 Run with --setup first to log into Helium 10")
        context = browser.new_context(**context_kwargs)
        try:
            yield PlaywrightSearchPage(context.new_page())
        finally:
            context.close()
            browser.close()


def setup_session(config: FetchConfig):
    """
    Opens a browser for the user to log in and saves the session.
    """
    print("--- First-Time Setup ---")
    print("A browser window will now open. Please log into your Helium 10 account.")
    print("Open Black Box and make sure the product search loads.")
    print(f"The session will be saved to '{config.storage_state_path}'.")
    print("Close the browser window once you are successfully logged in.")

    with sync_playwright() as p:
        browser = p.chromium.launch(headless=False)
        context = browser.new_context()
        page = context.new_page()
        page.goto(config.login_url)

        print("\nWaiting for you to log in and close the browser...")
        page.wait_for_event("close", timeout=0)

        context.storage_state(path=config.storage_state_path)
        context.close()
        browser.close()

    print("\nSetup complete. Your session has been saved.")
    print("You can now run the script to fill in brand revenues.")
