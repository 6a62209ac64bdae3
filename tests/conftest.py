from __future__ import annotations

from typing import Optional

import pytest


class FakeSearchPage:
    """In-memory stand-in for PlaywrightSearchPage that records every call."""

    def __init__(
        self,
        revenue: Optional[str] = "$1,000",
        cells: int = 1,
        header_appears: bool = True,
        navigate_error: Optional[Exception] = None,
    ) -> None:
        self.revenue = revenue
        self.cells = cells
        self.header_appears = header_appears
        self.navigate_error = navigate_error
        self.calls: list[tuple] = []

    def navigate(self, url: str) -> None:
        self.calls.append(("navigate", url))
        if self.navigate_error is not None:
            raise self.navigate_error

    def settle(self, seconds: float) -> None:
        self.calls.append(("settle", seconds))

    def fill(self, selector: str, value: str) -> None:
        self.calls.append(("fill", selector, value))

    def click(self, selector: str) -> None:
        self.calls.append(("click", selector))

    def wait_for_selector(self, selector: str, timeout_seconds: float) -> None:
        self.calls.append(("wait_for_selector", selector, timeout_seconds))
        if not self.header_appears:
            raise TimeoutError(f"Timeout {timeout_seconds * 1000:.0f}ms exceeded")

    def count(self, selector: str) -> int:
        self.calls.append(("count", selector))
        return self.cells

    def read_text(self, selector: str) -> Optional[str]:
        self.calls.append(("read_text", selector))
        return self.revenue

    def call_names(self) -> list[str]:
        return [call[0] for call in self.calls]


@pytest.fixture
def fake_page_factory():
    return FakeSearchPage


@pytest.fixture(autouse=True)
def _clean_helium10_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "HELIUM10_SEARCH_URL",
        "HELIUM10_ACCOUNT_ID",
        "HELIUM10_STORAGE_STATE",
        "HELIUM10_BRANDS_CSV",
        "HELIUM10_SETTLE_SECONDS",
        "HELIUM10_RESULT_TIMEOUT_SECONDS",
        "HELIUM10_HEADLESS",
    ):
        monkeypatch.delenv(name, raising=False)
