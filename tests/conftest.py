"""Fixtures: fast settings, a fake Playwright page and a patched browser driver."""

from __future__ import annotations

from typing import Any, Callable
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from scraper_service.config import Settings
from scraper_service.pipeline import scripts


class FakePage:
    """Stands in for a Playwright ``Page``; answers the pipeline's in-page scripts."""

    def __init__(
        self,
        height: int = 0,
        grow: Callable[[int], int] | None = None,
        document: dict[str, Any] | None = None,
        url: str = "https://example.com/",
    ) -> None:
        self.url = url
        self.height = height
        self.grow = grow
        self.document = document
        self.offset = 0
        self.scrolls: list[int] = []
        self.extract_args: dict[str, Any] | None = None
        self.goto = AsyncMock()
        self.wait_for_timeout = AsyncMock()
        self.screenshot = AsyncMock(side_effect=self._screenshot)
        self.locator = MagicMock()

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        if script == scripts.SCROLL_HEIGHT:
            height = self.height
            if self.grow is not None:
                self.height = self.grow(self.height)
            return height
        if script == scripts.SCROLL_TO:
            self.offset = arg
            self.scrolls.append(arg)
            return None
        if script == scripts.EXTRACT_DOCUMENT:
            self.extract_args = arg
            return self.document
        raise AssertionError(f"unexpected script: {script[:40]}")

    async def _screenshot(self, **kwargs: Any) -> bytes:
        if kwargs.get("full_page"):
            return b"full-page"
        return f"tile@{self.offset}".encode()


def make_fast_settings(**overrides: Any) -> Settings:
    defaults: dict[str, Any] = dict(
        settle_delay_ms=0,
        post_scroll_delay_ms=0,
        scroll_interval_ms=0,
        tile_delay_ms=0,
        expand_click_pause_ms=0,
    )
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)  # type: ignore[call-arg]


@pytest.fixture
def settings() -> Settings:
    return make_fast_settings()


@pytest.fixture
def fake_page() -> FakePage:
    return FakePage(height=2000, document={"url": "https://example.com/", "title": "Example"})


class FakeDriver:
    """Mocks the chain async_playwright().start() → chromium → browser → context → page."""

    def __init__(self, page: Any) -> None:
        self.page = page
        self.context = MagicMock()
        self.context.add_cookies = AsyncMock()
        self.context.new_page = AsyncMock(return_value=page)

        self.browser = MagicMock()
        self.browser.new_context = AsyncMock(return_value=self.context)
        self.browser.close = AsyncMock()

        self.playwright = MagicMock()
        self.playwright.chromium.launch = AsyncMock(return_value=self.browser)
        self.playwright.stop = AsyncMock()

        self.starter = MagicMock()
        self.starter.start = AsyncMock(return_value=self.playwright)

    def __call__(self) -> MagicMock:
        return self.starter


@pytest.fixture
def driver(fake_page: FakePage):
    """Patch the Playwright entry point used by the session manager."""
    fake = FakeDriver(fake_page)
    with patch("scraper_service.pipeline.session.async_playwright", fake):
        yield fake
