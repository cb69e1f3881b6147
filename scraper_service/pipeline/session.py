"""Browser session manager. One isolated Chromium per request."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright

from scraper_service.errors import SessionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Cookie:
    """A single cookie scoped to the request URL."""

    name: str
    value: str
    url: str

    def to_playwright(self) -> dict[str, str]:
        return {"name": self.name, "value": self.value, "url": self.url}


@dataclass(frozen=True)
class ContextConfig:
    """Everything needed to build one isolated browsing context."""

    viewport_width: int
    viewport_height: int
    user_agent: str
    cookies: tuple[Cookie, ...] = ()
    extra_headers: dict[str, str] = field(default_factory=dict)


@dataclass
class BrowserSession:
    """A live browser process, its context and the single page it drives."""

    playwright: Playwright
    browser: Browser | None
    context: BrowserContext | None
    page: Page | None
    released: bool = False


def parse_cookie_header(cookie_header: str | None, url: str) -> list[Cookie]:
    """Split a raw ``name=value; name2=value2`` header into cookies for *url*.

    Parts without a name are dropped. Values may themselves contain ``=``.
    """
    if not cookie_header:
        return []

    cookies: list[Cookie] = []
    for part in cookie_header.split(";"):
        name, sep, value = part.partition("=")
        name = name.strip()
        if not sep or not name:
            continue
        cookies.append(Cookie(name=name, value=value.strip(), url=url))
    return cookies


class BrowserSessionManager:
    """Launches and tears down a fresh browser for every request.

    There is no pooling: each ``acquire`` spawns a new Chromium process and each
    ``release`` terminates it.
    """

    def __init__(self, headless: bool = True, browser_args: list[str] | None = None) -> None:
        self._headless = headless
        self._browser_args = list(browser_args or [])

    async def acquire(self, config: ContextConfig) -> BrowserSession:
        """Start Playwright, launch Chromium and open one page configured by *config*."""
        try:
            playwright = await async_playwright().start()
        except Exception as exc:
            raise SessionError("Failed to start browser driver", detail=str(exc)) from exc

        session = BrowserSession(playwright=playwright, browser=None, context=None, page=None)
        try:
            session.browser = await playwright.chromium.launch(
                headless=self._headless,
                args=self._browser_args,
            )
            context_kwargs: dict[str, Any] = {
                "viewport": {"width": config.viewport_width, "height": config.viewport_height},
                "user_agent": config.user_agent,
            }
            if config.extra_headers:
                context_kwargs["extra_http_headers"] = dict(config.extra_headers)
            session.context = await session.browser.new_context(**context_kwargs)
            if config.cookies:
                await session.context.add_cookies([c.to_playwright() for c in config.cookies])
            session.page = await session.context.new_page()
        except Exception as exc:
            await self.release(session)
            raise SessionError("Failed to launch browser", detail=str(exc)) from exc
        except BaseException:
            # cancellation (request deadline) must not orphan the process
            await self.release(session)
            raise

        logger.debug(
            "browser session acquired",
            extra={
                "viewport": f"{config.viewport_width}x{config.viewport_height}",
                "cookies": len(config.cookies),
            },
        )
        return session

    async def release(self, session: BrowserSession) -> None:
        """Close the browser and stop Playwright. Safe to call more than once."""
        if session.released:
            return
        session.released = True

        try:
            if session.browser is not None:
                await session.browser.close()
        except Exception:
            logger.warning("browser close failed", exc_info=True)
        finally:
            try:
                await session.playwright.stop()
            except Exception:
                logger.warning("playwright stop failed", exc_info=True)
        logger.debug("browser session released")

    @asynccontextmanager
    async def session(self, config: ContextConfig) -> AsyncIterator[BrowserSession]:
        """Acquire a session for the duration of the block; always release it."""
        session = await self.acquire(config)
        try:
            yield session
        finally:
            await self.release(session)
