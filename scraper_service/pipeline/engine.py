"""Scrape engine: runs the acquire, load, extract, release lifecycle."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from playwright.async_api import Page

from scraper_service.api.schemas import ExtractedDocument, ScrapeOptions, ScrapeRequest
from scraper_service.config import Settings
from scraper_service.errors import InternalError, ScrapeError, ValidationError
from scraper_service.pipeline.capture import TiledCapture, capture_single, capture_tiles
from scraper_service.pipeline.extraction import ExtractionOptions, extract_document
from scraper_service.pipeline.navigation import NavigationController, NavigationOptions
from scraper_service.pipeline.session import (
    BrowserSessionManager,
    ContextConfig,
    parse_cookie_header,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def build_context_config(url: str, options: ScrapeOptions, settings: Settings) -> ContextConfig:
    return ContextConfig(
        viewport_width=options.viewport_width or settings.default_viewport_width,
        viewport_height=options.viewport_height or settings.default_viewport_height,
        user_agent=options.user_agent or settings.user_agent,
        cookies=tuple(parse_cookie_header(options.cookie_header, url)),
        extra_headers=dict(options.extra_headers or {}),
    )


def build_navigation_options(options: ScrapeOptions, settings: Settings) -> NavigationOptions:
    return NavigationOptions(
        wait_until=options.wait_until or settings.default_wait_until,
        timeout_ms=options.timeout if options.timeout is not None else settings.navigation_timeout_ms,
        settle_delay_ms=settings.settle_delay_ms,
        post_scroll_delay_ms=settings.post_scroll_delay_ms,
        scroll_step_px=settings.scroll_step_px,
        scroll_interval_ms=settings.scroll_interval_ms,
        max_scroll_iterations=settings.max_scroll_iterations,
        max_scroll_duration_ms=settings.max_scroll_duration_ms,
        expand_content=options.expand_content,
        expand_click_timeout_ms=settings.expand_click_timeout_ms,
        expand_click_pause_ms=settings.expand_click_pause_ms,
    )


def build_extraction_options(options: ScrapeOptions, settings: Settings) -> ExtractionOptions:
    return ExtractionOptions(
        max_links=options.max_links if options.max_links is not None else settings.default_max_links,
        max_images=options.max_images if options.max_images is not None else settings.default_max_images,
        include_text=options.include_text,
        max_text_length=settings.max_text_length,
        max_blocks=settings.max_blocks,
    )


class ScrapeEngine:
    """Entry point for the three scrape modes.

    Every mode shares the same preamble (fresh browser, navigation, settle,
    lazy-load sweep) and differs only in what it does with the ready page.
    The browser is released on every exit path.
    """

    def __init__(
        self,
        settings: Settings,
        sessions: BrowserSessionManager | None = None,
        navigator: NavigationController | None = None,
    ) -> None:
        self.settings = settings
        self.sessions = sessions or BrowserSessionManager(
            headless=settings.headless,
            browser_args=settings.browser_args,
        )
        self.navigator = navigator or NavigationController()

    async def extract(self, request: ScrapeRequest) -> ExtractedDocument:
        """Load the page and return its structured data."""
        extraction = build_extraction_options(request.options, self.settings)
        return await self._run(request, "extract", lambda page: extract_document(page, extraction))

    async def screenshot(self, request: ScrapeRequest) -> bytes:
        """Load the page and return one PNG of the viewport or the full page."""
        full_page = request.options.full_page
        return await self._run(request, "screenshot", lambda page: capture_single(page, full_page))

    async def screenshot_tiles(self, request: ScrapeRequest) -> TiledCapture:
        """Load the page and return viewport-sized tiles covering it top to bottom."""
        options = request.options

        async def capture(page: Page) -> TiledCapture:
            return await capture_tiles(
                page,
                viewport_width=options.viewport_width or self.settings.default_viewport_width,
                viewport_height=options.viewport_height or self.settings.default_viewport_height,
                scroll_overlap=options.scroll_overlap,
                max_shots=options.max_shots or self.settings.default_max_shots,
                tile_delay_ms=self.settings.tile_delay_ms,
            )

        return await self._run(request, "tiles", capture)

    async def _run(
        self,
        request: ScrapeRequest,
        mode: str,
        produce: Callable[[Page], Awaitable[T]],
    ) -> T:
        url = request.url.strip() if request.url else ""
        if not url:
            raise ValidationError('Missing "url"')

        logger.info("scrape started", extra={"url": url, "mode": mode})
        pipeline = self._pipeline(url, request.options, produce)
        try:
            if self.settings.request_timeout_seconds:
                result = await asyncio.wait_for(pipeline, timeout=self.settings.request_timeout_seconds)
            else:
                result = await pipeline
        except ScrapeError as exc:
            logger.warning(
                "scrape failed",
                extra={"url": url, "mode": mode, "kind": exc.kind, "error": exc.message, "detail": exc.detail},
            )
            raise
        except asyncio.TimeoutError as exc:
            logger.warning("scrape deadline exceeded", extra={"url": url, "mode": mode})
            raise InternalError(
                f"Request exceeded {self.settings.request_timeout_seconds}s deadline"
            ) from exc
        except Exception as exc:
            logger.exception("scrape crashed", extra={"url": url, "mode": mode})
            raise InternalError("Unexpected scrape failure", detail=str(exc)) from exc

        logger.info("scrape completed", extra={"url": url, "mode": mode})
        return result

    async def _pipeline(
        self,
        url: str,
        options: ScrapeOptions,
        produce: Callable[[Page], Awaitable[T]],
    ) -> T:
        context_config = build_context_config(url, options, self.settings)
        navigation = build_navigation_options(options, self.settings)

        async with self.sessions.session(context_config) as session:
            ready = await self.navigator.load(session.page, url, navigation)
            return await produce(ready.page)
