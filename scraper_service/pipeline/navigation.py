"""Navigation controller: load a page, let it settle, trigger lazy content."""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass, field

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from scraper_service.errors import NavigationError, NavigationTimeoutError
from scraper_service.pipeline import scripts

logger = logging.getLogger(__name__)

EXPAND_PATTERNS: tuple[str, ...] = (
    r"read\s+more",
    r"show\s+more",
    r"view\s+more",
    r"see\s+more",
    r"load\s+more",
)

CLICKABLE_SELECTOR = "a, button, [role='button'], summary"


@dataclass(frozen=True)
class NavigationOptions:
    """Per-request navigation behaviour. Delays and timeouts are in ms."""

    wait_until: str = "domcontentloaded"
    timeout_ms: int = 60_000
    settle_delay_ms: int = 3000
    post_scroll_delay_ms: int = 2000
    scroll_step_px: int = 800
    scroll_interval_ms: int = 400
    max_scroll_iterations: int = 200
    max_scroll_duration_ms: int = 60_000
    expand_content: bool = False
    expand_click_timeout_ms: int = 2000
    expand_click_pause_ms: int = 500


@dataclass
class SweepResult:
    iterations: int = 0
    final_offset: int = 0
    final_height: int = 0
    capped: bool = False


@dataclass
class ExpandReport:
    matched: int = 0
    clicked: int = 0
    failed: int = 0


@dataclass
class ReadyPage:
    """A page that has been loaded, settled and swept."""

    page: Page
    url: str
    sweep: SweepResult
    expand: ExpandReport | None = None
    timings: dict[str, float] = field(default_factory=dict)


class NavigationController:
    """Drives one page from a blank tab to an extraction-ready state."""

    async def load(self, page: Page, url: str, options: NavigationOptions) -> ReadyPage:
        started = time.monotonic()
        await self.goto(page, url, options)
        loaded = time.monotonic()

        await page.wait_for_timeout(options.settle_delay_ms)
        sweep = await self.lazy_load_sweep(page, options)
        await page.wait_for_timeout(options.post_scroll_delay_ms)

        expand = None
        if options.expand_content:
            expand = await self.expand_sweep(page, options)

        ready = ReadyPage(
            page=page,
            url=page.url,
            sweep=sweep,
            expand=expand,
            timings={
                "navigation_s": round(loaded - started, 3),
                "total_s": round(time.monotonic() - started, 3),
            },
        )
        logger.info(
            "page ready",
            extra={
                "url": url,
                "final_url": ready.url,
                "scroll_iterations": sweep.iterations,
                "page_height": sweep.final_height,
                **ready.timings,
            },
        )
        return ready

    async def goto(self, page: Page, url: str, options: NavigationOptions) -> None:
        """Navigate and wait for the readiness signal, mapping failures to NavigationError."""
        logger.debug(
            "navigating",
            extra={"url": url, "wait_until": options.wait_until, "timeout_ms": options.timeout_ms},
        )
        try:
            await page.goto(url, wait_until=options.wait_until, timeout=options.timeout_ms)
        except PlaywrightTimeoutError as exc:
            raise NavigationTimeoutError(
                f"Timed out after {options.timeout_ms}ms waiting for {options.wait_until}",
                detail=str(exc),
            ) from exc
        except PlaywrightError as exc:
            raise NavigationError(f"Failed to load {url}", detail=str(exc)) from exc

    async def lazy_load_sweep(self, page: Page, options: NavigationOptions) -> SweepResult:
        """Scroll down in fixed steps until the offset passes the (growing) page height.

        Stops early, with a warning, once the iteration or duration ceiling is hit.
        """
        try:
            return await self._sweep(page, options)
        except PlaywrightError as exc:
            raise NavigationError("Lazy-load sweep failed", detail=str(exc)) from exc

    async def _sweep(self, page: Page, options: NavigationOptions) -> SweepResult:
        result = SweepResult()
        deadline = time.monotonic() + options.max_scroll_duration_ms / 1000
        step = max(1, options.scroll_step_px)

        while True:
            result.final_height = int(await page.evaluate(scripts.SCROLL_HEIGHT) or 0)
            if result.final_offset >= result.final_height:
                break
            if result.iterations >= options.max_scroll_iterations or time.monotonic() >= deadline:
                result.capped = True
                logger.warning(
                    "lazy-load sweep capped",
                    extra={
                        "iterations": result.iterations,
                        "offset": result.final_offset,
                        "height": result.final_height,
                    },
                )
                break

            result.final_offset += step
            await page.evaluate(scripts.SCROLL_TO, result.final_offset)
            await page.wait_for_timeout(options.scroll_interval_ms)
            result.iterations += 1

        await page.evaluate(scripts.SCROLL_TO, 0)
        return result

    async def expand_sweep(self, page: Page, options: NavigationOptions) -> ExpandReport:
        """Click every "read more"-style affordance. Individual failures are counted, not raised."""
        report = ExpandReport()

        for pattern in EXPAND_PATTERNS:
            locator = page.locator(CLICKABLE_SELECTOR).filter(
                has_text=re.compile(pattern, re.IGNORECASE)
            )
            try:
                count = await locator.count()
            except PlaywrightError:
                logger.debug("expand lookup failed", extra={"pattern": pattern}, exc_info=True)
                continue

            report.matched += count
            for index in range(count):
                element = locator.nth(index)
                try:
                    await element.scroll_into_view_if_needed(timeout=options.expand_click_timeout_ms)
                    await element.click(timeout=options.expand_click_timeout_ms)
                    report.clicked += 1
                except PlaywrightError:
                    report.failed += 1
                    logger.debug(
                        "expand click failed",
                        extra={"pattern": pattern, "index": index},
                        exc_info=True,
                    )
                    continue
                await page.wait_for_timeout(options.expand_click_pause_ms)

        logger.info(
            "expand sweep done",
            extra={"matched": report.matched, "clicked": report.clicked, "failed": report.failed},
        )
        return report
