"""Screenshot capture: a single shot or a stack of viewport tiles."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from scraper_service.errors import ExtractionError
from scraper_service.pipeline import scripts

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TilePlan:
    step: int
    count: int

    @property
    def offsets(self) -> list[int]:
        return [index * self.step for index in range(self.count)]


@dataclass
class TiledCapture:
    url: str
    viewport_width: int
    viewport_height: int
    total_height: int
    tiles: list[bytes] = field(default_factory=list)

    @property
    def num_shots(self) -> int:
        return len(self.tiles)


def plan_tiles(total_height: int, viewport_height: int, scroll_overlap: int, max_shots: int) -> TilePlan:
    """Work out the scroll step and how many tiles cover *total_height*.

    A page that reports no height still gets one tile so the caller always
    receives an image.
    """
    step = max(1, viewport_height - scroll_overlap)
    count = min(math.ceil(max(0, total_height) / step), max_shots)
    return TilePlan(step=step, count=max(count, min(1, max_shots)))


async def capture_single(page: Page, full_page: bool = False) -> bytes:
    try:
        image = await page.screenshot(type="png", full_page=full_page)
    except PlaywrightError as exc:
        raise ExtractionError("Screenshot failed", detail=str(exc)) from exc
    logger.info("screenshot captured", extra={"full_page": full_page, "bytes": len(image)})
    return image


async def capture_tiles(
    page: Page,
    viewport_width: int,
    viewport_height: int,
    scroll_overlap: int = 0,
    max_shots: int = 30,
    tile_delay_ms: int = 600,
) -> TiledCapture:
    """Scroll through the page and take one viewport screenshot per tile, top to bottom."""
    try:
        total_height = int(await page.evaluate(scripts.SCROLL_HEIGHT) or 0)
    except PlaywrightError as exc:
        raise ExtractionError("Failed to measure page height", detail=str(exc)) from exc

    plan = plan_tiles(total_height, viewport_height, scroll_overlap, max_shots)
    capture = TiledCapture(
        url=page.url,
        viewport_width=viewport_width,
        viewport_height=viewport_height,
        total_height=total_height,
    )

    for index, offset in enumerate(plan.offsets):
        try:
            await page.evaluate(scripts.SCROLL_TO, offset)
            await page.wait_for_timeout(tile_delay_ms)
            capture.tiles.append(await page.screenshot(type="png", full_page=False))
        except PlaywrightError as exc:
            raise ExtractionError(f"Tile {index} capture failed", detail=str(exc)) from exc

    logger.info(
        "tiles captured",
        extra={
            "url": capture.url,
            "total_height": total_height,
            "step": plan.step,
            "num_shots": capture.num_shots,
        },
    )
    return capture
