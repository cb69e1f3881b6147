"""Service layer — request parsing and response shaping for the API routes."""

from __future__ import annotations

import base64
import logging
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from scraper_service.api.schemas import (
    ScrapeRequest,
    ScrapeResponse,
    TiledScreenshotResponse,
    Viewport,
)
from scraper_service.errors import ValidationError
from scraper_service.pipeline import ScrapeEngine

logger = logging.getLogger(__name__)


def _describe(exc: PydanticValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"Invalid {location}: {first.get('msg', 'invalid value')}" if location else "Invalid request body"


def parse_scrape_request(body: Any) -> ScrapeRequest:
    """Validate a raw JSON body. Runs before any browser work is started."""
    if not isinstance(body, dict):
        raise ValidationError('Missing "url"')

    url = body.get("url")
    if not isinstance(url, str) or not url.strip():
        raise ValidationError('Missing "url"')

    options = body.get("options") or {}
    if not isinstance(options, dict):
        raise ValidationError("Invalid options: expected an object")
    # Older clients send fullPage at the top level of the body
    if "fullPage" in body and "fullPage" not in options and "full_page" not in options:
        options = {**options, "fullPage": body["fullPage"]}

    try:
        return ScrapeRequest.model_validate({"url": url.strip(), "options": options})
    except PydanticValidationError as exc:
        raise ValidationError(_describe(exc)) from exc


def _now() -> datetime:
    return datetime.now(timezone.utc)


async def scrape_full(engine: ScrapeEngine, body: Any) -> ScrapeResponse:
    request = parse_scrape_request(body)
    document = await engine.extract(request)
    return ScrapeResponse(scraped_at=_now(), data=document)


async def screenshot(engine: ScrapeEngine, body: Any) -> bytes:
    request = parse_scrape_request(body)
    return await engine.screenshot(request)


async def screenshot_tiles(engine: ScrapeEngine, body: Any) -> TiledScreenshotResponse:
    request = parse_scrape_request(body)
    capture = await engine.screenshot_tiles(request)
    return TiledScreenshotResponse(
        scraped_at=_now(),
        url=capture.url,
        viewport=Viewport(width=capture.viewport_width, height=capture.viewport_height),
        total_height=capture.total_height,
        num_shots=capture.num_shots,
        images=[base64.b64encode(tile).decode("ascii") for tile in capture.tiles],
    )
