"""GET /, POST /scrape-full, POST /screenshot, POST /screenshot-tiles handlers."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import Response

from scraper_service.api import service
from scraper_service.api.schemas import HealthResponse, ScrapeResponse, TiledScreenshotResponse
from scraper_service.pipeline import ScrapeEngine

router = APIRouter()


def _get_engine(request: Request) -> ScrapeEngine:
    return request.app.state.engine


@router.get("/", response_model=HealthResponse)
async def root():
    return HealthResponse()


@router.post("/scrape-full", response_model=ScrapeResponse)
async def scrape_full(
    body: Any = Body(default=None),
    engine: ScrapeEngine = Depends(_get_engine),
):
    return await service.scrape_full(engine, body)


@router.post(
    "/screenshot",
    response_class=Response,
    responses={200: {"content": {"image/png": {}}}},
)
async def screenshot(
    body: Any = Body(default=None),
    engine: ScrapeEngine = Depends(_get_engine),
):
    image = await service.screenshot(engine, body)
    return Response(content=image, media_type="image/png")


@router.post("/screenshot-tiles", response_model=TiledScreenshotResponse)
async def screenshot_tiles(
    body: Any = Body(default=None),
    engine: ScrapeEngine = Depends(_get_engine),
):
    return await service.screenshot_tiles(engine, body)
