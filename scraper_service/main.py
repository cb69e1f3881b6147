"""FastAPI app entrypoint."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from scraper_service.api.routes import router
from scraper_service.config import get_settings
from scraper_service.errors import ScrapeError
from scraper_service.logging_config import setup_logging
from scraper_service.pipeline import ScrapeEngine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()

    # Initialize logging FIRST so all subsequent operations produce JSON logs
    setup_logging(settings.log_level, json_output=settings.log_json)
    logger.info("starting scraper service")

    app.state.settings = settings
    app.state.engine = ScrapeEngine(settings)

    logger.info(
        "scraper service ready",
        extra={
            "port": settings.port,
            "default_wait_until": settings.default_wait_until,
            "navigation_timeout_ms": settings.navigation_timeout_ms,
            "request_timeout_seconds": settings.request_timeout_seconds,
        },
    )

    yield

    logger.info("shutting down scraper service")


app = FastAPI(title="Scraper Service", lifespan=lifespan)
app.include_router(router)


@app.exception_handler(ScrapeError)
async def scrape_error_handler(request: Request, exc: ScrapeError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": "Invalid JSON body"})


@app.get("/health")
async def health():
    return {"status": "ok"}


def run() -> None:
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
