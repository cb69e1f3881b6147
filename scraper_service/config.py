"""Pydantic Settings — loads configuration from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings

WaitUntil = Literal["domcontentloaded", "networkidle"]


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "extra": "ignore"}

    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    log_json: bool = True

    headless: bool = True
    browser_args: list[str] = [
        "--disable-dev-shm-usage",
        "--no-sandbox",
        "--disable-setuid-sandbox",
    ]
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36"
    )

    # Navigation
    default_wait_until: WaitUntil = "domcontentloaded"
    navigation_timeout_ms: int = 60_000
    settle_delay_ms: int = 3000
    post_scroll_delay_ms: int = 2000
    scroll_step_px: int = 800
    scroll_interval_ms: int = 400
    max_scroll_iterations: int = 200
    max_scroll_duration_ms: int = 60_000
    expand_click_timeout_ms: int = 2000
    expand_click_pause_ms: int = 500

    # Capture
    tile_delay_ms: int = 600
    default_viewport_width: int = 1366
    default_viewport_height: int = 768
    default_max_shots: int = 30

    # Extraction
    default_max_links: int = 1000
    default_max_images: int = 500
    max_text_length: int = 500_000
    max_blocks: int = 1000

    # Overall per-request deadline; None disables it
    request_timeout_seconds: float | None = None


@lru_cache
def get_settings() -> Settings:
    return Settings()
