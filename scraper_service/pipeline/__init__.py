"""Browser-driven scrape pipeline: session, navigation, extraction, capture."""

from __future__ import annotations

from .capture import TiledCapture, TilePlan, capture_single, capture_tiles, plan_tiles
from .engine import ScrapeEngine
from .extraction import ExtractionOptions, assemble_document, build_sections, extract_document
from .navigation import ExpandReport, NavigationController, NavigationOptions, ReadyPage, SweepResult
from .session import BrowserSession, BrowserSessionManager, ContextConfig, Cookie, parse_cookie_header

__all__ = [
    "BrowserSession",
    "BrowserSessionManager",
    "ContextConfig",
    "Cookie",
    "ExpandReport",
    "ExtractionOptions",
    "NavigationController",
    "NavigationOptions",
    "ReadyPage",
    "ScrapeEngine",
    "SweepResult",
    "TilePlan",
    "TiledCapture",
    "assemble_document",
    "build_sections",
    "capture_single",
    "capture_tiles",
    "extract_document",
    "parse_cookie_header",
    "plan_tiles",
]
