"""Structured-data extraction from a loaded page."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from scraper_service.api.schemas import (
    ExtractedDocument,
    Heading,
    Image,
    Link,
    MetaTag,
    OpenGraphTag,
    Section,
)
from scraper_service.errors import ExtractionError
from scraper_service.pipeline import scripts

logger = logging.getLogger(__name__)

BLOCK_TAGS: tuple[str, ...] = ("p", "li", "td", "th", "dt", "dd", "span", "div")

# H1-H4 open a new section; everything else in this list is section body text.
SECTION_HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4"})
SECTION_TAGS: tuple[str, ...] = (
    "h1", "h2", "h3", "h4", "h5", "h6",
    "p", "li", "blockquote", "pre", "dt", "dd", "td", "th", "figcaption",
)

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class ExtractionOptions:
    max_links: int = 1000
    max_images: int = 500
    include_text: bool = False
    max_text_length: int = 500_000
    max_blocks: int = 1000


def collapse_whitespace(text: str | None) -> str:
    return _WHITESPACE.sub(" ", text or "").strip()


def parse_json_ld(raw_blocks: list[str]) -> list[Any]:
    """Parse each JSON-LD body; fall back to the trimmed raw text when it is not valid JSON."""
    parsed: list[Any] = []
    for raw in raw_blocks:
        body = (raw or "").strip()
        if not body:
            continue
        try:
            parsed.append(json.loads(body))
        except ValueError:
            parsed.append(body)
    return parsed


def extract_blocks(raw_blocks: list[str], max_blocks: int) -> list[str]:
    blocks: list[str] = []
    for raw in raw_blocks:
        text = (raw or "").strip()
        if not text:
            continue
        blocks.append(text)
        if len(blocks) >= max_blocks:
            break
    return blocks


def build_sections(nodes: list[dict[str, str]]) -> list[Section]:
    """Group an in-order stream of ``{tag, text}`` nodes into heading-delimited sections.

    A section is emitted only when it has a heading or some text. Content that
    precedes the first heading lands in a section whose heading is ``None``.
    """
    sections: list[Section] = []
    heading: str | None = None
    fragments: list[str] = []

    def flush() -> None:
        if heading is not None or fragments:
            sections.append(Section(heading=heading, text=list(fragments)))

    for node in nodes:
        tag = (node.get("tag") or "").lower()
        text = (node.get("text") or "").strip()
        if tag in SECTION_HEADING_TAGS:
            flush()
            heading = text
            fragments = []
        elif text:
            fragments.append(text)

    flush()
    return sections


def _split_meta(raw_meta: list[dict[str, Any]]) -> tuple[list[MetaTag], list[OpenGraphTag]]:
    meta: list[MetaTag] = []
    open_graph: list[OpenGraphTag] = []
    for item in raw_meta:
        prop = item.get("property")
        if prop and prop.lower().startswith("og:"):
            open_graph.append(OpenGraphTag(property=prop, content=item.get("content")))
            continue
        if item.get("name") or prop or item.get("httpEquiv"):
            meta.append(
                MetaTag(
                    name=item.get("name"),
                    property=prop,
                    http_equiv=item.get("httpEquiv"),
                    content=item.get("content"),
                )
            )
    return meta, open_graph


def assemble_document(raw: dict[str, Any], options: ExtractionOptions) -> ExtractedDocument:
    """Turn the raw in-page query result into an ExtractedDocument."""
    meta, open_graph = _split_meta(raw.get("meta") or [])

    links = [
        Link(href=item["href"], text=item.get("text") or "")
        for item in raw.get("links") or []
        if item.get("href")
    ][: options.max_links]
    images = [
        Image(src=item["src"], alt=item.get("alt") or "")
        for item in raw.get("images") or []
        if item.get("src")
    ][: options.max_images]
    headings = [
        Heading(tag=item["tag"], text=item.get("text") or "")
        for item in raw.get("headings") or []
        if item.get("tag")
    ]

    document = ExtractedDocument(
        url=raw.get("url") or "",
        title=raw.get("title") or "",
        meta=meta,
        open_graph=open_graph,
        json_ld=parse_json_ld(raw.get("jsonLd") or []),
        headings=headings,
        links=links,
        images=images,
        scripts=[s for s in raw.get("scripts") or [] if s],
        stylesheets=[s for s in raw.get("stylesheets") or [] if s],
    )

    if options.include_text:
        document.text = collapse_whitespace(raw.get("text"))[: options.max_text_length]
        document.blocks = extract_blocks(raw.get("blocks") or [], options.max_blocks)
        document.sections = build_sections(raw.get("nodes") or [])

    return document


async def extract_document(page: Page, options: ExtractionOptions) -> ExtractedDocument:
    """Run the read-only DOM pass on *page* and assemble the result."""
    try:
        raw = await page.evaluate(
            scripts.EXTRACT_DOCUMENT,
            {
                "maxLinks": options.max_links,
                "maxImages": options.max_images,
                "includeText": options.include_text,
                "blockTags": list(BLOCK_TAGS),
                "sectionTags": list(SECTION_TAGS),
            },
        )
    except PlaywrightError as exc:
        raise ExtractionError("Failed to query page document", detail=str(exc)) from exc

    if not isinstance(raw, dict):
        raise ExtractionError("Page document query returned no data")

    document = assemble_document(raw, options)
    logger.info(
        "document extracted",
        extra={
            "url": document.url,
            "links": len(document.links),
            "images": len(document.images),
            "json_ld": len(document.json_ld),
            "sections": len(document.sections or []),
        },
    )
    return document
