"""Structured extraction tests."""

import pytest
from playwright.async_api import Error as PlaywrightError

from conftest import FakePage
from scraper_service.api.schemas import Section
from scraper_service.errors import ExtractionError
from scraper_service.pipeline import scripts
from scraper_service.pipeline.extraction import (
    ExtractionOptions,
    assemble_document,
    build_sections,
    collapse_whitespace,
    extract_blocks,
    extract_document,
    parse_json_ld,
)


def _raw(**overrides) -> dict:
    raw = {
        "url": "https://example.com/final",
        "title": "Example",
        "meta": [],
        "jsonLd": [],
        "headings": [],
        "links": [],
        "images": [],
        "scripts": [],
        "stylesheets": [],
    }
    raw.update(overrides)
    return raw


# --- JSON-LD ---


def test_json_ld_valid_block_is_parsed():
    assert parse_json_ld(['{"a":1}']) == [{"a": 1}]


def test_json_ld_invalid_block_falls_back_to_trimmed_text():
    assert parse_json_ld(["  {a:}\n"]) == ["{a:}"]


def test_json_ld_skips_empty_blocks():
    assert parse_json_ld(["", "   ", "[1, 2]"]) == [[1, 2]]


# --- Caps ---


def test_links_capped_in_document_order():
    links = [{"href": f"https://example.com/{i}", "text": f"link {i}"} for i in range(5)]
    doc = assemble_document(_raw(links=links), ExtractionOptions(max_links=2))
    assert [link.href for link in doc.links] == ["https://example.com/0", "https://example.com/1"]


def test_images_capped_and_srcless_dropped():
    images = [{"src": "", "alt": "blank"}] + [{"src": f"/img/{i}.png", "alt": str(i)} for i in range(4)]
    doc = assemble_document(_raw(images=images), ExtractionOptions(max_images=3))
    assert [img.src for img in doc.images] == ["/img/0.png", "/img/1.png", "/img/2.png"]
    assert doc.images[0].alt == "0"


def test_zero_caps_return_empty():
    raw = _raw(links=[{"href": "https://a", "text": ""}], images=[{"src": "/a.png", "alt": ""}])
    doc = assemble_document(raw, ExtractionOptions(max_links=0, max_images=0))
    assert doc.links == []
    assert doc.images == []


# --- Meta / Open Graph ---


def test_meta_and_open_graph_split():
    meta = [
        {"name": "description", "property": None, "httpEquiv": None, "content": "A page"},
        {"name": None, "property": "og:title", "httpEquiv": None, "content": "OG Title"},
        {"name": None, "property": None, "httpEquiv": None, "content": None},
        {"name": None, "property": None, "httpEquiv": "refresh", "content": "5"},
    ]
    doc = assemble_document(_raw(meta=meta), ExtractionOptions())
    assert [(m.name, m.http_equiv) for m in doc.meta] == [("description", None), (None, "refresh")]
    assert [(og.property, og.content) for og in doc.open_graph] == [("og:title", "OG Title")]


def test_headings_scripts_stylesheets():
    raw = _raw(
        headings=[{"tag": "h1", "text": "Title"}, {"tag": "h2", "text": ""}],
        scripts=["https://cdn/app.js", ""],
        stylesheets=["https://cdn/app.css"],
    )
    doc = assemble_document(raw, ExtractionOptions())
    assert [(h.tag, h.text) for h in doc.headings] == [("h1", "Title"), ("h2", "")]
    assert doc.scripts == ["https://cdn/app.js"]
    assert doc.stylesheets == ["https://cdn/app.css"]


# --- Text ---


def test_text_fields_absent_without_include_text():
    doc = assemble_document(_raw(text="hello"), ExtractionOptions())
    assert doc.text is None
    assert doc.blocks is None
    assert doc.sections is None


def test_text_collapsed_and_capped():
    raw = _raw(text="  hello \n\n  world\t again ", blocks=[], nodes=[])
    doc = assemble_document(raw, ExtractionOptions(include_text=True, max_text_length=11))
    assert doc.text == "hello world"


def test_collapse_whitespace_handles_none():
    assert collapse_whitespace(None) == ""


def test_blocks_drop_empties_and_cap():
    assert extract_blocks(["  a ", "", "   ", "b", "c"], max_blocks=2) == ["a", "b"]


# --- Sections ---


def test_sections_split_on_headings():
    nodes = [
        {"tag": "h1", "text": "A"},
        {"tag": "p", "text": "x"},
        {"tag": "h2", "text": "B"},
        {"tag": "p", "text": "y"},
    ]
    assert build_sections(nodes) == [
        Section(heading="A", text=["x"]),
        Section(heading="B", text=["y"]),
    ]


def test_sections_leading_content_has_null_heading():
    nodes = [{"tag": "p", "text": "intro"}, {"tag": "h3", "text": "Later"}]
    assert build_sections(nodes) == [
        Section(heading=None, text=["intro"]),
        Section(heading="Later", text=[]),
    ]


def test_sections_h5_is_body_text():
    nodes = [{"tag": "h4", "text": "Top"}, {"tag": "h5", "text": "minor"}, {"tag": "li", "text": " item "}]
    assert build_sections(nodes) == [Section(heading="Top", text=["minor", "item"])]


def test_sections_empty_stream():
    assert build_sections([]) == []
    assert build_sections([{"tag": "p", "text": "   "}]) == []


# --- Page evaluation ---


@pytest.mark.asyncio
async def test_extract_document_passes_options_to_page():
    page = FakePage(document=_raw(text="body", blocks=["p1"], nodes=[{"tag": "h1", "text": "T"}]))
    doc = await extract_document(page, ExtractionOptions(max_links=7, max_images=3, include_text=True))

    assert page.extract_args["maxLinks"] == 7
    assert page.extract_args["maxImages"] == 3
    assert page.extract_args["includeText"] is True
    assert "div" in page.extract_args["blockTags"]
    assert doc.url == "https://example.com/final"
    assert doc.blocks == ["p1"]
    assert doc.sections == [Section(heading="T", text=[])]


@pytest.mark.asyncio
async def test_extract_document_wraps_evaluation_failure():
    page = FakePage()

    async def broken(script, arg=None):
        raise PlaywrightError("Execution context was destroyed")

    page.evaluate = broken

    with pytest.raises(ExtractionError) as exc_info:
        await extract_document(page, ExtractionOptions())
    assert "context was destroyed" in exc_info.value.detail


@pytest.mark.asyncio
async def test_extract_document_rejects_empty_result():
    page = FakePage(document=None)
    with pytest.raises(ExtractionError):
        await extract_document(page, ExtractionOptions())


def test_document_serializes_camel_case():
    doc = assemble_document(
        _raw(meta=[{"property": "og:type", "content": "website"}], jsonLd=['{"@type": "Thing"}']),
        ExtractionOptions(),
    )
    dumped = doc.model_dump(by_alias=True)
    assert dumped["openGraph"] == [{"property": "og:type", "content": "website"}]
    assert dumped["jsonLd"] == [{"@type": "Thing"}]


def test_heading_text_falls_back_to_image_alt():
    assert "querySelectorAll('img[alt]')" in scripts.EXTRACT_DOCUMENT


def test_srcless_images_filtered_before_cap_in_page():
    query = scripts.EXTRACT_DOCUMENT
    images_at = query.index("all('img')")
    assert query.index(".filter((img) => img.src)", images_at) < query.index(
        ".slice(0, opts.maxImages)", images_at
    )


def test_images_cap_counts_only_images_with_src():
    images = [{"src": "", "alt": "lazy"}] * 3 + [{"src": f"/img/{i}.png", "alt": ""} for i in range(3)]
    doc = assemble_document(_raw(images=images), ExtractionOptions(max_images=2))
    assert [img.src for img in doc.images] == ["/img/0.png", "/img/1.png"]
