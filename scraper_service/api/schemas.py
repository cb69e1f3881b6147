"""Request/response Pydantic models.

Wire names are camelCase; Python attributes are snake_case.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Requests ---


class ScrapeOptions(_CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )

    wait_until: Literal["domcontentloaded", "networkidle"] | None = None
    timeout: int | None = Field(default=None, ge=0)
    user_agent: str | None = None
    extra_headers: dict[str, str] | None = None
    cookie_header: str | None = None
    expand_content: bool = False

    max_links: int | None = Field(default=None, ge=0)
    max_images: int | None = Field(default=None, ge=0)
    include_text: bool = False

    viewport_width: int | None = Field(default=None, ge=1)
    viewport_height: int | None = Field(default=None, ge=1)
    full_page: bool = False
    max_shots: int | None = Field(default=None, ge=1)
    scroll_overlap: int = Field(default=0, ge=0)


class ScrapeRequest(_CamelModel):
    url: str
    options: ScrapeOptions = ScrapeOptions()


# --- Structured extraction ---


class MetaTag(_CamelModel):
    name: str | None = None
    property: str | None = None
    http_equiv: str | None = None
    content: str | None = None


class OpenGraphTag(_CamelModel):
    property: str
    content: str | None = None


class Heading(_CamelModel):
    tag: str
    text: str


class Link(_CamelModel):
    href: str
    text: str = ""


class Image(_CamelModel):
    src: str
    alt: str = ""


class Section(_CamelModel):
    heading: str | None = None
    text: list[str] = []


class ExtractedDocument(_CamelModel):
    url: str
    title: str = ""
    meta: list[MetaTag] = []
    open_graph: list[OpenGraphTag] = []
    json_ld: list[Any] = []
    headings: list[Heading] = []
    links: list[Link] = []
    images: list[Image] = []
    scripts: list[str] = []
    stylesheets: list[str] = []
    text: str | None = None
    blocks: list[str] | None = None
    sections: list[Section] | None = None


# --- Responses ---


class HealthResponse(BaseModel):
    status: str = "ok"
    message: str = "Playwright service running"


class ScrapeResponse(_CamelModel):
    scraped_at: datetime
    data: ExtractedDocument


class Viewport(BaseModel):
    width: int
    height: int


class TiledScreenshotResponse(_CamelModel):
    scraped_at: datetime
    url: str
    viewport: Viewport
    total_height: int
    num_shots: int
    images: list[str]
