"""Page context capability and default page-view properties."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol
from urllib.parse import urlsplit

DIRECT_REFERRER = "$direct"


class PageContext(Protocol):  # pylint: disable=too-few-public-methods
    """Protocol for page-context providers supplied by the host environment."""

    @property
    def referrer(self) -> str | None: ...

    @property
    def location_url(self) -> str: ...

    @property
    def location_path(self) -> str: ...

    @property
    def search(self) -> str: ...

    @property
    def title(self) -> str | None: ...

    @property
    def canonical_url(self) -> str | None: ...

    @property
    def initial_referrer(self) -> str | None: ...

    @property
    def initial_referring_domain(self) -> str | None: ...


@dataclass(frozen=True)
class StaticPageContext:  # pylint: disable=too-many-instance-attributes
    """Page context captured as plain values."""

    location_url: str
    location_path: str = "/"
    search: str = ""
    title: str | None = None
    referrer: str | None = None
    canonical_url: str | None = None
    initial_referrer: str | None = None
    initial_referring_domain: str | None = None


def get_referrer(page_context: PageContext) -> str:
    return page_context.referrer or DIRECT_REFERRER


def get_referring_domain(referrer: str) -> str:
    parts = referrer.split("/")
    if len(parts) >= 3:
        return parts[2]
    return ""


def get_url(page_context: PageContext) -> str:
    """Return the canonical URL (with the page search string) or the location, without fragment."""
    url = page_context.location_url
    canonical_url = page_context.canonical_url
    if canonical_url:
        url = canonical_url if "?" in canonical_url else canonical_url + page_context.search
    return url.split("#", 1)[0]


def default_page_properties(page_context: PageContext) -> dict[str, Any]:
    """Build the default page-view properties from the injected page context."""
    canonical_url = page_context.canonical_url
    path = urlsplit(canonical_url).path if canonical_url else page_context.location_path
    referrer = get_referrer(page_context)
    return {
        "path": path,
        "referrer": referrer,
        "referring_domain": get_referring_domain(referrer),
        "search": page_context.search,
        "title": page_context.title,
        "url": get_url(page_context),
        "tab_url": page_context.location_url,
        "initial_referrer": page_context.initial_referrer,
        "initial_referring_domain": page_context.initial_referring_domain,
    }
