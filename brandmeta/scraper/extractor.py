"""Content extraction: turns a :class:`RawPage` into :class:`ExtractedContent`."""

from __future__ import annotations

import re
from typing import Dict, Optional, Sequence

from bs4 import BeautifulSoup, ParserRejectedMarkup
from bs4.element import Tag

from brandmeta.errors import ExtractionError
from brandmeta.scraper.models import ExtractedContent, RawPage

# ---------------------------------------------------------------------------
# Removal rules
# ---------------------------------------------------------------------------
_STRIP_TAGS = ["script", "style", "noscript", "iframe", "nav", "header", "footer"]

# Class tokens are split on "-" / "_" and matched part by part, so
# "share-buttons" and "ad_slot" match while "shadow" and "header" do not.
_JUNK_CLASS_PARTS = frozenset(
    {
        "ad", "ads", "advert", "adverts", "advertisement", "advertising",
        "sponsor", "sponsored", "comment", "comments", "disqus",
        "social", "share", "sharing", "sharer", "sharethis",
    }
)

# Tried in order; the first selector whose element yields text wins.
CONTENT_SELECTORS: Sequence[str] = (
    "article",
    '[role="main"]',
    ".post-content",
    ".article-content",
    ".entry-content",
    ".content",
    "main",
)
_CONTENT_QUERY = ", ".join(CONTENT_SELECTORS)

_EXISTING_META = (
    ("description", {"name": "description"}),
    ("og:title", {"property": "og:title"}),
    ("og:description", {"property": "og:description"}),
)

_WHITESPACE = re.compile(r"\s+")


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _normalize(text: str) -> str:
    """Collapse whitespace runs to single spaces and trim."""
    return _WHITESPACE.sub(" ", text).strip()


def _is_junk_class(css_class: Optional[str]) -> bool:
    if not css_class:
        return False
    parts = re.split(r"[-_]", css_class.lower())
    return any(part in _JUNK_CLASS_PARTS for part in parts)


def _text_of(tag: Tag) -> str:
    return _normalize(tag.get_text(separator=" "))


def _parse(html: str) -> BeautifulSoup:
    if not isinstance(html, str):
        raise ExtractionError(f"Cannot parse {type(html).__name__} as HTML")
    try:
        return BeautifulSoup(html, "html.parser")
    except ParserRejectedMarkup as exc:
        raise ExtractionError(f"Malformed HTML: {exc}") from exc


def _read_existing_meta(soup: BeautifulSoup) -> Dict[str, str]:
    found: Dict[str, str] = {}
    for key, attrs in _EXISTING_META:
        tag = soup.find("meta", attrs=attrs)
        if tag is None:
            continue
        content = _normalize(tag.get("content") or "")
        if content:
            found[key] = content
    return found


def _strip_non_content(soup: BeautifulSoup) -> None:
    """Remove boilerplate elements in place.

    Class-based removal never touches a content container, or an element
    wrapping one, so ``<article class="has-comments">`` survives.
    """
    containers = {id(tag) for tag in soup.select(_CONTENT_QUERY)}
    junk = [
        tag
        for tag in soup.find_all(class_=_is_junk_class)
        if id(tag) not in containers and tag.select_one(_CONTENT_QUERY) is None
    ]
    doomed = soup(_STRIP_TAGS) + junk
    for tag in doomed:
        # Nested matches are already gone once an ancestor is decomposed.
        if tag.decomposed or tag.name in ("html", "body"):
            continue
        tag.decompose()


def _resolve_title(soup: BeautifulSoup) -> str:
    for h1 in soup.find_all("h1"):
        text = _text_of(h1)
        if text:
            return text
    if soup.title is not None:
        return _text_of(soup.title)
    return ""


def query_first_non_empty(soup: BeautifulSoup, selectors: Sequence[str]) -> Optional[str]:
    """Return the normalised text of the first selector that yields any.

    Each selector is evaluated with ``select_one``; ``None`` means no selector
    produced non-empty text.
    """
    for selector in selectors:
        element = soup.select_one(selector)
        if element is None:
            continue
        text = _text_of(element)
        if text:
            return text
    return None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_content(raw: RawPage) -> ExtractedContent:
    """Extract the title and readable body text from *raw*.

    Existing meta tags are read first, then boilerplate (scripts, navigation,
    headers, footers, ad/comment/share blocks) is removed.  The body comes from
    the first non-empty structural container in :data:`CONTENT_SELECTORS`,
    falling back to the whole ``<body>``.

    An empty page is a valid result (empty strings), not an error.

    Raises:
        ExtractionError: If the markup cannot be parsed at all.
    """
    soup = _parse(raw.html)
    existing_meta = _read_existing_meta(soup)

    _strip_non_content(soup)

    title = _resolve_title(soup)
    body = query_first_non_empty(soup, CONTENT_SELECTORS)
    if body is None:
        container = soup.body if soup.body is not None else soup
        body = _text_of(container)

    return ExtractedContent(
        title=title,
        body=body,
        source_url=raw.final_url or raw.url,
        existing_meta=existing_meta,
    )
