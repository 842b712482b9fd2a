"""Data models for the scraper pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict


@dataclass
class RawPage:
    """The raw HTTP response for a single URL fetch."""

    url: str
    final_url: str
    html: str
    status_code: int


@dataclass
class ExtractedContent:
    """Readable content extracted from a :class:`RawPage`.

    ``existing_meta`` holds any ``description`` / ``og:title`` /
    ``og:description`` values the page already declares.
    """

    title: str
    body: str
    source_url: str
    existing_meta: Dict[str, str] = field(default_factory=dict)
