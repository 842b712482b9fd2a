"""Scraper package — page fetch & content extraction."""

from brandmeta.scraper.extractor import extract_content, query_first_non_empty
from brandmeta.scraper.fetcher import build_client, fetch_page
from brandmeta.scraper.models import ExtractedContent, RawPage

__all__ = [
    "build_client",
    "fetch_page",
    "extract_content",
    "query_first_non_empty",
    "RawPage",
    "ExtractedContent",
]
