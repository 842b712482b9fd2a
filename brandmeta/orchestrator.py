"""Bulk metadata generation: fetch → extract → synthesize, one pipeline per URL.

``generate_metadata`` validates the request, resolves the brand, then runs an
independent pipeline for every URL under a shared concurrency gate.  Each
pipeline writes its outcome into the result slot matching its request index,
so the response order always equals the request order.

Per-URL states::

    PENDING → FETCHING → EXTRACTING → SYNTHESIZING → DONE(success)
                                                    ↘ DONE(error)

Failures inside a pipeline become that URL's error result and never touch
sibling pipelines.  ``FetchError(transport)`` and ``SynthesisError(upstream)``
get exactly one re-attempt of the failing stage; every other error is final.
"""

from __future__ import annotations

import asyncio
import enum
from typing import Any, Awaitable, Callable, List, Optional, TypeVar
from urllib.parse import urlsplit

import httpx
import structlog

from brandmeta.config import settings
from brandmeta.errors import MetadataError, ValidationError
from brandmeta.models import (
    BrandContext,
    MetadataBatchRequest,
    MetadataBatchResponse,
    MetadataResult,
)
from brandmeta.scraper.extractor import extract_content
from brandmeta.scraper.fetcher import build_client, fetch_page
from brandmeta.synthesizer import get_llm, synthesize_metadata

log = structlog.get_logger(__name__)

T = TypeVar("T")


class UrlState(str, enum.Enum):
    PENDING = "pending"
    FETCHING = "fetching"
    EXTRACTING = "extracting"
    SYNTHESIZING = "synthesizing"
    SUCCEEDED = "done:success"
    FAILED = "done:error"

    @property
    def terminal(self) -> bool:
        return self in (UrlState.SUCCEEDED, UrlState.FAILED)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def is_valid_url(url: str) -> bool:
    """Return ``True`` for an absolute ``http``/``https`` URL with a host."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return parts.scheme in ("http", "https") and bool(parts.netloc)


def validate_request(request: MetadataBatchRequest) -> None:
    """Reject a request before any network activity.

    Raises:
        ValidationError: ``missing-brand``, ``empty-url``, ``invalid-url`` or
            ``too-many-urls``.
    """
    if not request.brand_id or not request.brand_id.strip():
        raise ValidationError("missing-brand", "A brand id is required")
    if not request.urls:
        raise ValidationError("empty-url", "At least one URL is required")
    if not request.is_bulk and len(request.urls) > 1:
        raise ValidationError(
            "too-many-urls",
            f"Single mode accepts exactly one URL, got {len(request.urls)}; use bulk mode",
        )
    for position, url in enumerate(request.urls):
        if not url or not url.strip():
            raise ValidationError("empty-url", f"URL at position {position} is empty")
        if not is_valid_url(url):
            raise ValidationError("invalid-url", f"Not a valid absolute URL: {url!r}")


# ---------------------------------------------------------------------------
# Per-URL pipeline
# ---------------------------------------------------------------------------

class UrlPipeline:
    """Runs one URL through fetch, extraction and synthesis."""

    def __init__(
        self,
        index: int,
        url: str,
        brand: BrandContext,
        client: httpx.AsyncClient,
        llm: Any,
    ) -> None:
        self.index = index
        self.url = url
        self.brand = brand
        self.client = client
        self.llm = llm
        self.state = UrlState.PENDING
        self._log = log.bind(index=index, url=url)

    def _advance(self, state: UrlState) -> None:
        self.state = state
        self._log.debug("url_state", state=state.value)

    async def _attempt(self, stage: str, call: Callable[[], Awaitable[T]]) -> T:
        """Await *call*, re-attempting once if it fails with a transient error."""
        try:
            return await call()
        except MetadataError as exc:
            if not exc.transient:
                raise
            self._log.warning("stage_retry", stage=stage, kind=exc.kind, error=str(exc))
        if settings.retry_backoff > 0:
            await asyncio.sleep(settings.retry_backoff)
        return await call()

    async def run(self) -> MetadataResult:
        if self.state is not UrlState.PENDING:
            raise RuntimeError(f"URL {self.url!r} is already {self.state.value}")
        try:
            self._advance(UrlState.FETCHING)
            raw = await self._attempt("fetch", lambda: fetch_page(self.client, self.url))

            self._advance(UrlState.EXTRACTING)
            content = await asyncio.to_thread(extract_content, raw)

            self._advance(UrlState.SYNTHESIZING)
            metadata = await self._attempt(
                "synthesize", lambda: synthesize_metadata(content, self.brand, self.llm)
            )
        except MetadataError as exc:
            self._advance(UrlState.FAILED)
            self._log.info("url_failed", kind=exc.kind, error=str(exc))
            return MetadataResult.failure(self.url, str(exc))
        except Exception as exc:  # noqa: BLE001
            self._advance(UrlState.FAILED)
            self._log.exception("url_crashed")
            return MetadataResult.failure(self.url, f"Unexpected error: {exc}")

        self._advance(UrlState.SUCCEEDED)
        return MetadataResult.success(self.url, metadata)


# ---------------------------------------------------------------------------
# Batch
# ---------------------------------------------------------------------------

async def _run_batch(
    urls: List[str],
    brand: BrandContext,
    client: httpx.AsyncClient,
    llm: Any,
) -> List[MetadataResult]:
    gate = asyncio.Semaphore(max(1, settings.max_concurrent_urls))
    results: List[Optional[MetadataResult]] = [None] * len(urls)

    async def _fill(index: int, url: str) -> None:
        async with gate:
            results[index] = await UrlPipeline(index, url, brand, client, llm).run()

    await asyncio.gather(*(_fill(i, url) for i, url in enumerate(urls)))
    return [r for r in results if r is not None]


async def generate_metadata(
    request: MetadataBatchRequest,
    brands: Any,
    *,
    client: Optional[httpx.AsyncClient] = None,
    llm: Any = None,
    timeout: Optional[float] = None,
) -> MetadataBatchResponse:
    """Generate metadata for every URL in *request*.

    Args:
        request: Brand id, ordered URLs and the bulk flag.
        brands: Brand lookup exposing ``get(brand_id) -> BrandContext``.
        client: Shared HTTP client; one is built from ``settings`` (and closed
            afterwards) when omitted.
        llm: Shared chat model; built from ``settings`` when omitted.
        timeout: Whole-batch deadline in seconds; defaults to
            ``settings.batch_timeout``.

    Returns:
        A response with exactly one result per requested URL, in request order.

    Raises:
        ValidationError: The request is malformed; nothing was fetched.
        BrandNotFoundError: The brand id is unknown; nothing was fetched.
        asyncio.TimeoutError: The batch exceeded its deadline.  In-flight
            fetches and AI calls are cancelled and no partial response exists.
    """
    validate_request(request)
    brand = brands.get(request.brand_id)
    deadline = settings.batch_timeout if timeout is None else timeout

    log.info(
        "batch_start",
        brand_id=brand.brand_id,
        urls=len(request.urls),
        bulk=request.is_bulk,
        concurrency=settings.max_concurrent_urls,
    )

    # Model first: a construction failure must not leak an open client.
    if llm is None:
        llm = get_llm()
    owns_client = client is None
    if client is None:
        client = build_client()

    try:
        results = await asyncio.wait_for(
            _run_batch(request.urls, brand, client, llm), timeout=deadline
        )
    except asyncio.TimeoutError:
        log.error("batch_timeout", brand_id=brand.brand_id, timeout=deadline)
        raise
    finally:
        if owns_client:
            await client.aclose()

    failed = sum(1 for r in results if r.status == "error")
    log.info("batch_done", brand_id=brand.brand_id, succeeded=len(results) - failed, failed=failed)
    return MetadataBatchResponse(results=results)
