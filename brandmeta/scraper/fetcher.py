"""Async HTTP fetcher for candidate brand pages."""

from __future__ import annotations

import httpx
import structlog

from brandmeta.config import settings
from brandmeta.errors import FetchError
from brandmeta.scraper.models import RawPage

log = structlog.get_logger(__name__)


def build_client() -> httpx.AsyncClient:
    """Return an ``httpx.AsyncClient`` configured from ``settings``.

    One client is shared by every pipeline in a batch; ``httpx`` clients are
    safe for concurrent use.
    """
    return httpx.AsyncClient(
        headers={"User-Agent": settings.user_agent},
        timeout=settings.request_timeout,
        follow_redirects=True,
        max_redirects=settings.max_redirects,
    )


async def fetch_page(client: httpx.AsyncClient, url: str) -> RawPage:
    """Fetch *url* with a single GET and return a :class:`RawPage`.

    Raises:
        FetchError: ``kind="status"`` for a non-2xx final response,
            ``kind="redirects"`` when the redirect cap is exceeded and
            ``kind="transport"`` for network, DNS or timeout failures.
    """
    try:
        response = await client.get(url)
    except httpx.TooManyRedirects as exc:
        raise FetchError(
            "redirects",
            f"Failed to fetch {url}: more than {settings.max_redirects} redirects",
        ) from exc
    except httpx.TimeoutException as exc:
        raise FetchError("transport", f"Failed to fetch {url}: timed out") from exc
    except httpx.RequestError as exc:
        raise FetchError(
            "transport", f"Failed to fetch {url}: {type(exc).__name__}: {exc}"
        ) from exc

    if not response.is_success:
        raise FetchError(
            "status",
            f"Failed to fetch {url}: HTTP {response.status_code} {response.reason_phrase}".rstrip(),
            status_code=response.status_code,
        )

    final_url = str(response.url)
    if final_url != url:
        log.debug("fetch_redirected", url=url, final_url=final_url)

    return RawPage(
        url=url,
        final_url=final_url,
        html=response.text,
        status_code=response.status_code,
    )
