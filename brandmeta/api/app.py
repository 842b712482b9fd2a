"""FastAPI application factory.

Lifespan
--------
On startup the app configures logging and attaches the brand lookup
(shared across all requests via ``request.app.state.brands``).

Routers
-------
    /metadata  — batch / single URL metadata generation
    /health    — liveness probe
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from brandmeta.api.routers import metadata as metadata_router
from brandmeta.brands import JsonBrandStore
from brandmeta.config import settings
from brandmeta.logs import configure_logging

log = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Attach the brand store on startup."""
    configure_logging()
    if not hasattr(app.state, "brands"):
        app.state.brands = JsonBrandStore()
    log.info(
        "api_startup",
        brands_path=str(settings.brands_path),
        llm_provider=settings.llm_provider,
        max_concurrent_urls=settings.max_concurrent_urls,
    )
    yield


def create_app() -> FastAPI:
    """Return a fully-configured FastAPI application instance."""
    app = FastAPI(
        title="Brand Metadata API",
        description=(
            "Generates page titles, meta descriptions and Open Graph tags for "
            "brand webpages from their content and the brand's tone of voice."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )

    # Allow browser frontends on any origin (tighten for production).
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(metadata_router.router, prefix="/metadata", tags=["metadata"])

    @app.get("/health", tags=["health"])
    def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


# Module-level instance used by uvicorn:
#   uvicorn brandmeta.api.app:app --reload
app = create_app()
