"""Metadata generation endpoint.

Routes
------
POST /metadata    Body: {"brandId": "...", "urls": ["https://..."], "isBulk": true}

Returns ``{"results": [...]}`` with one entry per requested URL, in request
order.  Per-URL failures are reported inside ``results``; only request-level
problems change the status code:

    400  invalid request (``detail.error`` carries the validation kind)
    404  unknown brand
    504  batch exceeded ``BATCH_TIMEOUT``
"""

from __future__ import annotations

import asyncio
from typing import Any, List, Literal, Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from brandmeta.errors import BrandNotFoundError, ValidationError
from brandmeta.models import MetadataBatchRequest
from brandmeta.orchestrator import generate_metadata

router = APIRouter()


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class GenerateMetadataRequest(BaseModel):
    brandId: str = ""
    urls: List[str] = []
    isBulk: bool = False


class MetadataResultSchema(BaseModel):
    url: str
    pageTitle: str
    metaDescription: str
    ogTitle: str
    ogDescription: str
    status: Literal["success", "error"]
    error: Optional[str] = None


class GenerateMetadataResponse(BaseModel):
    results: List[MetadataResultSchema]


# ---------------------------------------------------------------------------
# Endpoint
# ---------------------------------------------------------------------------

@router.post("", response_model=GenerateMetadataResponse)
async def generate(body: GenerateMetadataRequest, request: Request) -> dict[str, Any]:
    """Fetch each URL, extract its content and generate brand-aware metadata."""
    batch = MetadataBatchRequest(brand_id=body.brandId, urls=body.urls, is_bulk=body.isBulk)
    try:
        response = await generate_metadata(batch, request.app.state.brands)
    except ValidationError as exc:
        raise HTTPException(
            status_code=400, detail={"error": exc.kind, "message": str(exc)}
        ) from exc
    except BrandNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except asyncio.TimeoutError as exc:
        raise HTTPException(status_code=504, detail="Metadata generation timed out") from exc
    return response.to_dict()
