"""Brand-aware SEO / Open Graph metadata generation.

Public API::

    from brandmeta import MetadataBatchRequest, generate_metadata
    response = await generate_metadata(
        MetadataBatchRequest(brand_id="acme", urls=[...], is_bulk=True),
        brands,
    )
"""

from brandmeta.models import (
    BrandContext,
    MetadataBatchRequest,
    MetadataBatchResponse,
    MetadataResult,
)
from brandmeta.orchestrator import generate_metadata

__all__ = [
    "BrandContext",
    "MetadataBatchRequest",
    "MetadataBatchResponse",
    "MetadataResult",
    "generate_metadata",
]

__version__ = "0.1.0"
