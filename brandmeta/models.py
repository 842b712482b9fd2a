"""Request, brand and result models for metadata generation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Literal, Optional

Status = Literal["success", "error"]


@dataclass(frozen=True)
class BrandContext:
    """Brand voice and locale used to personalise generated metadata."""

    brand_id: str
    brand_identity: str = ""
    tone_of_voice: str = ""
    guardrails: FrozenSet[str] = frozenset()
    language: str = "en"
    country: str = ""

    @classmethod
    def from_dict(cls, brand_id: str, data: Dict[str, Any]) -> BrandContext:
        """Build a context from a camelCase brand record."""
        guardrails: Iterable[str] = data.get("guardrails") or ()
        return cls(
            brand_id=brand_id,
            brand_identity=data.get("brandIdentity", "") or "",
            tone_of_voice=data.get("toneOfVoice", "") or "",
            guardrails=frozenset(g.strip() for g in guardrails if g and g.strip()),
            language=data.get("language", "en") or "en",
            country=data.get("country", "") or "",
        )


@dataclass(frozen=True)
class GeneratedMetadata:
    page_title: str
    meta_description: str
    og_title: str
    og_description: str


@dataclass
class MetadataBatchRequest:
    brand_id: str
    urls: List[str] = field(default_factory=list)
    is_bulk: bool = False


@dataclass(frozen=True)
class MetadataResult:
    """Outcome for one requested URL.

    Build instances with :meth:`success` or :meth:`failure`; both keep the
    status/field invariant (all four fields populated and no error, or an
    error and four empty fields).
    """

    url: str
    page_title: str = ""
    meta_description: str = ""
    og_title: str = ""
    og_description: str = ""
    status: Status = "error"
    error: Optional[str] = None

    @classmethod
    def success(cls, url: str, metadata: GeneratedMetadata) -> MetadataResult:
        return cls(
            url=url,
            page_title=metadata.page_title,
            meta_description=metadata.meta_description,
            og_title=metadata.og_title,
            og_description=metadata.og_description,
            status="success",
            error=None,
        )

    @classmethod
    def failure(cls, url: str, error: str) -> MetadataResult:
        return cls(url=url, status="error", error=error or "Failed to generate metadata")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "pageTitle": self.page_title,
            "metaDescription": self.meta_description,
            "ogTitle": self.og_title,
            "ogDescription": self.og_description,
            "status": self.status,
            "error": self.error,
        }


@dataclass
class MetadataBatchResponse:
    results: List[MetadataResult] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"results": [r.to_dict() for r in self.results]}
