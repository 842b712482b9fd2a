"""Error taxonomy for the metadata pipeline.

Every error carries a ``kind`` string so callers (the orchestrator, the API
layer, tests) can branch on the failure class without parsing messages.

Request-level errors (:class:`ValidationError`, :class:`BrandNotFoundError`)
abort a whole batch.  Stage errors (:class:`FetchError`,
:class:`ExtractionError`, :class:`SynthesisError`) are caught per URL by the
orchestrator and turned into that URL's ``error`` field.
"""

from __future__ import annotations

from typing import Literal, Optional

ValidationKind = Literal["empty-url", "invalid-url", "missing-brand", "too-many-urls"]
FetchKind = Literal["transport", "status", "redirects"]
ExtractionKind = Literal["parse-failure"]
SynthesisKind = Literal["missing-fields", "upstream", "parse"]


class MetadataError(Exception):
    """Base class for every error raised by the pipeline."""

    kind: str = "unknown"

    def __init__(self, kind: str, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message

    @property
    def transient(self) -> bool:
        """``True`` if one re-attempt of the failing stage is allowed."""
        return False

    def __str__(self) -> str:
        return self.message


class ValidationError(MetadataError):
    def __init__(self, kind: ValidationKind, message: str) -> None:
        super().__init__(kind, message)


class BrandNotFoundError(MetadataError):
    def __init__(self, brand_id: str) -> None:
        super().__init__("brand-not-found", f"Brand not found: {brand_id!r}")
        self.brand_id = brand_id


class FetchError(MetadataError):
    def __init__(
        self,
        kind: FetchKind,
        message: str,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(kind, message)
        self.status_code = status_code

    @property
    def transient(self) -> bool:
        return self.kind == "transport"


class ExtractionError(MetadataError):
    def __init__(self, message: str, kind: ExtractionKind = "parse-failure") -> None:
        super().__init__(kind, message)


class SynthesisError(MetadataError):
    def __init__(self, kind: SynthesisKind, message: str) -> None:
        super().__init__(kind, message)

    @property
    def transient(self) -> bool:
        return self.kind == "upstream"
