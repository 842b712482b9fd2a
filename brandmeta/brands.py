"""JSON-file adapter for the brand-context lookup.

Brand records are owned by an external brand-management system; this module
only reads an exported snapshot of them.  The file maps brand ids to records::

    {
      "acme": {
        "brandIdentity": "Family-run outdoor gear maker",
        "toneOfVoice": "Warm, practical, no jargon",
        "guardrails": ["cheap", "guaranteed"],
        "language": "en",
        "country": "GB"
      }
    }

Anything with a ``get(brand_id) -> BrandContext`` method can stand in for
:class:`JsonBrandStore` when calling the orchestrator.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from brandmeta.config import settings
from brandmeta.errors import BrandNotFoundError
from brandmeta.models import BrandContext


class JsonBrandStore:
    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path is not None else settings.brands_path

    def _load(self) -> Dict[str, Any]:
        # Re-read on every lookup so edits to the export are picked up.
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} must contain a JSON object keyed by brand id")
        return data

    def get(self, brand_id: str) -> BrandContext:
        """Return the :class:`BrandContext` for *brand_id*.

        Raises:
            BrandNotFoundError: If the id is not present in the file.
        """
        record = self._load().get(brand_id)
        if not isinstance(record, dict):
            raise BrandNotFoundError(brand_id)
        return BrandContext.from_dict(brand_id, record)

    def list_ids(self) -> List[str]:
        return sorted(self._load())
