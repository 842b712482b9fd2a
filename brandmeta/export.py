"""CSV export of metadata results."""

from __future__ import annotations

import csv
import io
from typing import Iterable

from brandmeta.models import MetadataResult

CSV_HEADERS = [
    "URL",
    "Page Title",
    "Meta Description",
    "OG Title",
    "OG Description",
    "Status",
    "Error",
]


def results_to_csv(results: Iterable[MetadataResult]) -> str:
    """Return *results* as CSV text with a header row, every cell quoted."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for r in results:
        writer.writerow(
            [
                r.url,
                r.page_title,
                r.meta_description,
                r.og_title,
                r.og_description,
                r.status,
                r.error or "",
            ]
        )
    return buffer.getvalue()
