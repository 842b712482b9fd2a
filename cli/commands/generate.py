"""The ``generate`` command: brand-aware metadata for one or many URLs."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import List, Optional

import typer

from brandmeta.brands import JsonBrandStore
from brandmeta.errors import BrandNotFoundError, ValidationError
from brandmeta.export import results_to_csv
from brandmeta.models import MetadataBatchRequest
from brandmeta.orchestrator import generate_metadata


def _read_urls_file(path: Path) -> List[str]:
    """One URL per line; blank lines and ``#`` comments are skipped."""
    urls = []
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            urls.append(line)
    return urls


def generate(
    brand: str = typer.Option(..., "--brand", help="Brand id to write metadata for."),
    url: Optional[List[str]] = typer.Option(None, "--url", help="Page URL (repeatable)."),
    urls_file: Optional[Path] = typer.Option(
        None, "--urls-file", exists=True, dir_okay=False, help="File with one URL per line."
    ),
    bulk: bool = typer.Option(False, "--bulk", help="Process several URLs in one batch."),
    csv_path: Optional[Path] = typer.Option(None, "--csv", help="Write results to this CSV file."),
    as_json: bool = typer.Option(False, "--json", help="Print the raw JSON response."),
    brands_file: Optional[Path] = typer.Option(
        None, "--brands-file", help="Brand records JSON (defaults to BRANDS_FILE)."
    ),
) -> None:
    """Generate page title, meta description and OG tags for each URL."""
    urls = list(url or [])
    if urls_file is not None:
        urls.extend(_read_urls_file(urls_file))

    request = MetadataBatchRequest(brand_id=brand, urls=urls, is_bulk=bulk)
    store = JsonBrandStore(brands_file)

    if not as_json:
        typer.echo(f"🔎 Generating metadata for {len(urls)} URL(s) as {brand!r} …")
    try:
        response = asyncio.run(generate_metadata(request, store))
    except (ValidationError, BrandNotFoundError) as e:
        typer.echo(f"❌ Error: {e}")
        raise typer.Exit(code=1)
    except asyncio.TimeoutError:
        typer.echo("❌ Error: batch timed out")
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(json.dumps(response.to_dict(), indent=2, ensure_ascii=False))
    else:
        for r in response.results:
            if r.status == "success":
                typer.echo(f"✅ {r.url}")
                typer.echo(f"   Title          : {r.page_title}")
                typer.echo(f"   Description    : {r.meta_description}")
                typer.echo(f"   OG title       : {r.og_title}")
                typer.echo(f"   OG description : {r.og_description}")
            else:
                typer.echo(f"❌ {r.url}")
                typer.echo(f"   {r.error}")

    if csv_path is not None:
        csv_path.write_text(results_to_csv(response.results), encoding="utf-8")
        if not as_json:
            typer.echo(f"💾 Wrote {len(response.results)} row(s) to {csv_path}")
