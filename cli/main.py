"""Brand metadata CLI — entry-point for metadata generation.

Usage:
    brandmeta --help

Commands:
    generate  → fetch, extract and synthesize metadata for URLs
    scrape    → fetch + extract a single page (no AI call)
    brands    → inspect brand records
"""

from __future__ import annotations

import asyncio

import typer

from brandmeta.errors import MetadataError
from brandmeta.logs import configure_logging

from cli.commands.brands import brands_app
from cli.commands.generate import generate

app = typer.Typer(
    name="brandmeta",
    help="Brand-aware SEO / Open Graph metadata generator.",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs."),
) -> None:
    configure_logging(level="DEBUG" if verbose else None)


app.command("generate")(generate)
app.add_typer(brands_app, name="brands")


@app.command("scrape")
def scrape(
    url: str = typer.Option(..., help="URL to scrape."),
) -> None:
    """Fetch a URL and print the extracted title and text."""
    from brandmeta.scraper import build_client, extract_content, fetch_page

    async def _fetch():
        async with build_client() as client:
            return await fetch_page(client, url)

    typer.echo(f"[scrape] Fetching {url!r} …")
    try:
        raw = asyncio.run(_fetch())
        typer.echo(f"[scrape] HTTP {raw.status_code} — extracting content …")
        content = extract_content(raw)
    except MetadataError as e:
        typer.echo(f"[scrape] ❌ {e}")
        raise typer.Exit(code=1)

    typer.echo(f"[scrape] Final URL : {raw.final_url}")
    typer.echo(f"[scrape] Title     : {content.title or '(none)'}")
    typer.echo(f"[scrape] Words     : {len(content.body.split())}")
    for key, value in sorted(content.existing_meta.items()):
        typer.echo(f"[scrape] {key:<9} : {value}")
    typer.echo("")
    typer.echo(content.body)


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
