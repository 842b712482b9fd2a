"""Brand commands: inspect the brand records the generator reads."""

from pathlib import Path
from typing import Optional

import typer

from brandmeta.brands import JsonBrandStore
from brandmeta.errors import BrandNotFoundError

brands_app = typer.Typer(help="Inspect brand records.", no_args_is_help=True)


@brands_app.command("list")
def brands_list(
    brands_file: Optional[Path] = typer.Option(None, "--brands-file", help="Brand records JSON."),
) -> None:
    """List known brand ids."""
    store = JsonBrandStore(brands_file)
    ids = store.list_ids()
    if not ids:
        typer.echo(f"No brands found in {store.path}.")
        return
    for brand_id in ids:
        brand = store.get(brand_id)
        locale = "-".join(p for p in (brand.language, brand.country) if p)
        typer.echo(f" - {brand_id} ({locale})")


@brands_app.command("show")
def brands_show(
    brand_id: str = typer.Argument(..., help="Brand id."),
    brands_file: Optional[Path] = typer.Option(None, "--brands-file", help="Brand records JSON."),
) -> None:
    """Show the context passed to the AI for one brand."""
    try:
        brand = JsonBrandStore(brands_file).get(brand_id)
    except BrandNotFoundError as e:
        typer.echo(f"❌ {e}")
        raise typer.Exit(code=1)

    typer.echo(f"Brand      : {brand.brand_id}")
    typer.echo(f"Identity   : {brand.brand_identity or '(none)'}")
    typer.echo(f"Tone       : {brand.tone_of_voice or '(none)'}")
    typer.echo(f"Guardrails : {', '.join(sorted(brand.guardrails)) or '(none)'}")
    typer.echo(f"Language   : {brand.language}")
    typer.echo(f"Country    : {brand.country or '(none)'}")
