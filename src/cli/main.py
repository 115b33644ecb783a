"""CLI principal (Typer).

Por qué Typer:
- Opciones tipadas y ayuda autogenerada sin boilerplate de argparse.
- Los subcomandos (`doctor`, `bundle`) viven en módulos propios.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from adapters.renderers import CompositeRenderer, HtmlFileRenderer, JsonFileRenderer
from cli import bundle, doctor
from cli.ui_components import ConsoleRenderer, build_locations_table, print_banner
from core.config import AppSettings
from core.errors import DecodeError
from core.interfaces.source import Renderer
from core.locations import decode_locations
from core.logging import configure_logging
from core.services.feed_pipeline import run_feed

app = typer.Typer(no_args_is_help=True, help="Decode shared-account sources and list valid accounts.")
app.add_typer(doctor.app, name="doctor")
app.add_typer(bundle.app, name="bundle")

_console = Console()


@app.command(name="run")
def run_command(
    bundle_value: Optional[str] = typer.Option(
        None, "--bundle", help="Obfuscated sources bundle (defaults to ACCTFEED_SOURCES_BUNDLE)."
    ),
    affiliate: Optional[str] = typer.Option(None, "--affiliate", "-a", help="Promotion/affiliate id."),
    query: Optional[str] = typer.Option(
        None, "--query", "-q", help="Page URL or query string to read the 'aff' parameter from."
    ),
    json_path: Optional[Path] = typer.Option(None, "--json", help="Also export the result as JSON."),
    html_path: Optional[Path] = typer.Option(None, "--html", help="Also export the result as an HTML page."),
    isolate_failures: Optional[bool] = typer.Option(
        None,
        "--isolate-failures/--all-or-nothing",
        help="Keep results from healthy sources when another source fails.",
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG/INFO/WARNING/ERROR."),
    log_json: bool = typer.Option(False, "--log-json", help="Emit logs as JSON on stderr."),
    no_banner: bool = typer.Option(False, "--no-banner", help="Skip the banner."),
) -> None:
    """Fetch every source once and print the valid accounts."""

    settings = AppSettings()
    configure_logging(level=log_level or settings.log_level, json_format=log_json or settings.log_json)

    if not no_banner:
        print_banner(_console)

    renderers: list[Renderer] = [ConsoleRenderer(_console)]
    if json_path:
        renderers.append(JsonFileRenderer(json_path))
    if html_path:
        renderers.append(HtmlFileRenderer(html_path))

    with _console.status("Fetching sources..."):
        result = asyncio.run(
            run_feed(
                settings=settings,
                bundle=bundle_value,
                affiliate_id=affiliate,
                query=query,
                renderer=CompositeRenderer(*renderers),
                isolate_failures=isolate_failures,
            )
        )

    if json_path:
        _console.print(f"[green]JSON saved to:[/green] {json_path}")
    if html_path:
        _console.print(f"[green]HTML saved to:[/green] {html_path}")
    if not result.ok:
        raise typer.Exit(code=1)


@app.command()
def locations(
    bundle_value: Optional[str] = typer.Option(
        None, "--bundle", help="Obfuscated sources bundle (defaults to ACCTFEED_SOURCES_BUNDLE)."
    ),
) -> None:
    """Decode the sources bundle and list the resulting URLs."""

    settings = AppSettings()
    raw = bundle_value or settings.sources_bundle
    if not raw:
        raise typer.BadParameter("No bundle given and ACCTFEED_SOURCES_BUNDLE is not set.")
    try:
        decoded = decode_locations(raw)
    except DecodeError as exc:
        _console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc
    _console.print(build_locations_table(decoded))


def run() -> None:
    app()
