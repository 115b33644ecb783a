"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import BoundedRetrievalClient, build_async_client
from core.config import AppSettings, get_user_env_file, write_user_env_vars
from core.domain.models import SourceLocations
from core.errors import FeedError
from core.locations import decode_locations
from core.resources_loader import load_region_map

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_sources(settings: AppSettings, locations: SourceLocations) -> list[tuple[str, bool, str]]:
    """Single attempt per source, no retries: reachability only."""

    async with build_async_client(settings) as client:
        retrieval = BoundedRetrievalClient.from_settings(client, settings)

        async def check(url: str) -> tuple[str, bool, str]:
            try:
                response = await retrieval.retrieve(url, max_retries=0)
                return url, True, f"HTTP {response.status_code}"
            except FeedError as exc:
                return url, False, exc.message

        return list(await asyncio.gather(*(check(loc.url) for loc in locations.all())))


@app.command()
def run(
    check_sources: bool = typer.Option(False, "--check-sources", help="Also request every decoded source once."),
) -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="acctfeed Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    table.add_row("User config", "OK", str(get_user_env_file()))
    table.add_row(
        "Retry policy",
        "OK",
        f"{settings.retry_max} retries, {settings.retry_backoff_seconds}s backoff, "
        f"{settings.http_timeout_seconds}s per attempt",
    )

    locations: SourceLocations | None = None
    if not settings.sources_bundle:
        table.add_row("Sources bundle", "MISSING", "Set ACCTFEED_SOURCES_BUNDLE or run `doctor setup`")
    else:
        try:
            locations = decode_locations(settings.sources_bundle)
            table.add_row(
                "Sources bundle",
                "OK",
                f"{len(locations.structured)} structured, {len(locations.embedded)} embedded",
            )
        except FeedError as exc:
            table.add_row("Sources bundle", "FAIL", exc.message)

    try:
        region_map = load_region_map(settings.region_map_path)
        table.add_row("Region map", "OK" if region_map else "EMPTY", f"{len(region_map)} entries")
    except FeedError as exc:
        table.add_row("Region map", "FAIL", exc.message)

    table.add_row(
        "Failure policy",
        "OK",
        "isolate failed sources" if settings.isolate_source_failures else "all-or-nothing",
    )

    if check_sources and locations is not None:
        for url, ok, detail in asyncio.run(_check_sources(settings, locations)):
            table.add_row(url, "OK" if ok else "FAIL", detail)

    _console.print(table)


@app.command(name="setup")
def setup() -> None:
    """Interactive setup (stores config in the user config .env)."""

    settings = AppSettings()

    bundle = typer.prompt("Sources bundle", default=settings.sources_bundle or "", show_default=False).strip()
    affiliate = typer.prompt("Default affiliate id", default=settings.default_affiliate).strip()
    template = typer.prompt(
        "Promotion URL template ({aff} is replaced, '-' to disable)",
        default=settings.promotion_url_template or "",
        show_default=True,
    ).strip()

    if bundle:
        try:
            decode_locations(bundle)
        except FeedError as exc:
            raise typer.BadParameter(f"Bundle does not decode: {exc.message}") from exc

    values = {
        "ACCTFEED_SOURCES_BUNDLE": bundle,
        "ACCTFEED_DEFAULT_AFFILIATE": affiliate,
    }
    values = {k: v for k, v in values.items() if v}
    # Se guarda vacío para anular también la plantilla por defecto.
    values["ACCTFEED_PROMOTION_URL_TEMPLATE"] = "" if template == "-" else template
    env_path = write_user_env_vars(values)

    _console.print(f"[green]Saved config to:[/green] {env_path}")
