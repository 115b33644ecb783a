"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- `ConsoleRenderer` es el renderer por defecto de `acctfeed run`.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Mapping

from rich.align import Align
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from adapters.report_exporter import minutes_since, region_tag
from core.domain.models import FeedResult, SourceLocations
from core.interfaces.source import Renderer


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida."""

    title = Text("acctfeed", style="bold cyan")
    subtitle = Text("Shared accounts • Decoded sources • Live filter", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_records_table(
    result: FeedResult,
    region_map: Mapping[str, str],
    *,
    now: datetime | None = None,
) -> Table:
    now = now or datetime.now(timezone.utc)
    table = Table(title="Valid Accounts")
    table.add_column("Account", style="cyan", no_wrap=True)
    table.add_column("Password", style="white")
    table.add_column("Region", style="magenta")
    table.add_column("Updated", style="green", justify="right")
    for record in result.records:
        region = record.region_code or "-"
        table.add_row(
            escape(record.identifier),
            escape(record.secret),
            escape(f"{region} ({region_tag(record, region_map)})"),
            f"{minutes_since(record.observed_at, now)} min ago",
        )
    return table


def build_locations_table(locations: SourceLocations) -> Table:
    table = Table(title="Decoded Sources")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Kind", style="cyan", no_wrap=True)
    table.add_column("URL", style="magenta")
    for index, location in enumerate(locations.all(), start=1):
        table.add_row(str(index), location.kind.value, location.url)
    return table


class ConsoleRenderer(Renderer):
    """Presenta el resultado en la terminal."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def render(self, result: FeedResult, region_map: Mapping[str, str]) -> None:
        if result.error:
            self.console.print(f"[red]Feed failed:[/red] {escape(result.error)}")
        for failure in result.failures:
            self.console.print(
                f"[yellow]Source failed[/yellow] ({failure.kind.value}) {escape(failure.url)}: {failure.error}"
            )

        if result.records:
            self.console.print(build_records_table(result, region_map))
        elif not result.error:
            self.console.print("[dim]No valid accounts were published.[/dim]")

        if result.promotion_url:
            self.console.print(f"\n[bold]Register:[/bold] {escape(result.promotion_url)}")
