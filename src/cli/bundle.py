"""Bundle authoring commands."""

from __future__ import annotations

from typing import List, Optional

import typer

from core.locations import pack_locations

app = typer.Typer(no_args_is_help=True, help="Build obfuscated source bundles.")


@app.command()
def pack(
    structured: Optional[List[str]] = typer.Option(
        None, "--structured", "-s", help="Compact token of a JSON source (repeatable)."
    ),
    embedded: Optional[List[str]] = typer.Option(
        None, "--embedded", "-e", help="Compact token of an HTML source (repeatable)."
    ),
) -> None:
    """Print a bundle for the given compact tokens.

    Tokens omit the scheme and use '-' for '/' and '_' for '.',
    e.g. `example_com-api` for https://example.com/api.
    """

    if not structured and not embedded:
        raise typer.BadParameter("Pass at least one --structured or --embedded token.")
    typer.echo(pack_locations(structured or [], embedded or []))
