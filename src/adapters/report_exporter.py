"""Exportación del feed como página HTML.

Por qué está en adapters:
- HTML es un detalle de infraestructura (Jinja2).
- El Core solo conoce el agregado `FeedResult`.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

from jinja2 import Environment, FileSystemLoader, select_autoescape

from core.domain.models import AccountRecord, FeedResult

_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

UNKNOWN_FLAG = "un"


def _get_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        autoescape=select_autoescape(["html", "xml"]),
    )


def minutes_since(observed_at: datetime, now: datetime | None = None) -> int:
    """Minutos completos transcurridos desde `observed_at` (nunca negativo).

    Un timestamp sin zona horaria se interpreta como UTC.
    """

    now = now or datetime.now(timezone.utc)
    if observed_at.tzinfo is None:
        observed_at = observed_at.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return max(0, int((now - observed_at).total_seconds() // 60))


def region_tag(record: AccountRecord, region_map: Mapping[str, str]) -> str:
    if not record.region_code:
        return UNKNOWN_FLAG
    return region_map.get(record.region_code, UNKNOWN_FLAG)


def _card(record: AccountRecord, region_map: Mapping[str, str], now: datetime) -> dict[str, Any]:
    return {
        "identifier": record.identifier,
        "secret": record.secret,
        "region": record.region_code or "",
        "flag": region_tag(record, region_map),
        "minutes_ago": minutes_since(record.observed_at, now),
    }


def render_feed_html(
    *,
    result: FeedResult,
    region_map: Mapping[str, str],
    now: datetime | None = None,
) -> str:
    """Renderiza un HTML autocontenido con una tarjeta por cuenta."""

    now = now or datetime.now(timezone.utc)
    template = _get_env().get_template("feed.html")
    return template.render(
        cards=[_card(record, region_map, now) for record in result.records],
        error=result.error,
        promotion_url=result.promotion_url,
        generated_at=now.isoformat(timespec="seconds"),
    )


def export_feed_html(
    *,
    result: FeedResult,
    region_map: Mapping[str, str],
    output_path: Path,
) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    html = render_feed_html(result=result, region_map=region_map)
    output_path.write_text(html, encoding="utf-8")
    return output_path
