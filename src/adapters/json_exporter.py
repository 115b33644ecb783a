"""Volcado JSON de un ciclo del feed.

El archivo contiene el `FeedResult` completo: cuentas válidas (con su
credencial), ID de promoción y enlace, ubicaciones decodificadas, fuentes
fallidas y el error del ciclo si lo hubo. Las claves van ordenadas para que
dos ciclos se puedan comparar con un diff.
"""

from __future__ import annotations

import json
from pathlib import Path

from core.domain.models import FeedResult


def export_feed_json(*, result: FeedResult, output_path: Path) -> Path:
    """Exporta `FeedResult` a JSON UTF-8 con formato estable."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = result.model_dump(mode="json")
    output_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    return output_path
