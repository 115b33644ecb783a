"""Cargador de recursos estáticos.

Este módulo vive en `core/` porque:
- centraliza el *qué* datos necesitamos (mapeo de regiones) sin acoplarse a la CLI
- evita duplicar lógica de paths en renderers.

El mapeo región -> etiqueta solo lo consumen los renderers; el pipeline no
depende de él.
"""

from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path

from core.config import get_user_config_dir
from core.errors import ConfigurationError, ErrorCode

REGION_MAP_FILENAME = "regions.json"

_PACKAGED_RESOURCES = Path(__file__).resolve().parent / "resources"


def get_default_data_path(filename: str) -> Path | None:
    """Busca un recurso en ubicaciones comunes.

    Orden:
    1) $ACCTFEED_DATA_DIR/<filename>
    2) <user_config>/data/<filename>
    3) ./<filename> (cwd)
    4) recurso incluido en el paquete
    """

    candidates: list[Path] = []
    override = (os.environ.get("ACCTFEED_DATA_DIR") or "").strip()
    if override:
        candidates.append(Path(override) / filename)
    candidates.extend(
        [
            get_user_config_dir() / "data" / filename,
            Path.cwd() / filename,
            _PACKAGED_RESOURCES / filename,
        ]
    )
    for p in candidates:
        if p.exists() and p.is_file():
            return p
    return None


def load_region_map(path: Path | None = None) -> dict[str, str]:
    """Carga el mapeo región -> etiqueta (código de bandera).

    - Sin fichero disponible devuelve `{}`: los renderers usan un genérico.
    - Un fichero con contenido inválido es un error de configuración.
    """

    path = path or get_default_data_path(REGION_MAP_FILENAME)
    if path is None or not path.exists():
        return {}

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(
            f"Region map {path} could not be read: {exc}",
            code=ErrorCode.CONFIG_INVALID,
        ) from exc
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Region map {path} must be a JSON object.",
            code=ErrorCode.CONFIG_INVALID,
        )
    return {str(k): str(v) for k, v in data.items()}


async def load_region_map_async(path: Path | None = None) -> dict[str, str]:
    return await asyncio.to_thread(load_region_map, path)
