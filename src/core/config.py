"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que adaptadores (HTTP/renderers) lean config de forma consistente.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Bundle publicado con la herramienta; se puede sustituir por env/.env/--bundle.
DEFAULT_SOURCES_BUNDLE = (
    "eU1tUTJCY0Eyd0pDaUNaQndCR0M0SEdScUVXUW5rcFBjZmNRMURjUG5vcFAyUEdkNGZjUXJJ"
    "R0M1SEdkTmZKQ2FQM2RpQzNkbjlvQ2sxYlA0akdQMGYyUDRmMkM0anBQcElHUjFUR2RySUdQ"
    "cmsyUGFqcFAyQkdkc3NEZXlDcGQzOG9ndVUyQXBJWk9yQ0pRY0JtUW5rSlJyb1dkY0JXUHBv"
    "SkNjbnBQb0NaUXJVbVBibldQMmZtRnpNSmRuczJBMndKQ2lDWkJ3ZkdSYmZKUGFCWlJyWVpk"
    "NGZjUWNuR1IyZkdRY1BjUHJnSkNjbjJRYVRKUU5UMmZjOUpkdmcyQXoxSmZ3OTFldm9LZHdq"
    "WlJva1dRYmptQ3pIV1A0VFdRNUhHQzJmV0NzZ2NDb2dXQ29rV1E1VGNQTnZKZ3pDM2dpQzNk"
    "bjlvQ2sxRlAzSFdSMkxXUW9DR1AwTFdQcG9XUjFCWlAyTFdQY1RwUTFmR2RuUW1RMXJUQ3Bn"
    "cVBxOW9ndVUyQXBJWk8zSG1RMVhtUG9RY0Nwb1dQcFFHUGNuY1EwVEpDekJKUjBQV1ByZ1pS"
    "elhtRjFyS2ZyTWNBMndKQ2lDWkJ3bjJDblFtQ25NV2RjQmNQMGZaUXBrSkMwblpSMGptUXpC"
    "V1E1TEdkNW5tUE4wWkJzd1poaUMzZG45b0NrMVZQcW9HQ2NqbVBzQ2NDb29XUXFvSlFuQ0dR"
    "M2pwUXFrR2Ryb1dDelhKUTRyakI0cjJQdDlvZ3VVMkFwSVpPMG5aUTNYV1E0SFdQcENHQzFq"
    "R1FibjJRYmpjUTBIV2Rxb0dQck1jUXNFbUZwbzJQY0QzQTJ3SkNpQ1pCd0hHQ25rMlByWVdS"
    "MFRXQzFuSmQyWEdQMm5aUHBDMlB6WFdDY1RKUG9vY1BOQlpCb29XZ2lDM2RuOW9DazFGUTRU"
    "cFAyUGNQckVXUXFZR1JjRFdRNEJwUGFUSlBjUFdDMExHZDVYSlE0cnpkM0hXaGE5b2d1VTJB"
    "cElaTzRqR0Nva0dQYlRXUDJCR2Q0TFdScG9XUnBFR1E1WFdRblVjUXNrMlFjQnBGYlRtaHg5"
    "MkEyd0pDaUNaQndmSkNiamNQcUlXQ25ZY0MyTEdRcFVHQ29JV1EwQm1QYmZjUG9VbUNhWG1D"
    "fHw9PURlenNwZm85b2d1VTJBcElaT2JUY1AyajJDYmpKQzNYR2Q0VEpRblFjUTJuSlFxQ21R"
    "ekxtUW5rcENiZnBGNm8yZzRyMkEyd0pDaUNaQnducENvVXBQNUxHUmJYV0NwTVdkelhaUTNY"
    "R2Rub0pDc2tHUTNmV2QyWHBD"
)

DEFAULT_PROMOTION_URL_TEMPLATE = "https://ssr.otakuyun.net/register?aff={aff}"


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "acctfeed"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "acctfeed"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "acctfeed"
    return Path.home() / ".config" / "acctfeed"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str], *, env_path: Path | None = None) -> Path:
    """Escribe/actualiza variables en el .env global del usuario."""

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# acctfeed user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="ACCTFEED_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    http_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Plazo máximo por intento de petición (segundos).",
    )
    retry_max: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Reintentos tras el primer intento fallido.",
    )
    retry_backoff_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Espera fija entre intentos (sin jitter ni crecimiento).",
    )
    user_agent: str = Field(
        default="acctfeed/0.1 (+https://local)",
        min_length=1,
        description="User-Agent para las peticiones a las fuentes.",
    )

    sources_bundle: str | None = Field(
        default=DEFAULT_SOURCES_BUNDLE,
        description="Bundle ofuscado con las ubicaciones de las fuentes.",
    )
    isolate_source_failures: bool = Field(
        default=False,
        description="Si es True, una fuente caída no descarta el resto del ciclo.",
    )

    default_affiliate: str = Field(
        default="123456",
        min_length=1,
        description="ID de promoción usado si no llega por argumento ni query.",
    )
    promotion_url_template: str | None = Field(
        default=DEFAULT_PROMOTION_URL_TEMPLATE,
        description="Plantilla del enlace promocional; `{aff}` se sustituye por el ID.",
    )
    region_map_path: Path | None = Field(
        default=None,
        description="JSON local región -> etiqueta (bandera). Por defecto el incluido.",
    )

    log_level: str = Field(
        default="WARNING",
        description="Nivel de logging (DEBUG/INFO/WARNING/ERROR).",
    )
    log_json: bool = Field(
        default=False,
        description="Emitir logs como JSON en vez de formato consola.",
    )
