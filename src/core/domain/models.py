"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Las fuentes son heterogéneas y de terceros: validamos en el borde y el resto
  del pipeline trabaja con objetos tipados.
- Los nombres en el cable (`username`, `password`, `status`, `data`...) quedan
  como alias; el código usa nombres descriptivos.

Nota:
- Los registros son objetos valor: inmutables (`frozen`) y sin identidad.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator
from pydantic.config import ConfigDict


class SourceKind(str, Enum):
    """Forma de respuesta de una fuente."""

    STRUCTURED = "structured"
    EMBEDDED = "embedded"


class SourceLocation(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str = Field(..., min_length=1, description="URL completa de la fuente.")
    kind: SourceKind = Field(..., description="Grupo del bundle del que proviene.")


class SourceLocations(BaseModel):
    """Ubicaciones decodificadas, ya particionadas por tipo de fuente."""

    model_config = ConfigDict(frozen=True)

    structured: list[SourceLocation] = Field(default_factory=list)
    embedded: list[SourceLocation] = Field(default_factory=list)

    def all(self) -> list[SourceLocation]:
        """Todas las ubicaciones en orden de grupo y luego de entrada."""

        return [*self.structured, *self.embedded]


class AccountRecord(BaseModel):
    """Una cuenta compartida publicada por una fuente."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    identifier: str = Field(
        ...,
        alias="username",
        description="Identificador de la cuenta (usuario/email).",
    )
    secret: str = Field(
        ...,
        alias="password",
        description="Credencial publicada por la fuente.",
    )
    region_code: str | None = Field(
        default=None,
        alias="country",
        description="Región/país declarado por la fuente.",
    )
    observed_at: datetime = Field(
        ...,
        alias="time",
        description="Momento en que la fuente verificó la cuenta.",
    )
    validity_flag: int = Field(
        ...,
        alias="status",
        strict=True,
        description="1 = válida y mostrable; cualquier otro valor se descarta.",
    )

    @property
    def is_valid(self) -> bool:
        return self.validity_flag == 1


def _is_displayable(item: Any) -> bool:
    """`status` debe ser exactamente el entero 1 (ni "1" ni true)."""

    if isinstance(item, AccountRecord):
        return item.is_valid
    if not isinstance(item, dict):
        return False
    status = item.get("status", item.get("validity_flag"))
    return type(status) is int and status == 1


class SourceBatch(BaseModel):
    """Lote reportado por una fuente: resultado + registros.

    Por qué el sobre es laxo:
    - Un lote con `status` distinto de "ok" (de cualquier tipo JSON) o sin
      `data` se descarta, no es un error de la fuente.
    - De un lote utilizable solo se validan los registros mostrables
      (`status == 1`); el resto se filtra antes de validar.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    outcome_flag: Any = Field(
        default=None,
        alias="status",
        description="Debe ser 'ok' para que el lote sea utilizable.",
    )
    records: list[AccountRecord] | None = Field(
        default=None,
        alias="data",
        description="Registros mostrables del lote (None si no es utilizable).",
    )

    @model_validator(mode="before")
    @classmethod
    def _keep_displayable(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        flag_key = "status" if "status" in data else "outcome_flag"
        records_key = "data" if "data" in data else "records"
        raw = data.get(records_key)
        if data.get(flag_key) != "ok" or raw is None:
            return {**data, records_key: None}
        if isinstance(raw, list):
            return {**data, records_key: [item for item in raw if _is_displayable(item)]}
        return data

    @property
    def usable(self) -> bool:
        return self.outcome_flag == "ok" and self.records is not None


class SourceFailure(BaseModel):
    """Fuente que terminó en error durante un ciclo."""

    model_config = ConfigDict(frozen=True)

    url: str
    kind: SourceKind
    error: str = Field(..., description="Nombre del tipo de error.")
    message: str = ""


class FeedResult(BaseModel):
    """Resultado de una invocación completa del feed.

    Por qué un agregado:
    - Los renderers (consola, JSON, HTML) consumen un único objeto.
    - Hace explícito el fallo del ciclo (`error`) sin lanzar excepciones.
    """

    records: list[AccountRecord] = Field(default_factory=list)
    affiliate_id: str = Field(..., min_length=1)
    promotion_url: str | None = None
    locations: SourceLocations = Field(default_factory=SourceLocations)
    failures: list[SourceFailure] = Field(default_factory=list)
    error: str | None = Field(
        default=None,
        description="Mensaje del error que abortó el ciclo (si lo hubo).",
    )
    completed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def ok(self) -> bool:
        return self.error is None
