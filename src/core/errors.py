"""Errores tipados del Core.

Por qué una jerarquía propia:
- Los adaptadores lanzan errores con contexto (url, intentos) y el pipeline
  decide qué hacer con ellos sin inspeccionar excepciones de httpx/pydantic.
- `code` permite tratamiento programático (CLI, JSON export) sin parsear textos.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Sequence


class ErrorCode(IntEnum):
    """Códigos estables para logging y serialización."""

    CONFIG_MISSING = 2001
    CONFIG_INVALID = 2002

    DECODE_INVALID_INPUT = 3001
    DECODE_BAD_STRUCTURE = 3002

    RETRIEVAL_FAILED = 4001
    PARSE_FAILED = 4002

    AGGREGATION_FAILED = 5001


class FeedError(Exception):
    """Base de todos los errores esperables de un ciclo de obtención."""

    default_code = ErrorCode.AGGREGATION_FAILED

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}

    @property
    def error_name(self) -> str:
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigurationError(FeedError):
    default_code = ErrorCode.CONFIG_INVALID


class DecodeError(FeedError):
    """El bundle no es base64 válido o su estructura no es la esperada."""

    default_code = ErrorCode.DECODE_INVALID_INPUT


class RetrievalError(FeedError):
    """Una petición agotó sus reintentos (timeout, transporte o status)."""

    default_code = ErrorCode.RETRIEVAL_FAILED

    def __init__(self, message: str, *, url: str, attempts: int) -> None:
        super().__init__(message, details={"url": url, "attempts": attempts})
        self.url = url
        self.attempts = attempts


class ParseError(FeedError):
    """El cuerpo recibido no tiene la forma de un `SourceBatch`."""

    default_code = ErrorCode.PARSE_FAILED

    def __init__(self, message: str, *, url: str) -> None:
        super().__init__(message, details={"url": url})
        self.url = url


class AggregationFailure(FeedError):
    """Al menos una fuente falló y el ciclo se abandona completo."""

    default_code = ErrorCode.AGGREGATION_FAILED

    def __init__(self, message: str, *, failures: Sequence[Any]) -> None:
        super().__init__(message, details={"failed_sources": len(failures)})
        self.failures = list(failures)
