"""Fuentes de cuentas (adaptadores concretos).

Por qué un paquete:
- Agrupa una implementación por forma de respuesta (JSON directo o payload
  embebido en HTML).
- Cada módulo implementa `core.interfaces.source.AccountSource`.
"""

from adapters.account_sources.embedded import EmbeddedSource, extract_embedded_payload
from adapters.account_sources.structured import StructuredSource, parse_batch

__all__ = [
	"EmbeddedSource",
	"StructuredSource",
	"extract_embedded_payload",
	"parse_batch",
]
