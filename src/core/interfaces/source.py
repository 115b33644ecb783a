"""Contratos de fuentes y colaboradores de presentación.

Por qué Protocol:
- Define un contrato estructural (duck typing) sin herencia rígida.
- Permite que el pipeline reciba fuentes, renderers y loaders inyectados y
  que los tests usen stubs sin acoplar el Core a implementaciones concretas.
"""

from __future__ import annotations

from typing import Mapping, Protocol, runtime_checkable

from core.domain.models import FeedResult, SourceBatch, SourceKind


@runtime_checkable
class AccountSource(Protocol):
    """Contrato mínimo para una fuente de cuentas.

    Reglas de diseño:
    - `fetch` es asíncrono porque hace I/O (HTTP).
    - Devuelve `None` cuando la fuente no publica nada en esta ocasión; los
      fallos se expresan con excepciones de `core.errors`.
    """

    kind: SourceKind

    async def fetch(self, url: str) -> SourceBatch | None:
        ...


@runtime_checkable
class Renderer(Protocol):
    """Consumidor final del resultado (consola, HTML, JSON...)."""

    def render(self, result: FeedResult, region_map: Mapping[str, str]) -> None:
        ...


class RegionMapLoader(Protocol):
    """Carga asíncrona del mapeo región -> etiqueta de presentación."""

    async def __call__(self) -> Mapping[str, str]:
        ...
