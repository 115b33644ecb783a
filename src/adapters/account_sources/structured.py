"""Fuente estructurada: endpoint que responde JSON directamente.

El cuerpo se valida como `SourceBatch`: un lote no utilizable vuelve sin
registros y de uno utilizable solo quedan las cuentas con `status == 1`.
`ParseError` queda para cuerpos que no son un objeto o para cuentas mostrables
incompletas.
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from adapters.http_client import BoundedRetrievalClient
from core.domain.models import SourceBatch, SourceKind
from core.errors import ParseError
from core.interfaces.source import AccountSource


def parse_batch(data: Any, *, url: str) -> SourceBatch:
    try:
        return SourceBatch.model_validate(data)
    except ValidationError as exc:
        raise ParseError(
            f"Body from {url} is not a valid batch: {exc.error_count()} validation error(s).",
            url=url,
        ) from exc


class StructuredSource(AccountSource):
    kind = SourceKind.STRUCTURED

    def __init__(self, retrieval: BoundedRetrievalClient) -> None:
        self._retrieval = retrieval

    async def fetch(self, url: str) -> SourceBatch:
        response = await self._retrieval.retrieve(url, headers={"Accept": "application/json"})
        try:
            data = response.json()
        except ValueError as exc:
            raise ParseError(f"Body from {url} is not valid JSON.", url=url) from exc
        return parse_batch(data, url=url)
