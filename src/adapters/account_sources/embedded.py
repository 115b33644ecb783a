"""Fuente embebida: página HTML que publica el lote dentro de un script.

Gramática reconocida (primera aparición en el texto):

    ad <espacios> = <espacios> '<payload>'

donde `<payload>` no contiene comillas simples y es un JSON con la forma de
`SourceBatch`. Dos resultados distintos:
- sin coincidencia -> `None` (la página puede no publicar nada en ese render)
- coincidencia con JSON inválido -> `ParseError`
"""

from __future__ import annotations

import json
import re

from adapters.account_sources.structured import parse_batch
from adapters.http_client import BoundedRetrievalClient
from core.domain.models import SourceBatch, SourceKind
from core.errors import ParseError
from core.interfaces.source import AccountSource

_PAYLOAD_PATTERN = re.compile(r"ad\s*=\s*'([^']+)'")


def extract_embedded_payload(text: str) -> str | None:
    match = _PAYLOAD_PATTERN.search(text)
    return match.group(1) if match else None


class EmbeddedSource(AccountSource):
    kind = SourceKind.EMBEDDED

    def __init__(self, retrieval: BoundedRetrievalClient) -> None:
        self._retrieval = retrieval

    async def fetch(self, url: str) -> SourceBatch | None:
        response = await self._retrieval.retrieve(url)
        payload = extract_embedded_payload(response.text)
        if payload is None:
            return None
        try:
            data = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise ParseError(f"Embedded payload in {url} is not valid JSON.", url=url) from exc
        return parse_batch(data, url=url)
