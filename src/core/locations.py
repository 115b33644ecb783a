"""Bundle de ubicaciones -> lista de URLs por tipo de fuente.

Formato (tras `decode` del bundle superior): `"<sub1>||<sub2>"`.
Cada `<subN>` es a su vez un bundle cuyo texto plano son tokens compactos
separados por saltos de línea. El primer grupo son fuentes JSON, el segundo
páginas con el payload embebido.

Token compacto: URL sin esquema donde `-` sustituye a `/` y `_` a `.`.
"""

from __future__ import annotations

from typing import Sequence

from core.codec import decode, encode
from core.domain.models import SourceKind, SourceLocation, SourceLocations
from core.errors import DecodeError, ErrorCode

BUNDLE_DELIMITER = "||"
SCHEME = "https://"


def format_location(token: str) -> str:
    return SCHEME + token.replace("-", "/").replace("_", ".")


def split_bundle(plaintext: str) -> tuple[str, str]:
    parts = plaintext.split(BUNDLE_DELIMITER)
    if len(parts) != 2:
        raise DecodeError(
            f"Expected exactly 2 sub-bundles, found {len(parts)}.",
            code=ErrorCode.DECODE_BAD_STRUCTURE,
            details={"parts": len(parts)},
        )
    return parts[0], parts[1]


def parse_tokens(plaintext: str) -> list[str]:
    tokens: list[str] = []
    for line in plaintext.split("\n"):
        token = line.strip("\r")
        if token.strip():
            tokens.append(token)
    return tokens


def decode_locations(bundle: str) -> SourceLocations:
    """Decodifica el bundle completo en dos grupos de `SourceLocation`."""

    structured_sub, embedded_sub = split_bundle(decode(bundle))
    return SourceLocations(
        structured=[
            SourceLocation(url=format_location(token), kind=SourceKind.STRUCTURED)
            for token in parse_tokens(decode(structured_sub))
        ],
        embedded=[
            SourceLocation(url=format_location(token), kind=SourceKind.EMBEDDED)
            for token in parse_tokens(decode(embedded_sub))
        ],
    )


def pack_locations(structured: Sequence[str], embedded: Sequence[str]) -> str:
    """Construye un bundle a partir de tokens compactos (inverso de `decode_locations`)."""

    inner = encode("\n".join(structured)) + BUNDLE_DELIMITER + encode("\n".join(embedded))
    return encode(inner)
