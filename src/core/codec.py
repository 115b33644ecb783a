"""Decodificador de bundles ofuscados.

El bundle de ubicaciones se distribuye ofuscado con tres capas reversibles:
base64, un desplazamiento de 3 letras (César) y la inversión de la secuencia.
No es una frontera de seguridad: solo evita que las URLs aparezcan en claro.

`decode` es la única dirección que necesita el pipeline; `encode` existe para
generar bundles desde la CLI y para validar la relación inversa en tests.
"""

from __future__ import annotations

import base64
import binascii

from core.errors import DecodeError, ErrorCode

_SHIFT = 3
_ALPHABET_SIZE = 26


def _shift_char(char: str, offset: int) -> str:
    if "a" <= char <= "z":
        base = ord("a")
    elif "A" <= char <= "Z":
        base = ord("A")
    else:
        return char
    return chr((ord(char) - base + offset) % _ALPHABET_SIZE + base)


def _b64decode(data: str) -> str:
    # Tolerancia tipo `atob`: ignora espacios y acepta padding ausente.
    compact = "".join(data.split())
    remainder = len(compact) % 4
    if remainder == 1:
        raise DecodeError(
            "Invalid base64 length.",
            code=ErrorCode.DECODE_INVALID_INPUT,
            details={"length": len(compact)},
        )
    if remainder:
        compact += "=" * (4 - remainder)
    try:
        raw = base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError(f"Input is not valid base64: {exc}") from exc
    return raw.decode("latin-1")


def decode(data: str) -> str:
    """Recupera el texto plano de un bundle (base64 -> César -3 -> reverso)."""

    intermediate = _b64decode(data)
    shifted = [_shift_char(ch, -_SHIFT) for ch in intermediate]
    return "".join(reversed(shifted))


def encode(text: str) -> str:
    """Transformación directa: reverso -> César +3 -> base64.

    `text` debe ser representable en latin-1 (los bundles son ASCII).
    """

    shifted = "".join(_shift_char(ch, _SHIFT) for ch in reversed(text))
    return base64.b64encode(shifted.encode("latin-1")).decode("ascii")
