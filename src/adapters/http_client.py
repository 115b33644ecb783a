"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeouts, headers y reintentos para todas las fuentes.
- Facilita testeo: el transporte se inyecta (`httpx.MockTransport` en tests).
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

import httpx
import structlog

from core.config import AppSettings
from core.errors import RetrievalError

logger = structlog.get_logger()

DEFAULT_DEADLINE_SECONDS = 5.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_BACKOFF_SECONDS = 1.0


def build_async_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` con defaults seguros.

    Por qué un builder:
    - Centraliza headers para que todas las fuentes se comporten igual.
    - El plazo por intento lo impone `BoundedRetrievalClient`; aquí solo
      dejamos un timeout de transporte como red de seguridad.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        transport=transport,
    )


class BoundedRetrievalClient:
    """GET con plazo por intento y reintentos de espera fija.

    - Cada intento tiene su propio plazo; al vencer, la petición en curso se
      cancela y cuenta como fallo.
    - Fallo = plazo vencido, error de transporte o status fuera de 2xx.
    - Intentos totales = `max_retries + 1`, separados por `backoff_seconds`.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        deadline_seconds: float = DEFAULT_DEADLINE_SECONDS,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff_seconds: float = DEFAULT_BACKOFF_SECONDS,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        self._client = client
        self.deadline_seconds = deadline_seconds
        self.max_retries = max_retries
        self.backoff_seconds = backoff_seconds
        self._sleep = sleep

    @classmethod
    def from_settings(
        cls,
        client: httpx.AsyncClient,
        settings: AppSettings,
    ) -> BoundedRetrievalClient:
        return cls(
            client,
            deadline_seconds=settings.http_timeout_seconds,
            max_retries=settings.retry_max,
            backoff_seconds=settings.retry_backoff_seconds,
        )

    async def _attempt(
        self,
        url: str,
        headers: dict[str, str] | None,
        deadline: float,
    ) -> httpx.Response:
        response = await asyncio.wait_for(self._client.get(url, headers=headers), timeout=deadline)
        if not response.is_success:
            raise httpx.HTTPStatusError(
                f"Response error: {response.status_code}",
                request=response.request,
                response=response,
            )
        return response

    async def retrieve(
        self,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        deadline_seconds: float | None = None,
        max_retries: int | None = None,
    ) -> httpx.Response:
        deadline = self.deadline_seconds if deadline_seconds is None else deadline_seconds
        retries = self.max_retries if max_retries is None else max_retries
        total_attempts = max(0, retries) + 1

        last_error: Exception | None = None
        for attempt in range(1, total_attempts + 1):
            try:
                return await self._attempt(url, headers, deadline)
            except asyncio.TimeoutError as exc:
                last_error = exc
                reason = f"deadline of {deadline}s exceeded"
            except httpx.HTTPError as exc:
                last_error = exc
                reason = str(exc) or type(exc).__name__

            logger.warning(
                "retrieval_attempt_failed",
                url=url,
                attempt=attempt,
                max_attempts=total_attempts,
                reason=reason,
            )
            if attempt < total_attempts:
                await self._sleep(self.backoff_seconds)

        raise RetrievalError(
            f"Retrieval of {url} failed after {total_attempts} attempts: {reason}",
            url=url,
            attempts=total_attempts,
        ) from last_error
