"""Feed orchestration: decode locations, fan out to sources, merge, render.

The CLI delegates the whole retrieval cycle to `run_feed`, which takes every
collaborator explicitly (transport, renderer, region loader, affiliate id) so
the same cycle can run from tests, scripts or other entry points.

Aggregation semantics:
- Every location gets one task; all tasks run concurrently and the pipeline
  waits for all of them before merging. Output order follows input order
  (structured group, then embedded group), never completion order.
- By default a single failed source aborts the cycle (`AggregationFailure`).
  With `isolate_failures=True` failed sources are reported and skipped.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Mapping, Sequence
from urllib.parse import parse_qs, urlsplit

import httpx
import structlog

from adapters.account_sources import EmbeddedSource, StructuredSource
from adapters.http_client import BoundedRetrievalClient, build_async_client
from core.config import AppSettings
from core.domain.models import (
    AccountRecord,
    FeedResult,
    SourceBatch,
    SourceFailure,
    SourceKind,
    SourceLocation,
    SourceLocations,
)
from core.errors import AggregationFailure, ConfigurationError, ErrorCode, FeedError
from core.interfaces.source import AccountSource, RegionMapLoader, Renderer
from core.locations import decode_locations
from core.logging import clear_run_id, set_run_id
from core.resources_loader import load_region_map_async

logger = structlog.get_logger()

AFFILIATE_QUERY_PARAM = "aff"


@dataclass
class AggregateOutcome:
    """Records that survived filtering plus the sources that failed."""

    records: list[AccountRecord] = field(default_factory=list)
    failures: list[SourceFailure] = field(default_factory=list)


def merge_batches(batches: Sequence[SourceBatch | None]) -> list[AccountRecord]:
    """Flatten usable batches in order and keep only valid records."""

    records: list[AccountRecord] = []
    for batch in batches:
        if batch is None or not batch.usable:
            continue
        records.extend(batch.records or [])
    return [record for record in records if record.is_valid]


def _failure_from(location: SourceLocation, exc: BaseException) -> SourceFailure:
    return SourceFailure(
        url=location.url,
        kind=location.kind,
        error=type(exc).__name__,
        message=str(exc),
    )


async def aggregate(
    locations: SourceLocations,
    *,
    structured_source: AccountSource,
    embedded_source: AccountSource,
    isolate_failures: bool = False,
) -> AggregateOutcome:
    ordered = locations.all()
    sources: dict[SourceKind, AccountSource] = {
        SourceKind.STRUCTURED: structured_source,
        SourceKind.EMBEDDED: embedded_source,
    }

    results = await asyncio.gather(
        *(sources[location.kind].fetch(location.url) for location in ordered),
        return_exceptions=True,
    )

    batches: list[SourceBatch | None] = []
    failures: list[SourceFailure] = []
    first_error: FeedError | None = None
    for location, result in zip(ordered, results):
        if isinstance(result, FeedError):
            failures.append(_failure_from(location, result))
            first_error = first_error or result
            logger.warning(
                "source_failed",
                url=location.url,
                kind=location.kind.value,
                error=result.error_name,
                message=result.message,
            )
            continue
        if isinstance(result, BaseException):
            # Programming errors are not source failures.
            raise result
        batches.append(result)

    if failures and not isolate_failures:
        raise AggregationFailure(
            f"{len(failures)} of {len(ordered)} sources failed; discarding the whole cycle.",
            failures=failures,
        ) from first_error

    records = merge_batches(batches)
    logger.info(
        "aggregation_completed",
        sources=len(ordered),
        failed=len(failures),
        records=len(records),
    )
    return AggregateOutcome(records=records, failures=failures)


def resolve_affiliate(
    explicit: str | None,
    query: str | Mapping[str, str] | None,
    fallback: str,
) -> str:
    """Priority: explicit argument, then the `aff` query parameter, then fallback.

    `query` may be a full URL, a raw query string (`"aff=1&x=2"`) or an
    already parsed mapping.
    """

    if explicit:
        return explicit

    if isinstance(query, Mapping):
        value = query.get(AFFILIATE_QUERY_PARAM)
        if value:
            return value
    elif query:
        raw = urlsplit(query).query if "://" in query else query.lstrip("?")
        values = parse_qs(raw).get(AFFILIATE_QUERY_PARAM)
        if values and values[0]:
            return values[0]

    return fallback


def build_promotion_url(template: str | None, affiliate_id: str) -> str | None:
    if not template:
        return None
    return template.replace("{aff}", affiliate_id)


async def collect_records(
    *,
    settings: AppSettings,
    locations: SourceLocations,
    transport: httpx.AsyncBaseTransport | None = None,
    isolate_failures: bool | None = None,
) -> AggregateOutcome:
    """Build the default sources over one shared client and aggregate."""

    isolate = settings.isolate_source_failures if isolate_failures is None else isolate_failures
    async with build_async_client(settings, transport=transport) as client:
        retrieval = BoundedRetrievalClient.from_settings(client, settings)
        return await aggregate(
            locations,
            structured_source=StructuredSource(retrieval),
            embedded_source=EmbeddedSource(retrieval),
            isolate_failures=isolate,
        )


async def run_feed(
    *,
    settings: AppSettings,
    bundle: str | None = None,
    affiliate_id: str | None = None,
    query: str | Mapping[str, str] | None = None,
    renderer: Renderer | None = None,
    region_loader: RegionMapLoader | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    isolate_failures: bool | None = None,
) -> FeedResult:
    """Run one full retrieval cycle and hand the result to `renderer`.

    Never raises `FeedError`: a failed cycle is logged and reported through
    `FeedResult.error` with zero records. The renderer is always called so
    presentation layers can clear their loading state.
    """

    set_run_id()
    try:
        result = await _run_cycle(
            settings=settings,
            bundle=bundle,
            affiliate_id=affiliate_id,
            query=query,
            transport=transport,
            isolate_failures=isolate_failures,
        )
        if renderer is not None:
            loader = region_loader or (lambda: load_region_map_async(settings.region_map_path))
            try:
                region_map = await loader()
            except FeedError as exc:
                logger.warning("region_map_unavailable", error=exc.error_name, message=exc.message)
                region_map = {}
            renderer.render(result, region_map)
        return result
    finally:
        clear_run_id()


async def _run_cycle(
    *,
    settings: AppSettings,
    bundle: str | None,
    affiliate_id: str | None,
    query: str | Mapping[str, str] | None,
    transport: httpx.AsyncBaseTransport | None,
    isolate_failures: bool | None,
) -> FeedResult:
    aff = resolve_affiliate(affiliate_id, query, settings.default_affiliate)
    promotion_url = build_promotion_url(settings.promotion_url_template, aff)

    locations = SourceLocations()
    outcome = AggregateOutcome()
    error: str | None = None
    try:
        raw_bundle = bundle or settings.sources_bundle
        if not raw_bundle:
            raise ConfigurationError(
                "No sources bundle configured (set ACCTFEED_SOURCES_BUNDLE or pass one).",
                code=ErrorCode.CONFIG_MISSING,
            )
        locations = decode_locations(raw_bundle)
        logger.info(
            "locations_decoded",
            structured=len(locations.structured),
            embedded=len(locations.embedded),
        )
        outcome = await collect_records(
            settings=settings,
            locations=locations,
            transport=transport,
            isolate_failures=isolate_failures,
        )
    except AggregationFailure as exc:
        logger.error("feed_cycle_failed", error=exc.error_name, message=exc.message)
        error = str(exc)
        outcome = AggregateOutcome(failures=exc.failures)
    except FeedError as exc:
        logger.error("feed_cycle_failed", error=exc.error_name, message=exc.message)
        error = str(exc)

    return FeedResult(
        records=outcome.records,
        affiliate_id=aff,
        promotion_url=promotion_url,
        locations=locations,
        failures=outcome.failures,
        error=error,
    )
