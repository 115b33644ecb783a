"""Tests for the JSON/HTML exporters and file renderers."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Mapping

from bs4 import BeautifulSoup

from adapters.json_exporter import export_feed_json
from adapters.renderers import CompositeRenderer, HtmlFileRenderer, JsonFileRenderer
from adapters.report_exporter import minutes_since, region_tag, render_feed_html
from core.domain.models import AccountRecord, FeedResult
from payloads import record_payload

NOW = datetime(2026, 10, 18, 10, 30, tzinfo=timezone.utc)


def _result(**overrides: object) -> FeedResult:
    values: dict[str, object] = {
        "records": [
            AccountRecord.model_validate(record_payload("alice@example.test", "s3cret", country="US")),
            AccountRecord.model_validate(record_payload("bob@example.test", "<b>pw</b>", country=None)),
        ],
        "affiliate_id": "42",
    }
    values.update(overrides)
    return FeedResult(**values)


class TestMinutesSince:
    def test_whole_minutes(self) -> None:
        assert minutes_since(NOW - timedelta(minutes=30, seconds=59), NOW) == 30

    def test_naive_timestamp_is_utc(self) -> None:
        assert minutes_since(datetime(2026, 10, 18, 10, 0), NOW) == 30

    def test_never_negative(self) -> None:
        assert minutes_since(NOW + timedelta(minutes=5), NOW) == 0


class TestRegionTag:
    def test_known_and_unknown(self) -> None:
        record = AccountRecord.model_validate(record_payload("u", "p", country="US"))
        assert region_tag(record, {"US": "us"}) == "us"
        assert region_tag(record, {}) == "un"

    def test_missing_region(self) -> None:
        record = AccountRecord.model_validate(record_payload("u", "p", country=None))
        assert region_tag(record, {"US": "us"}) == "un"


class TestRenderFeedHtml:
    def test_one_card_per_record(self) -> None:
        html = render_feed_html(result=_result(), region_map={"US": "us"}, now=NOW)
        soup = BeautifulSoup(html, "html.parser")

        cards = soup.select(".account-card")
        assert [c.select_one(".card-title").get_text() for c in cards] == [
            "alice@example.test",
            "bob@example.test",
        ]
        assert "fi-us" in cards[0].select_one(".fi")["class"]
        assert "fi-un" in cards[1].select_one(".fi")["class"]
        assert cards[0].select_one("code").get_text() == "30 min ago"

    def test_escapes_record_content(self) -> None:
        html = render_feed_html(result=_result(), region_map={}, now=NOW)
        assert "<b>pw</b>" not in html
        assert "&lt;b&gt;pw&lt;/b&gt;" in html

    def test_promotion_link(self) -> None:
        html = render_feed_html(
            result=_result(promotion_url="https://promo.test/r?aff=42"), region_map={}, now=NOW
        )
        link = BeautifulSoup(html, "html.parser").select_one("a.promotion")
        assert link is not None
        assert link["href"] == "https://promo.test/r?aff=42"

    def test_failed_cycle_shows_notice(self) -> None:
        html = render_feed_html(result=_result(records=[], error="boom"), region_map={}, now=NOW)
        soup = BeautifulSoup(html, "html.parser")
        assert soup.select(".account-card") == []
        assert soup.select_one(".alert-warning") is not None


class TestExportFeedJson:
    def test_writes_stable_json(self, tmp_path: Path) -> None:
        out = export_feed_json(result=_result(), output_path=tmp_path / "out" / "feed.json")

        data = json.loads(out.read_text(encoding="utf-8"))
        assert data["affiliate_id"] == "42"
        assert [r["identifier"] for r in data["records"]] == ["alice@example.test", "bob@example.test"]
        assert data["error"] is None


class _Recorder:
    def __init__(self, calls: list[str], name: str) -> None:
        self.calls = calls
        self.name = name

    def render(self, result: FeedResult, region_map: Mapping[str, str]) -> None:
        self.calls.append(self.name)


class TestRenderers:
    def test_file_renderers_write(self, tmp_path: Path) -> None:
        json_path = tmp_path / "feed.json"
        html_path = tmp_path / "feed.html"

        CompositeRenderer(JsonFileRenderer(json_path), HtmlFileRenderer(html_path)).render(_result(), {"US": "us"})

        assert json_path.exists()
        assert "alice@example.test" in html_path.read_text(encoding="utf-8")

    def test_composite_keeps_order(self) -> None:
        calls: list[str] = []
        CompositeRenderer(_Recorder(calls, "a"), _Recorder(calls, "b")).render(_result(), {})
        assert calls == ["a", "b"]
