"""Tests for core/domain/models.py."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from core.domain.models import AccountRecord, SourceBatch
from payloads import batch_payload, record_payload


class TestAccountRecord:
    def test_reads_wire_names(self) -> None:
        record = AccountRecord.model_validate(record_payload("u1", "p1", country="Japan"))
        assert record.identifier == "u1"
        assert record.secret == "p1"
        assert record.region_code == "Japan"
        assert record.observed_at == datetime(2026, 10, 18, 10, 0, tzinfo=timezone.utc)
        assert record.validity_flag == 1
        assert record.is_valid

    def test_accepts_field_names(self) -> None:
        record = AccountRecord(
            identifier="u1",
            secret="p1",
            observed_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
            validity_flag=0,
        )
        assert record.region_code is None
        assert not record.is_valid

    def test_ignores_unknown_fields(self) -> None:
        payload = {**record_payload("u1", "p1"), "extra": "x"}
        assert AccountRecord.model_validate(payload).identifier == "u1"

    def test_is_immutable(self) -> None:
        record = AccountRecord.model_validate(record_payload("u1", "p1"))
        with pytest.raises(ValidationError):
            record.secret = "other"  # type: ignore[misc]

    def test_missing_secret_is_invalid(self) -> None:
        payload = record_payload("u1", "p1")
        del payload["password"]
        with pytest.raises(ValidationError):
            AccountRecord.model_validate(payload)

    @pytest.mark.parametrize("status", ["1", True, 1.5])
    def test_status_must_be_an_integer(self, status: object) -> None:
        payload = {**record_payload("u1", "p1"), "status": status}
        with pytest.raises(ValidationError):
            AccountRecord.model_validate(payload)


class TestSourceBatch:
    def test_usable_when_ok_with_records(self) -> None:
        batch = SourceBatch.model_validate(batch_payload(record_payload("u1", "p1")))
        assert batch.usable
        assert batch.records is not None and len(batch.records) == 1

    def test_not_usable_when_flag_differs(self) -> None:
        batch = SourceBatch.model_validate(batch_payload(record_payload("u1", "p1"), status="error"))
        assert not batch.usable
        assert batch.records is None

    def test_not_usable_without_records(self) -> None:
        batch = SourceBatch.model_validate({"status": "ok"})
        assert batch.records is None
        assert not batch.usable

    def test_empty_records_still_usable(self) -> None:
        assert SourceBatch.model_validate(batch_payload()).usable

    @pytest.mark.parametrize(
        "payload",
        [
            {"status": 0, "data": None},
            {"status": None, "data": []},
            {"status": ["ok"], "data": []},
            {"status": "error", "data": "rate limited"},
            {"status": "error", "data": {"message": "down"}},
            {"data": []},
        ],
    )
    def test_unusable_envelopes_are_dropped_not_rejected(self, payload: dict) -> None:
        batch = SourceBatch.model_validate(payload)
        assert not batch.usable
        assert batch.records is None

    def test_non_displayable_records_are_not_validated(self) -> None:
        payload = batch_payload(
            record_payload("u1", "p1"),
            {"username": "u2", "status": 0},
            {"status": "1"},
            {"status": True},
            "garbage",
        )
        batch = SourceBatch.model_validate(payload)

        assert batch.usable
        assert [r.identifier for r in batch.records or []] == ["u1"]

    def test_incomplete_displayable_record_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SourceBatch.model_validate(batch_payload({"username": "u1", "status": 1}))

    def test_ok_batch_with_non_list_records_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SourceBatch.model_validate({"status": "ok", "data": "rate limited"})
