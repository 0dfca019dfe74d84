"""Tests for the database-backed idempotency ledger."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from swiftslot.core.exceptions import IdempotencyKeyReuseException
from swiftslot.models import IdempotencyRecord
from swiftslot.services.idempotency_service import IdempotencyService, canonical_hash


class TestCanonicalHash:
    def test_key_order_does_not_matter(self):
        assert canonical_hash({"a": 1, "b": 2}) == canonical_hash({"b": 2, "a": 1})

    def test_instants_are_compared_in_utc(self):
        utc_value = datetime(2025, 3, 10, 8, 0, tzinfo=timezone.utc)
        lagos_value = utc_value.astimezone(timezone(timedelta(hours=1)))

        assert canonical_hash({"start": utc_value}) == canonical_hash({"start": lagos_value})

    def test_different_payloads_hash_differently(self):
        assert canonical_hash({"vendor_id": "a"}) != canonical_hash({"vendor_id": "b"})

    def test_hash_is_sha256_hex(self):
        digest = canonical_hash({"x": 1})
        assert len(digest) == 64
        int(digest, 16)


class TestIdempotencyService:
    def test_lookup_of_unknown_key_returns_none(self, db):
        service = IdempotencyService(db)
        assert service.lookup("missing", "booking", {"x": 1}) is None

    def test_recorded_response_is_replayed(self, db):
        service = IdempotencyService(db)
        service.stage_record("key-1", "booking", {"x": 1}, {"id": "B1", "status": "pending"})
        db.commit()

        assert service.lookup("key-1", "booking", {"x": 1}) == {"id": "B1", "status": "pending"}

    def test_key_reuse_with_different_payload_is_rejected(self, db):
        service = IdempotencyService(db)
        service.stage_record("key-1", "booking", {"x": 1}, {"id": "B1"})
        db.commit()

        with pytest.raises(IdempotencyKeyReuseException) as exc_info:
            service.lookup("key-1", "booking", {"x": 2})
        assert exc_info.value.status_code == 400
        assert exc_info.value.code == "IDEMPOTENCY_KEY_REUSE"

    def test_scopes_are_independent(self, db):
        service = IdempotencyService(db)
        service.stage_record("shared", "booking", {"x": 1}, {"kind": "booking"})
        service.stage_record("shared", "webhook", {"x": 2}, {"kind": "webhook"})
        db.commit()

        assert service.lookup("shared", "booking", {"x": 1}) == {"kind": "booking"}
        assert service.lookup("shared", "webhook", {"x": 2}) == {"kind": "webhook"}

    def test_duplicate_key_in_scope_violates_unique_constraint(self, db):
        service = IdempotencyService(db)
        service.stage_record("key-1", "booking", {"x": 1}, {"id": "B1"})
        db.commit()

        with pytest.raises(IntegrityError):
            service.stage_record("key-1", "booking", {"x": 1}, {"id": "B2"})
        db.rollback()

        assert db.query(IdempotencyRecord).count() == 1
