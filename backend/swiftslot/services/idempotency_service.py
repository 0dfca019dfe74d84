"""Database-backed idempotency ledger for booking and webhook writes."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
import hashlib
import json
from typing import Any, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import IdempotencyKeyReuseException
from ..models.idempotency import IdempotencyRecord
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .timezone_service import TimezoneService


def _canonical_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return TimezoneService.ensure_utc(value).isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def canonical_hash(payload: dict[str, Any]) -> str:
    """SHA-256 of ``payload`` as sorted-key JSON with UTC ISO-8601 instants."""
    encoded = json.dumps(
        payload, sort_keys=True, separators=(",", ":"), default=_canonical_default
    )
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()


class IdempotencyService(BaseService):
    """
    Remembers the first response produced for a client key within a scope.

    The ledger row is staged inside the caller's transaction, so it commits
    (or rolls back) together with the effect it describes.
    """

    def __init__(self, db: Session):
        super().__init__(db)
        self.repository = RepositoryFactory.create_idempotency_repository(db)

    def lookup(
        self, key: str, scope: str, request_payload: dict[str, Any]
    ) -> Optional[dict[str, Any]]:
        """
        Return the stored response for ``(key, scope)``, or None if unseen.

        Raises:
            IdempotencyKeyReuseException: if the key was recorded with a different payload
        """
        record = self.repository.find(key, scope)
        if record is None:
            return None
        return self._replay(record, key, scope, canonical_hash(request_payload))

    def stage_record(
        self,
        key: str,
        scope: str,
        request_payload: dict[str, Any],
        response_data: dict[str, Any],
    ) -> IdempotencyRecord:
        """
        Add a ledger row to the current transaction (flushed, not committed).

        Raises:
            IntegrityError: if a concurrent request already recorded ``(key, scope)``
        """
        return self.repository.record(
            key=key,
            scope=scope,
            request_hash=canonical_hash(request_payload),
            response_data=response_data,
        )

    def _replay(
        self, record: IdempotencyRecord, key: str, scope: str, request_hash: str
    ) -> dict[str, Any]:
        if record.request_hash != request_hash:
            self.logger.warning(f"Idempotency key reused with different payload: {scope}/{key}")
            raise IdempotencyKeyReuseException(key, scope)
        self.logger.info(f"Replaying stored response for {scope}/{key}")
        return dict(record.response_data)
