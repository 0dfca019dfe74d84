"""Repository helpers for the idempotency ledger."""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy.orm import Session

from ..models.idempotency import IdempotencyRecord
from .base_repository import BaseRepository


class IdempotencyRepository(BaseRepository[IdempotencyRecord]):
    """Ledger rows are unique on (key, scope) and never updated."""

    def __init__(self, db: Session) -> None:
        super().__init__(db, IdempotencyRecord)

    def find(self, key: str, scope: str) -> Optional[IdempotencyRecord]:
        return self.find_one_by(key=key, scope=scope)

    def record(
        self, *, key: str, scope: str, request_hash: str, response_data: dict[str, Any]
    ) -> IdempotencyRecord:
        """
        Insert a ledger row (flushed, not committed).

        Raises:
            IntegrityError: if another request already recorded ``(key, scope)``
        """
        return self.create(
            key=key,
            scope=scope,
            request_hash=request_hash,
            response_data=response_data,
        )
