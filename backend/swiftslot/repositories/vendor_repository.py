"""Repository for vendor lookups."""

from typing import List

from sqlalchemy.orm import Session

from ..models.vendor import Vendor
from .base_repository import BaseRepository


class VendorRepository(BaseRepository[Vendor]):
    """Vendor data access; vendors are read-only for the booking engine."""

    def __init__(self, db: Session) -> None:
        super().__init__(db, Vendor)

    def list_ordered_by_name(self) -> List[Vendor]:
        query = self._build_query().order_by(Vendor.name.asc(), Vendor.id.asc())
        return self._execute_query(query)
