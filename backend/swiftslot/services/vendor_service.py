"""Vendor catalogue reads."""

from typing import List

from sqlalchemy.orm import Session

from ..core.exceptions import NotFoundException, RepositoryException, ServiceException
from ..models.vendor import Vendor
from ..repositories.factory import RepositoryFactory
from ..schemas.vendor import VendorResponse
from .base import BaseService


class VendorService(BaseService):
    """Read-only access to vendors for the booking UI."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.repository = RepositoryFactory.create_vendor_repository(db)

    @BaseService.measure_operation("list_vendors")
    def list_vendors(self) -> List[VendorResponse]:
        """Return every vendor ordered by name."""
        try:
            vendors = self.repository.list_ordered_by_name()
        except RepositoryException as exc:
            self.logger.error(f"Error fetching vendors: {exc}")
            raise ServiceException("Failed to fetch vendors") from exc
        return [VendorResponse.model_validate(vendor) for vendor in vendors]

    def get_vendor_or_404(self, vendor_id: str) -> Vendor:
        try:
            vendor = self.repository.get_by_id(vendor_id, load_relationships=False)
        except RepositoryException as exc:
            self.logger.error(f"Error fetching vendor {vendor_id}: {exc}")
            raise ServiceException("Failed to fetch vendor") from exc
        if vendor is None:
            raise NotFoundException("Vendor not found", code="VENDOR_NOT_FOUND")
        return vendor
