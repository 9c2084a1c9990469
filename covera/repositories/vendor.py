"""Vendor repository — ``vendor:{org_id}:{vendor_id}``."""


from covera.repositories.base import RecordRepository
from covera.schemas.vendor import Vendor


class VendorRepository(RecordRepository[Vendor]):
    namespace = "vendor"
    model = Vendor
