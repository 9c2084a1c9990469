"""Vendor Pydantic schemas (stored record, request DTOs)."""


from datetime import datetime
from typing import Literal

from pydantic import Field

from covera.schemas.common import CamelModel, KeyedRecord
from covera.services.status import ComplianceStatus

class InsurancePolicy(CamelModel):
    type: str | None = None
    carrier: str | None = None
    policy_number: str | None = None
    coverage_limit: int | None = None
    expiry_date: str | None = None
    status: ComplianceStatus = ComplianceStatus.NON_COMPLIANT

class VendorDocument(CamelModel):
    """Reference to an externally stored blob; the bytes are never kept here."""

    name: str
    type: Literal["PDF", "Image"] = "PDF"
    size: str | None = None
    uploaded_at: datetime
    path: str
    url: str | None = None

class Vendor(KeyedRecord):
    """Vendor record as stored in the KV store and returned to callers.

    ``status`` and each policy's ``status`` are derived; services recompute
    them on every read.
    """

    name: str
    email: str | None = None
    phone: str | None = None
    category: str | None = None
    contact_name: str | None = None
    insurance_expiry: str | None = None
    status: ComplianceStatus = ComplianceStatus.NON_COMPLIANT
    insurance_policies: list[InsurancePolicy] = Field(default_factory=list)
    documents: list[VendorDocument] = Field(default_factory=list)
    notes: str | None = None
    updated_at: datetime

class PolicyInput(CamelModel):
    type: str | None = None
    carrier: str | None = None
    policy_number: str | None = None
    coverage_limit: int | float | str | None = None  # "$1,000,000" accepted
    expiry_date: str | None = None

class VendorCreate(CamelModel):
    name: str = Field(min_length=1)
    email: str | None = None
    phone: str | None = None
    category: str | None = None
    contact_name: str | None = None
    insurance_expiry: str | None = None
    insurance_policies: list[PolicyInput] = Field(default_factory=list)
    notes: str | None = None

class VendorUpdate(CamelModel):
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    category: str | None = None
    contact_name: str | None = None
    insurance_expiry: str | None = None
    insurance_policies: list[PolicyInput] | None = None
    notes: str | None = None
