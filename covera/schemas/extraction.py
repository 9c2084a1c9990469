"""Schemas for AI document extraction results and upload responses."""


from typing import Any, Literal

from pydantic import Field

from covera.schemas.common import CamelModel
from covera.schemas.contract import Contract, Party
from covera.schemas.vendor import InsurancePolicy, Vendor, VendorDocument
from covera.services.status import ComplianceStatus

DocumentKind = Literal["insurance", "contract"]

class InsurancePatch(CamelModel):
    """Normalized insurance fields ready to merge into a vendor record."""

    insurance_expiry: str | None = None
    status: ComplianceStatus = ComplianceStatus.NON_COMPLIANT
    insurance_policies: list[InsurancePolicy] = Field(default_factory=list)
    insured_name: str | None = None
    certificate_holder: str | None = None

class ContractPatch(CamelModel):
    """Normalized contract fields; ``value`` stays numeric until storage."""

    contract_type: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    value: int | float | None = None
    auto_renewal: bool | None = None
    parties: list[Party] = Field(default_factory=list)
    description: str | None = None
    status: ComplianceStatus = ComplianceStatus.NON_COMPLIANT

class AnalyzeResponse(CamelModel):
    kind: DocumentKind
    extracted_data: dict[str, Any]
    normalized: InsurancePatch | ContractPatch

class VendorUploadResponse(CamelModel):
    document: VendorDocument
    extracted_data: dict[str, Any] | None = None
    vendor: Vendor
    updated_status: ComplianceStatus
    message: str

class ContractUploadResponse(CamelModel):
    contract: Contract
    extracted_data: dict[str, Any] | None = None
    message: str

class DocumentDeleteResponse(CamelModel):
    vendor: Vendor
    policies_cleared: bool
