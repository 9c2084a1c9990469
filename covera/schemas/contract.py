"""Contract Pydantic schemas (stored record, request DTOs)."""


from datetime import datetime
from typing import Literal

from pydantic import Field

from covera.schemas.common import CamelModel, KeyedRecord
from covera.services.status import ComplianceStatus

# Sub-list statuses are set by people (or the AI) and never recomputed.

class Party(CamelModel):
    name: str | None = None
    role: str | None = None

class Milestone(CamelModel):
    id: str
    title: str
    due_date: str | None = None
    status: Literal["pending", "completed", "overdue"] = "pending"

class Deliverable(CamelModel):
    id: str
    title: str
    due_date: str | None = None
    status: Literal["pending", "in_progress", "completed"] = "pending"

class ServiceLevel(CamelModel):
    id: str
    metric: str
    target: str | None = None
    actual: str | None = None
    status: Literal["compliant", "breached", "warning"] = "compliant"

class Contract(KeyedRecord):
    """Contract record. ``value`` is the display string (``"$50,000"``)."""

    vendor_id: str | None = None
    vendor_name: str | None = None
    contract_type: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    value: str | None = None
    auto_renewal: bool | None = None
    parties: list[Party] = Field(default_factory=list)
    description: str | None = None
    status: ComplianceStatus = ComplianceStatus.NON_COMPLIANT
    milestones: list[Milestone] = Field(default_factory=list)
    deliverables: list[Deliverable] = Field(default_factory=list)
    slas: list[ServiceLevel] = Field(default_factory=list)
    document_name: str | None = None
    document_type: Literal["PDF", "Image"] | None = None
    document_size: str | None = None
    document_path: str | None = None
    last_reviewed: str | None = None
    updated_at: datetime

class ContractCreate(CamelModel):
    vendor_id: str | None = None
    vendor_name: str | None = None
    contract_type: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    value: str | int | float | None = None
    auto_renewal: bool | None = None
    parties: list[Party] = Field(default_factory=list)
    description: str | None = None
    milestones: list[Milestone] = Field(default_factory=list)
    deliverables: list[Deliverable] = Field(default_factory=list)
    slas: list[ServiceLevel] = Field(default_factory=list)

class ContractUpdate(CamelModel):
    vendor_id: str | None = None
    vendor_name: str | None = None
    contract_type: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    value: str | int | float | None = None
    auto_renewal: bool | None = None
    parties: list[Party] | None = None
    description: str | None = None
    milestones: list[Milestone] | None = None
    deliverables: list[Deliverable] | None = None
    slas: list[ServiceLevel] | None = None
    last_reviewed: str | None = None
