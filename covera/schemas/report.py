"""Report and reminder schemas."""


from covera.schemas.common import CamelModel

class StatusBreakdown(CamelModel):
    total: int = 0
    compliant: int = 0
    at_risk: int = 0
    non_compliant: int = 0

class ComplianceSummary(CamelModel):
    vendors: StatusBreakdown
    contracts: StatusBreakdown
    compliance_rate: float  # percent of compliant vendors, 0.0 when there are none

class UpcomingReminder(CamelModel):
    vendor_id: str
    vendor_name: str
    insurance_expiry: str
    days_until_expiry: int
    reminder: str  # "1-day" | "7-day" | "14-day" | "30-day"
