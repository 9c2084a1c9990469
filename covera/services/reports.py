"""Compliance reporting: dashboard summary, upcoming reminders, CSV export.

Every figure is computed from statuses recomputed at call time, never from
the status stored on a record.
"""


import logging
from datetime import date

import pandas as pd
from sqlalchemy.ext.asyncio import AsyncSession

from covera.repositories.contract import ContractRepository
from covera.repositories.vendor import VendorRepository
from covera.schemas.report import ComplianceSummary, StatusBreakdown, UpcomingReminder
from covera.services.contract import refresh_contract
from covera.services.status import INSURANCE_THRESHOLD_DAYS, ComplianceStatus, days_until_expiry
from covera.services.vendor import refresh_vendor

logger = logging.getLogger(__name__)

# Upper bound (inclusive) of each reminder window, soonest first
REMINDER_BUCKETS: list[tuple[int, str]] = [
    (1, "1-day"),
    (7, "7-day"),
    (14, "14-day"),
    (INSURANCE_THRESHOLD_DAYS, "30-day"),
]

VENDOR_CSV_COLUMNS: dict[str, str] = {
    "name": "Vendor Name",
    "contact_name": "Contact Name",
    "email": "Email",
    "phone": "Phone",
    "category": "Category",
    "status": "Status",
    "insurance_expiry": "Insurance Expiry",
}

STATUS_LABELS: dict[ComplianceStatus, str] = {
    ComplianceStatus.COMPLIANT: "Compliant",
    ComplianceStatus.AT_RISK: "At Risk",
    ComplianceStatus.NON_COMPLIANT: "Non-Compliant",
}


def reminder_bucket(days: int | None) -> str | None:
    if days is None or days < 0:
        return None
    for upper, label in REMINDER_BUCKETS:
        if days <= upper:
            return label
    return None


def _breakdown(statuses: list[ComplianceStatus]) -> StatusBreakdown:
    return StatusBreakdown(
        total=len(statuses),
        compliant=statuses.count(ComplianceStatus.COMPLIANT),
        at_risk=statuses.count(ComplianceStatus.AT_RISK),
        non_compliant=statuses.count(ComplianceStatus.NON_COMPLIANT),
    )


class ReportService:
    def __init__(self, session: AsyncSession, org_id: str):
        self._vendors = VendorRepository(session, org_id)
        self._contracts = ContractRepository(session, org_id)

    async def compliance_summary(self, today: date | None = None) -> ComplianceSummary:
        vendors = [refresh_vendor(v, today).status for v in await self._vendors.list()]
        contracts = [refresh_contract(c, today).status for c in await self._contracts.list()]
        vendor_breakdown = _breakdown(vendors)
        rate = (
            round(vendor_breakdown.compliant / vendor_breakdown.total * 100, 1)
            if vendor_breakdown.total else 0.0
        )
        return ComplianceSummary(
            vendors=vendor_breakdown,
            contracts=_breakdown(contracts),
            compliance_rate=rate,
        )

    async def upcoming_reminders(
        self, limit: int = 5, today: date | None = None,
    ) -> list[UpcomingReminder]:
        """Vendors whose insurance expires within the next 30 days, soonest first."""
        reminders: list[UpcomingReminder] = []
        for vendor in await self._vendors.list():
            days = days_until_expiry(vendor.insurance_expiry, today)
            bucket = reminder_bucket(days)
            if bucket is None:
                continue
            reminders.append(UpcomingReminder(
                vendor_id=vendor.id,
                vendor_name=vendor.name,
                insurance_expiry=vendor.insurance_expiry,
                days_until_expiry=days,
                reminder=bucket,
            ))
        reminders.sort(key=lambda r: (r.days_until_expiry, r.vendor_name))
        return reminders[:limit]

    async def vendor_csv(self, today: date | None = None) -> str:
        rows = []
        for vendor in await self._vendors.list():
            vendor = refresh_vendor(vendor, today)
            row = vendor.model_dump(include=set(VENDOR_CSV_COLUMNS))
            row["status"] = STATUS_LABELS[vendor.status]
            rows.append(row)

        df = pd.DataFrame(rows, columns=list(VENDOR_CSV_COLUMNS))
        df = df.rename(columns=VENDOR_CSV_COLUMNS).fillna("")
        logger.info("Exporting %d vendors to CSV", len(df))
        return df.to_csv(index=False)
