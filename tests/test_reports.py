"""Tests for ReportService: summary, reminders and CSV export."""

import io
from datetime import date, datetime, timezone

import pandas as pd
import pytest

from covera.repositories.contract import ContractRepository
from covera.repositories.vendor import VendorRepository
from covera.schemas.contract import Contract
from covera.schemas.vendor import Vendor
from covera.services.reports import ReportService, reminder_bucket
from covera.services.status import ComplianceStatus

ORG = "test-org"
TODAY = date(2025, 6, 1)
NOW = datetime(2025, 5, 1, tzinfo=timezone.utc)


@pytest.fixture
async def seeded(session):
    vendors = VendorRepository(session, ORG)
    for vendor_id, name, expiry in (
        ("v1", "Alpha Electric", "2025-06-02"),   # 1 day
        ("v2", "Bravo HVAC", "2025-06-08"),       # 7 days
        ("v3", "Charlie Roofing", "2025-06-20"),  # 19 days
        ("v4", "Delta Cleaning", "2025-09-01"),   # compliant
        ("v5", "Echo Security", "2025-05-01"),    # expired
        ("v6", "Foxtrot Paving", None),
    ):
        # stored status is deliberately wrong; reports must recompute it
        await vendors.save(Vendor(
            id=vendor_id,
            name=name,
            email=f"{vendor_id}@example.com",
            insurance_expiry=expiry,
            status=ComplianceStatus.COMPLIANT,
            created_at=NOW,
            updated_at=NOW,
        ))
    contracts = ContractRepository(session, ORG)
    for contract_id, end_date in (("c1", "2025-07-15"), ("c2", "2026-01-01")):
        await contracts.save(Contract(id=contract_id, end_date=end_date, created_at=NOW, updated_at=NOW))
    return ReportService(session, ORG)


class TestReminderBuckets:
    @pytest.mark.parametrize("days, expected", [
        (0, "1-day"), (1, "1-day"), (2, "7-day"), (7, "7-day"), (8, "14-day"),
        (14, "14-day"), (15, "30-day"), (30, "30-day"), (31, None), (-1, None), (None, None),
    ])
    def test_bucket(self, days, expected):
        assert reminder_bucket(days) == expected


class TestReports:
    async def test_summary_uses_recomputed_status(self, seeded):
        summary = await seeded.compliance_summary(today=TODAY)

        assert summary.vendors.total == 6
        assert summary.vendors.compliant == 1
        assert summary.vendors.at_risk == 3
        assert summary.vendors.non_compliant == 2
        assert summary.contracts.at_risk == 1
        assert summary.contracts.compliant == 1
        assert summary.compliance_rate == pytest.approx(16.7)

    async def test_summary_with_no_vendors(self, session):
        summary = await ReportService(session, ORG).compliance_summary(today=TODAY)
        assert summary.compliance_rate == 0.0
        assert summary.vendors.total == 0

    async def test_upcoming_reminders(self, seeded):
        reminders = await seeded.upcoming_reminders(today=TODAY)

        assert [(r.vendor_name, r.reminder, r.days_until_expiry) for r in reminders] == [
            ("Alpha Electric", "1-day", 1),
            ("Bravo HVAC", "7-day", 7),
            ("Charlie Roofing", "30-day", 19),
        ]

    async def test_upcoming_reminders_limit(self, seeded):
        assert len(await seeded.upcoming_reminders(limit=2, today=TODAY)) == 2

    async def test_vendor_csv(self, seeded):
        df = pd.read_csv(io.StringIO(await seeded.vendor_csv(today=TODAY)), keep_default_na=False)

        assert list(df.columns) == [
            "Vendor Name", "Contact Name", "Email", "Phone", "Category", "Status", "Insurance Expiry",
        ]
        rows = df.set_index("Vendor Name")
        assert rows.loc["Echo Security", "Status"] == "Non-Compliant"
        assert rows.loc["Alpha Electric", "Status"] == "At Risk"
        assert rows.loc["Delta Cleaning", "Status"] == "Compliant"
        assert rows.loc["Foxtrot Paving", "Insurance Expiry"] == ""

    async def test_vendor_csv_empty(self, session):
        csv_text = await ReportService(session, ORG).vendor_csv(today=TODAY)
        assert csv_text.strip() == "Vendor Name,Contact Name,Email,Phone,Category,Status,Insurance Expiry"
