"""Tests for compliance status derivation."""

from datetime import date, datetime, timedelta

import pytest

from covera.services.status import (
    CONTRACT_THRESHOLD_DAYS,
    INSURANCE_THRESHOLD_DAYS,
    ComplianceStatus,
    classify,
    contract_status,
    days_until_expiry,
    insurance_status,
    parse_expiry,
)

TODAY = date(2025, 6, 1)


def _in(days: int) -> str:
    return (TODAY + timedelta(days=days)).isoformat()


class TestParseExpiry:
    def test_iso_date(self):
        assert parse_expiry("2025-07-01") == date(2025, 7, 1)

    def test_iso_datetime_with_z_suffix(self):
        assert parse_expiry("2025-07-01T12:30:00Z") == date(2025, 7, 1)

    def test_date_and_datetime_objects(self):
        assert parse_expiry(date(2025, 7, 1)) == date(2025, 7, 1)
        assert parse_expiry(datetime(2025, 7, 1, 23, 59)) == date(2025, 7, 1)

    @pytest.mark.parametrize("value", [None, "", "   ", "Invalid Date", "not-a-date", "07/01/2025", "2025-13-01", 20250701])
    def test_unparseable_returns_none(self, value):
        assert parse_expiry(value) is None


class TestClassify:
    @pytest.mark.parametrize("value", [None, "Invalid Date", "not-a-date"])
    @pytest.mark.parametrize("threshold", [0, 30, 60])
    def test_missing_or_malformed_is_non_compliant(self, value, threshold):
        assert classify(value, threshold, TODAY) == ComplianceStatus.NON_COMPLIANT

    def test_boundaries(self):
        assert classify(_in(-1), 30, TODAY) == ComplianceStatus.NON_COMPLIANT
        assert classify(_in(0), 30, TODAY) == ComplianceStatus.AT_RISK
        assert classify(_in(30), 30, TODAY) == ComplianceStatus.AT_RISK
        assert classify(_in(31), 30, TODAY) == ComplianceStatus.COMPLIANT

    def test_threshold_changes_result_for_same_date(self):
        expiry = _in(45)
        assert classify(expiry, 30, TODAY) == ComplianceStatus.COMPLIANT
        assert classify(expiry, 60, TODAY) == ComplianceStatus.AT_RISK

    def test_days_until_expiry(self):
        assert days_until_expiry("2025-07-01", TODAY) == 30
        assert days_until_expiry("2025-05-31", TODAY) == -1
        assert days_until_expiry(None, TODAY) is None


class TestPolicyWrappers:
    def test_thresholds(self):
        assert INSURANCE_THRESHOLD_DAYS == 30
        assert CONTRACT_THRESHOLD_DAYS == 60

    def test_insurance_uses_30_days(self):
        assert insurance_status(_in(30), TODAY) == ComplianceStatus.AT_RISK
        assert insurance_status(_in(31), TODAY) == ComplianceStatus.COMPLIANT

    def test_contract_uses_60_days(self):
        assert contract_status(_in(60), TODAY) == ComplianceStatus.AT_RISK
        assert contract_status(_in(61), TODAY) == ComplianceStatus.COMPLIANT
        assert contract_status(_in(-5), TODAY) == ComplianceStatus.NON_COMPLIANT

    def test_status_values_on_the_wire(self):
        assert [s.value for s in ComplianceStatus] == ["compliant", "at-risk", "non-compliant"]
