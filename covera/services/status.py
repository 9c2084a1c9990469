"""Compliance status derivation — the only place date math for status lives.

A record's status is never stored authoritatively: every consumer (vendor
and contract services, reports, reminders, CSV export) calls into this module
each time a record is returned, because "today" moves and a cached status
goes stale overnight.

Rules:
  * no parseable expiry                  -> non-compliant
  * expired (days < 0)                   -> non-compliant
  * 0 <= days <= threshold               -> at-risk
  * days > threshold                     -> compliant

Thresholds are policy, not defaults: insurance uses 30 days, contracts 60.
A new document type must pick its own threshold explicitly.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from enum import Enum

__all__ = [
    "ComplianceStatus",
    "INSURANCE_THRESHOLD_DAYS",
    "CONTRACT_THRESHOLD_DAYS",
    "parse_expiry",
    "days_until_expiry",
    "classify",
    "insurance_status",
    "contract_status",
]

INSURANCE_THRESHOLD_DAYS = 30
CONTRACT_THRESHOLD_DAYS = 60

INVALID_DATE_SENTINEL = "Invalid Date"

_ISO_DATE_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}")


class ComplianceStatus(str, Enum):
    COMPLIANT = "compliant"
    AT_RISK = "at-risk"
    NON_COMPLIANT = "non-compliant"


def parse_expiry(value: object) -> date | None:
    """Coerce a stored expiry into a calendar date, or ``None``.

    Accepts ``date``/``datetime`` objects, ``YYYY-MM-DD`` strings and ISO
    datetime strings (``Z`` suffix allowed). Never raises.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text or text == INVALID_DATE_SENTINEL or not _ISO_DATE_PREFIX.match(text):
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def days_until_expiry(value: object, today: date | None = None) -> int | None:
    """Whole days from *today* (local midnight) to the expiry date (local midnight)."""
    expiry = parse_expiry(value)
    if expiry is None:
        return None
    ref = today or date.today()
    return (expiry - ref).days


def classify(
    expiry: object, threshold_days: int, today: date | None = None,
) -> ComplianceStatus:
    """Map an expiry (or its absence) to a compliance status.

    Missing or malformed input is classified ``non-compliant``: absence of
    proof of coverage counts as non-compliance.
    """
    days = days_until_expiry(expiry, today)
    if days is None or days < 0:
        return ComplianceStatus.NON_COMPLIANT
    if days <= threshold_days:
        return ComplianceStatus.AT_RISK
    return ComplianceStatus.COMPLIANT


def insurance_status(expiry: object, today: date | None = None) -> ComplianceStatus:
    return classify(expiry, INSURANCE_THRESHOLD_DAYS, today)


def contract_status(end_date: object, today: date | None = None) -> ComplianceStatus:
    return classify(end_date, CONTRACT_THRESHOLD_DAYS, today)
