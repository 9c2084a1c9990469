"""Normalization of AI-extracted document fields into Covera records.

The extraction model returns loosely-typed JSON: dates in whatever shape it
chose, currency as numbers or ``"$1,000,000"`` strings, policy types in the
certificate's own wording. This module turns that into the record schema:

  * policy types go through a fixed canonical table (unmapped values pass
    through unchanged); contract types go through their own table and
    unmapped values become ``"Other"``
  * currency is parsed to a number; the ``"$"`` display string is produced
    only when a contract is stored (:func:`format_currency`)
  * dates must be strict ``YYYY-MM-DD``; anything else becomes ``None``
  * every status is recomputed through :mod:`covera.services.status`; any
    status the extractor claims is ignored

Everything here is pure: no I/O, no clocks except the optional *today*.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Literal

from covera.schemas.contract import Contract, Party
from covera.schemas.extraction import ContractPatch, InsurancePatch
from covera.schemas.vendor import InsurancePolicy, Vendor
from covera.services.status import contract_status, insurance_status, parse_expiry

logger = logging.getLogger(__name__)

__all__ = [
    "POLICY_TYPE_MAP",
    "CONTRACT_TYPE_MAP",
    "CONTRACT_TYPES",
    "canonical_policy_type",
    "canonical_contract_type",
    "parse_currency",
    "parse_coverage_limit",
    "format_currency",
    "parse_iso_date",
    "earliest_date",
    "normalize",
    "normalize_insurance",
    "normalize_contract",
    "merge_insurance",
    "apply_contract_patch",
]

# ---------------------------------------------------------------------------
# Lookup tables
# ---------------------------------------------------------------------------

POLICY_TYPE_MAP: dict[str, str] = {
    "COMMERCIAL GENERAL LIABILITY": "General Liability",
    "GENERAL LIABILITY": "General Liability",
    "WORKERS COMPENSATION": "Workers Compensation",
    "WORKERS COMP": "Workers Compensation",
    "AUTOMOBILE LIABILITY": "Auto Liability",
    "AUTO LIABILITY": "Auto Liability",
    "PROFESSIONAL LIABILITY": "Professional Liability",
    "UMBRELLA LIAB": "Umbrella Coverage",
    "UMBRELLA": "Umbrella Coverage",
    "PROPERTY": "Property Insurance",
}

CONTRACT_TYPE_MAP: dict[str, str] = {
    "SERVICE AGREEMENT": "Service Agreement",
    "MASTER SERVICE AGREEMENT": "Master Service Agreement",
    "MSA": "Master Service Agreement",
    "NON-DISCLOSURE AGREEMENT": "Non-Disclosure Agreement",
    "NDA": "Non-Disclosure Agreement",
    "CONFIDENTIALITY AGREEMENT": "Non-Disclosure Agreement",
    "PURCHASE ORDER": "Purchase Order",
    "PO": "Purchase Order",
    "CONSULTING AGREEMENT": "Consulting Agreement",
    "MAINTENANCE CONTRACT": "Maintenance Contract",
    "SOFTWARE LICENSE": "Software License",
    "LICENSE AGREEMENT": "Software License",
}

CONTRACT_TYPES: frozenset[str] = frozenset(CONTRACT_TYPE_MAP.values()) | {"Other"}

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_NON_NUMERIC_RE = re.compile(r"[^0-9.]")

# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------

def _clean_str(value: Any) -> str | None:
    """Trimmed string, or ``None`` for null / blank / non-scalar input."""
    if value is None or isinstance(value, (dict, list, bool)):
        return None
    text = str(value).strip()
    return text or None


def canonical_policy_type(raw: Any) -> str | None:
    text = _clean_str(raw)
    if text is None:
        return None
    return POLICY_TYPE_MAP.get(text.upper(), text)


def canonical_contract_type(raw: Any) -> str | None:
    text = _clean_str(raw)
    if text is None:
        return None
    mapped = CONTRACT_TYPE_MAP.get(text.upper(), text)
    return mapped if mapped in CONTRACT_TYPES else "Other"


def parse_currency(value: Any) -> int | float | None:
    """Parse ``1000000``, ``1e6``, ``"1000000"`` or ``"$1,000,000.00"`` to a number.

    Whole amounts come back as ``int``. Returns ``None`` when no number can be
    read (``"N/A"``, ``""``, ``"1.2.3"``, booleans).
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        digits = _NON_NUMERIC_RE.sub("", value)
        if not digits or digits == ".":
            return None
        try:
            amount = Decimal(digits)
        except InvalidOperation:
            return None
    else:
        return None

    if not amount.is_finite():
        return None
    if amount == amount.to_integral_value():
        return int(amount)
    return float(amount)


def format_currency(amount: int | float | None) -> str | None:
    """``50000 -> "$50,000"``, ``1234.5 -> "$1,234.50"``. Storage boundary only."""
    if amount is None:
        return None
    if isinstance(amount, int) or float(amount).is_integer():
        return f"${int(amount):,}"
    return f"${amount:,.2f}"


def parse_iso_date(value: Any) -> str | None:
    """Return *value* if it is a real ``YYYY-MM-DD`` date, else ``None``.

    ``MM/DD/YYYY`` and ``DD/MM/YYYY`` are rejected rather than guessed;
    converting those is the extraction prompt's job.
    """
    text = _clean_str(value)
    if text is None or not _ISO_DATE_RE.match(text):
        return None
    try:
        date.fromisoformat(text)
    except ValueError:
        return None
    return text


def earliest_date(dates: list[str | None]) -> str | None:
    """Earliest parseable date string in *dates*, or ``None``."""
    parsed = [(parse_expiry(d), d) for d in dates if d]
    valid = [(p, d) for p, d in parsed if p is not None]
    if not valid:
        return None
    return min(valid)[1]

# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------

def parse_coverage_limit(value: Any) -> int | None:
    """Whole-dollar coverage limit from a raw or decorated amount."""
    limit = parse_currency(value)
    return int(limit) if limit is not None else None


def _normalize_policy(raw: dict[str, Any], today: date | None) -> InsurancePolicy:
    expiry = parse_iso_date(raw.get("expiryDate"))
    return InsurancePolicy(
        type=canonical_policy_type(raw.get("type")),
        carrier=_clean_str(raw.get("carrier")),
        policy_number=_clean_str(raw.get("policyNumber")),
        coverage_limit=parse_coverage_limit(raw.get("coverageLimit")),
        expiry_date=expiry,
        status=insurance_status(expiry, today),
    )


def normalize_insurance(raw: dict[str, Any], today: date | None = None) -> InsurancePatch:
    raw_policies = raw.get("policies") or []
    if not isinstance(raw_policies, list):
        raw_policies = []
    policies = [
        _normalize_policy(item, today) for item in raw_policies if isinstance(item, dict)
    ]

    # A single lapsed policy makes the vendor non-compliant, so the vendor
    # expiry is the earliest one, not whichever the model reported.
    expiry = earliest_date([p.expiry_date for p in policies])
    return InsurancePatch(
        insurance_expiry=expiry,
        status=insurance_status(expiry, today),
        insurance_policies=policies,
        insured_name=_clean_str(raw.get("insuredName")),
        certificate_holder=_clean_str(raw.get("certificateHolder")),
    )


def normalize_contract(raw: dict[str, Any], today: date | None = None) -> ContractPatch:
    raw_parties = raw.get("parties") or []
    if not isinstance(raw_parties, list):
        raw_parties = []
    parties = [
        Party(name=_clean_str(p.get("name")), role=_clean_str(p.get("role")))
        for p in raw_parties
        if isinstance(p, dict)
    ]
    auto_renewal = raw.get("autoRenewal")
    end_date = parse_iso_date(raw.get("endDate"))
    return ContractPatch(
        contract_type=canonical_contract_type(raw.get("contractType")),
        start_date=parse_iso_date(raw.get("startDate")),
        end_date=end_date,
        value=parse_currency(raw.get("value")),
        auto_renewal=auto_renewal if isinstance(auto_renewal, bool) else None,
        parties=parties,
        description=_clean_str(raw.get("description")),
        status=contract_status(end_date, today),
    )


def normalize(
    raw: dict[str, Any],
    kind: Literal["insurance", "contract"],
    today: date | None = None,
) -> InsurancePatch | ContractPatch:
    """Map a raw extraction payload onto the record schema for *kind*."""
    if kind == "insurance":
        return normalize_insurance(raw, today)
    if kind == "contract":
        return normalize_contract(raw, today)
    raise ValueError(f"Unknown document kind: {kind!r}")

# ---------------------------------------------------------------------------
# Merging into stored records
# ---------------------------------------------------------------------------

def merge_insurance(
    vendor: Vendor, patch: InsurancePatch, today: date | None = None,
) -> Vendor:
    """Merge extracted policies into *vendor* and recompute every status.

    Stored policies whose type (case-insensitive) appears in the patch are
    replaced by every incoming policy of that type; new types are appended.
    Policies from one patch never replace each other. The vendor expiry
    becomes the earliest policy expiry across the merged list, or stays as it
    was when no policy carries a date.
    """
    incoming_by_type: dict[str, list[InsurancePolicy]] = {}
    for incoming in patch.insurance_policies:
        incoming_by_type.setdefault((incoming.type or "").lower(), []).append(incoming)

    merged: list[InsurancePolicy] = []
    placed: set[str] = set()
    for stored in vendor.insurance_policies:
        key = (stored.type or "").lower()
        if key not in incoming_by_type:
            merged.append(stored.model_copy())
        elif key not in placed:
            merged.extend(incoming_by_type[key])
            placed.add(key)
    for key, policies in incoming_by_type.items():
        if key not in placed:
            merged.extend(policies)

    merged = [
        p.model_copy(update={"status": insurance_status(p.expiry_date, today)})
        for p in merged
    ]
    expiry = earliest_date([p.expiry_date for p in merged]) or vendor.insurance_expiry
    logger.debug(
        "Merged %d extracted policies into vendor %s (expiry=%s)",
        len(patch.insurance_policies), vendor.id, expiry,
    )
    return vendor.model_copy(update={
        "insurance_policies": merged,
        "insurance_expiry": expiry,
        "status": insurance_status(expiry, today),
        "updated_at": datetime.now(timezone.utc),
    })


def apply_contract_patch(
    contract: Contract, patch: ContractPatch, today: date | None = None,
) -> Contract:
    """Copy non-null extracted fields onto *contract*, then recompute status."""
    updates: dict[str, Any] = {}
    for field in ("contract_type", "start_date", "end_date", "auto_renewal", "description"):
        value = getattr(patch, field)
        if value is not None:
            updates[field] = value
    if patch.value is not None:
        updates["value"] = format_currency(patch.value)
    if patch.parties:
        updates["parties"] = patch.parties

    end_date = updates.get("end_date", contract.end_date)
    updates["status"] = contract_status(end_date, today)
    updates["updated_at"] = datetime.now(timezone.utc)
    return contract.model_copy(update=updates)
