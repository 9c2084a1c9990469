"""Tests for VendorService: CRUD, status recomputation, COI documents."""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from covera.core.config import settings
from covera.core.exceptions import ForbiddenError, NotFoundError
from covera.core.pagination import PaginationParams
from covera.repositories.vendor import VendorRepository
from covera.schemas.vendor import PolicyInput, Vendor, VendorCreate, VendorUpdate
from covera.services.activity import ActivityService
from covera.services.status import ComplianceStatus
from covera.services.vendor import VendorService
from tests.conftest import days_from_today, make_completion

ORG = "test-org"


def _pagination(**overrides) -> PaginationParams:
    params = {"page": 1, "limit": 20, "sort": "createdAt", "order": "desc"}
    params.update(overrides)
    return PaginationParams(**params)


@pytest.fixture
def service(session, extraction_client, blob_store):
    return VendorService(session, ORG, extraction_client=extraction_client, blob_store=blob_store)


@pytest.fixture
def activity(session):
    return ActivityService(session, ORG)


class TestVendorCrud:
    async def test_create_derives_expiry_and_status_from_policies(self, service):
        vendor = await service.create_vendor(VendorCreate(
            name="Bright Plumbing",
            insurance_policies=[
                PolicyInput(type="General Liability", expiry_date=days_from_today(200)),
                PolicyInput(type="Workers Compensation", expiry_date=days_from_today(90)),
            ],
        ))

        assert vendor.insurance_expiry == days_from_today(90)
        assert vendor.status == ComplianceStatus.COMPLIANT
        assert all(p.status == ComplianceStatus.COMPLIANT for p in vendor.insurance_policies)

    async def test_create_without_insurance_is_non_compliant(self, service, activity):
        vendor = await service.create_vendor(VendorCreate(name="No Papers Inc"))
        assert vendor.status == ComplianceStatus.NON_COMPLIANT
        assert [a.action for a in await activity.list_for_vendor(vendor.id)] == ["Vendor added"]

    async def test_create_at_risk_vendor_raises_notification(self, service, activity):
        await service.create_vendor(VendorCreate(name="Soon Expiring", insurance_expiry=days_from_today(10)))
        notifications = await activity.list_notifications()
        assert [n.kind for n in notifications] == ["warning"]
        assert notifications[0].vendor_name == "Soon Expiring"

    async def test_vendor_limit(self, service, monkeypatch):
        monkeypatch.setattr(settings, "vendor_limit", 1)
        await service.create_vendor(VendorCreate(name="First"))
        with pytest.raises(ForbiddenError):
            await service.create_vendor(VendorCreate(name="Second"))

    async def test_zero_limit_means_unlimited(self, service, monkeypatch):
        monkeypatch.setattr(settings, "vendor_limit", 0)
        for i in range(3):
            await service.create_vendor(VendorCreate(name=f"Vendor {i}"))

    async def test_get_missing(self, service):
        with pytest.raises(NotFoundError):
            await service.get_vendor("nope")

    async def test_stored_status_is_recomputed_on_read(self, service, session):
        now = datetime.now(timezone.utc)
        await VendorRepository(session, ORG).save(Vendor(
            id="stale",
            name="Stale",
            insurance_expiry=days_from_today(-1),
            status=ComplianceStatus.COMPLIANT,
            created_at=now,
            updated_at=now,
        ))
        vendor = await service.get_vendor("stale")
        assert vendor.status == ComplianceStatus.NON_COMPLIANT

    async def test_list_filters_on_recomputed_status(self, service):
        await service.create_vendor(VendorCreate(name="Good", insurance_expiry=days_from_today(100)))
        await service.create_vendor(VendorCreate(name="Risky", insurance_expiry=days_from_today(5)))
        await service.create_vendor(VendorCreate(name="Lapsed", insurance_expiry=days_from_today(-5)))

        items, total = await service.list_vendors(_pagination(), status="at-risk")
        assert total == 1
        assert [v.name for v in items] == ["Risky"]

        items, total = await service.list_vendors(_pagination(sort="name", order="asc", limit=2))
        assert total == 3
        assert [v.name for v in items] == ["Good", "Lapsed"]

    async def test_update_policies_recomputes_expiry_and_notifies(self, service, activity):
        vendor = await service.create_vendor(VendorCreate(name="Shifting", insurance_expiry=days_from_today(100)))

        updated = await service.update_vendor(vendor.id, VendorUpdate(
            insurance_policies=[PolicyInput(type="Property Insurance", expiry_date=days_from_today(-2))],
        ))

        assert updated.insurance_expiry == days_from_today(-2)
        assert updated.status == ComplianceStatus.NON_COMPLIANT
        assert [n.kind for n in await activity.list_notifications()] == ["alert"]

    async def test_update_accepts_decorated_coverage_limits(self, service):
        vendor = await service.create_vendor(VendorCreate(name="Manual Entry"))

        updated = await service.update_vendor(vendor.id, VendorUpdate.model_validate({
            "insurancePolicies": [
                {"type": "General Liability", "coverageLimit": "$1,000,000", "expiryDate": days_from_today(60)},
                {"type": "Property Insurance", "coverageLimit": 250000.0},
                {"type": "Umbrella Coverage", "coverageLimit": "TBD"},
            ],
        }))

        assert [p.coverage_limit for p in updated.insurance_policies] == [1000000, 250000, None]

    async def test_update_keeps_unset_fields(self, service):
        vendor = await service.create_vendor(VendorCreate(name="Keep Me", email="a@b.co"))
        updated = await service.update_vendor(vendor.id, VendorUpdate(phone="555-0100"))
        assert updated.email == "a@b.co"
        assert updated.phone == "555-0100"
        assert updated.name == "Keep Me"

    async def test_delete_cascades_activities(self, service, activity):
        vendor = await service.create_vendor(VendorCreate(name="Gone Soon"))
        await service.update_vendor(vendor.id, VendorUpdate(notes="bye"))

        await service.delete_vendor(vendor.id)

        assert await activity.list_for_vendor(vendor.id) == []
        with pytest.raises(NotFoundError):
            await service.delete_vendor(vendor.id)


class TestCoiDocuments:
    async def test_upload_merges_extracted_policies(self, service, openai_client, blob_store, tmp_path):
        openai_client.chat.completions.create.return_value = make_completion({
            "expirationDate": days_from_today(200),
            "policies": [
                {"type": "COMMERCIAL GENERAL LIABILITY", "expiryDate": days_from_today(200), "coverageLimit": "$1,000,000"},
                {"type": "WORKERS COMPENSATION", "expiryDate": days_from_today(-3)},
            ],
            "insuredName": "Bright Plumbing LLC",
            "certificateHolder": None,
        })
        vendor = await service.create_vendor(VendorCreate(name="Bright Plumbing"))

        result = await service.upload_coi(vendor.id, "coi.png", "image/png", b"\x89PNGdata")

        assert result.extracted_data["insuredName"] == "Bright Plumbing LLC"
        assert result.vendor.insurance_expiry == days_from_today(-3)
        assert result.updated_status == ComplianceStatus.NON_COMPLIANT
        assert result.vendor.insurance_policies[0].coverage_limit == 1000000
        assert result.document.type == "Image"
        assert result.document.path.startswith(f"{ORG}/{vendor.id}/")
        assert (tmp_path / "blobs" / result.document.path).read_bytes() == b"\x89PNGdata"
        stored = await service.get_vendor(vendor.id)
        assert [d.name for d in stored.documents] == ["coi.png"]

    async def test_upload_survives_extraction_failure(self, service, openai_client):
        openai_client.chat.completions.create.return_value = make_completion("not json")
        vendor = await service.create_vendor(VendorCreate(name="Bright Plumbing"))

        result = await service.upload_coi(vendor.id, "coi.png", "image/png", b"data")

        assert result.extracted_data is None
        assert "extraction failed" in result.message
        assert len(result.vendor.documents) == 1
        assert result.vendor.insurance_policies == []

    async def test_upload_without_ai(self, session, blob_store, openai_client):
        service = VendorService(session, ORG, extraction_client=None, blob_store=blob_store)
        vendor = await service.create_vendor(VendorCreate(name="Offline"))

        result = await service.upload_coi(vendor.id, "coi.pdf", "application/pdf", b"%PDF-1.4")

        assert "not configured" in result.message
        assert result.document.type == "PDF"
        openai_client.chat.completions.create.assert_not_awaited()

    async def test_removing_last_certificate_clears_insurance(
        self, service, openai_client, pdf_text, tmp_path,
    ):
        openai_client.chat.completions.create.return_value = make_completion({
            "expirationDate": None,
            "policies": [{"type": "PROPERTY", "expiryDate": days_from_today(300)}],
            "insuredName": None,
            "certificateHolder": None,
        })
        vendor = await service.create_vendor(VendorCreate(name="Bright Plumbing"))
        upload = await service.upload_coi(vendor.id, "certificate.pdf", "application/pdf", b"%PDF-1.4")
        assert upload.updated_status == ComplianceStatus.COMPLIANT

        result = await service.delete_document(vendor.id, upload.document.path)

        assert result.policies_cleared is True
        assert result.vendor.insurance_policies == []
        assert result.vendor.insurance_expiry is None
        assert result.vendor.status == ComplianceStatus.NON_COMPLIANT
        assert not Path(tmp_path / "blobs" / upload.document.path).exists()

    async def test_removing_one_of_two_certificates_keeps_policies(self, service, openai_client, pdf_text):
        openai_client.chat.completions.create.return_value = make_completion({
            "expirationDate": None,
            "policies": [{"type": "PROPERTY", "expiryDate": days_from_today(300)}],
            "insuredName": None,
            "certificateHolder": None,
        })
        vendor = await service.create_vendor(VendorCreate(name="Bright Plumbing"))
        first = await service.upload_coi(vendor.id, "2024.pdf", "application/pdf", b"%PDF-1.4")
        await service.upload_coi(vendor.id, "2025.pdf", "application/pdf", b"%PDF-1.4")

        result = await service.delete_document(vendor.id, first.document.path)

        assert result.policies_cleared is False
        assert len(result.vendor.insurance_policies) == 1
        assert result.vendor.status == ComplianceStatus.COMPLIANT

    async def test_delete_unknown_document(self, service):
        vendor = await service.create_vendor(VendorCreate(name="Bright Plumbing"))
        with pytest.raises(NotFoundError):
            await service.delete_document(vendor.id, "test-org/x/missing.pdf")
