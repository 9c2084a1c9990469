"""Vendor service — CRUD, COI uploads and insurance compliance.

Rule: No FastAPI here. Repositories do the storage work; statuses always
come from :mod:`covera.services.status` and are recomputed every time a
vendor leaves this service.
"""


import logging
import uuid
from datetime import date, datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from covera.core.config import settings
from covera.core.exceptions import AppException, ForbiddenError, NotFoundError
from covera.core.pagination import PaginationParams
from covera.repositories.vendor import VendorRepository
from covera.schemas.activity import Activity
from covera.schemas.extraction import DocumentDeleteResponse, VendorUploadResponse
from covera.schemas.vendor import (
    InsurancePolicy,
    PolicyInput,
    Vendor,
    VendorCreate,
    VendorDocument,
    VendorUpdate,
)
from covera.services.activity import ActivityService
from covera.services.normalizer import (
    earliest_date,
    merge_insurance,
    normalize_insurance,
    parse_coverage_limit,
)
from covera.services.openai_service import DocumentExtractionClient
from covera.services.status import ComplianceStatus, insurance_status
from covera.services.storage import BlobStore, document_type, format_size

logger = logging.getLogger(__name__)

_CERTIFICATE_MARKERS = ("coi", "certificate")


def refresh_vendor(vendor: Vendor, today: date | None = None) -> Vendor:
    """Recompute the vendor status and every policy status for *today*."""
    policies = [
        p.model_copy(update={"status": insurance_status(p.expiry_date, today)})
        for p in vendor.insurance_policies
    ]
    return vendor.model_copy(update={
        "insurance_policies": policies,
        "status": insurance_status(vendor.insurance_expiry, today),
    })


def _is_certificate(doc: VendorDocument) -> bool:
    name = doc.name.lower()
    return doc.type == "PDF" or any(marker in name for marker in _CERTIFICATE_MARKERS)


def _build_policies(inputs: list[PolicyInput]) -> list[InsurancePolicy]:
    return [
        InsurancePolicy(
            **p.model_dump(exclude={"coverage_limit"}),
            coverage_limit=parse_coverage_limit(p.coverage_limit),
            status=insurance_status(p.expiry_date),
        )
        for p in inputs
    ]


class VendorService:
    def __init__(
        self,
        session: AsyncSession,
        org_id: str,
        extraction_client: DocumentExtractionClient | None = None,
        blob_store: BlobStore | None = None,
    ):
        self._org_id = org_id
        self._repo = VendorRepository(session, org_id)
        self._activity = ActivityService(session, org_id)
        self._client = extraction_client
        self._blobs = blob_store or BlobStore()

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    async def list_vendors(
        self, pagination: PaginationParams, status: str | None = None,
    ) -> tuple[list[Vendor], int]:
        vendors = [refresh_vendor(v) for v in await self._repo.list()]
        if status:
            vendors = [v for v in vendors if v.status == status]
        by_id = {v.id: v for v in vendors}
        page = pagination.apply([v.model_dump(mode="json", by_alias=True) for v in vendors])
        return [by_id[row["id"]] for row in page], len(vendors)

    async def get_vendor(self, vendor_id: str) -> Vendor:
        vendor = await self._repo.get(vendor_id)
        if not vendor:
            raise NotFoundError("Vendor", vendor_id)
        return refresh_vendor(vendor)

    async def create_vendor(self, data: VendorCreate) -> Vendor:
        limit = settings.vendor_limit
        if limit and await self._repo.count() >= limit:
            raise ForbiddenError(f"Vendor limit reached ({limit}). Upgrade your plan to add more vendors.")

        now = datetime.now(timezone.utc)
        policies = _build_policies(data.insurance_policies)
        expiry = data.insurance_expiry or earliest_date([p.expiry_date for p in policies])
        vendor = refresh_vendor(Vendor(
            id=uuid.uuid4().hex,
            **data.model_dump(exclude={"insurance_policies", "insurance_expiry"}),
            insurance_expiry=expiry,
            insurance_policies=policies,
            created_at=now,
            updated_at=now,
        ))
        await self._repo.save(vendor)
        logger.info("Created vendor %s (%s)", vendor.id, vendor.name)
        await self._activity.log(vendor.id, "Vendor added", f"{vendor.name} was added", "positive")
        await self._notify_transition(None, vendor)
        return vendor

    async def update_vendor(self, vendor_id: str, data: VendorUpdate) -> Vendor:
        existing = await self.get_vendor(vendor_id)  # raises 404 if missing
        changes = data.model_dump(exclude_unset=True)

        if "insurance_policies" in changes:
            policies = _build_policies(data.insurance_policies or [])
            changes["insurance_policies"] = policies
            if "insurance_expiry" not in changes:
                changes["insurance_expiry"] = (
                    earliest_date([p.expiry_date for p in policies]) or existing.insurance_expiry
                )
        if changes.get("name") is None:
            changes.pop("name", None)

        changes["updated_at"] = datetime.now(timezone.utc)
        vendor = refresh_vendor(existing.model_copy(update=changes))
        await self._repo.save(vendor)
        await self._activity.log(vendor.id, "Vendor updated", "Vendor details were updated")
        await self._notify_transition(existing.status, vendor)
        return vendor

    async def delete_vendor(self, vendor_id: str) -> None:
        deleted = await self._repo.delete(vendor_id)
        if not deleted:
            raise NotFoundError("Vendor", vendor_id)
        removed = await self._activity.delete_for_vendor(vendor_id)
        logger.info("Deleted vendor %s and %d activity entries", vendor_id, removed)

    async def list_activities(self, vendor_id: str) -> list[Activity]:
        await self.get_vendor(vendor_id)
        return await self._activity.list_for_vendor(vendor_id)

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    async def upload_coi(
        self,
        vendor_id: str,
        filename: str | None,
        content_type: str | None,
        contents: bytes,
    ) -> VendorUploadResponse:
        """Store a certificate, attach it, then try to extract and merge policies.

        The upload succeeds even when extraction fails; the failure is
        reported in ``message`` and ``extracted_data`` is ``None``.
        """
        vendor = await self.get_vendor(vendor_id)
        before = vendor.status
        now = datetime.now(timezone.utc)

        path = self._blobs.build_path(self._org_id, vendor_id, filename)
        await self._blobs.save(path, contents)
        document = VendorDocument(
            name=filename or path.rsplit("/", 1)[-1],
            type=document_type(content_type),
            size=format_size(len(contents)),
            uploaded_at=now,
            path=path,
        )
        vendor = vendor.model_copy(update={"documents": [*vendor.documents, document], "updated_at": now})

        extracted = None
        if self._client is None:
            message = "Document uploaded. AI extraction is not configured."
        else:
            try:
                extracted = await self._client.extract(contents, content_type, "insurance")
            except AppException as exc:
                logger.warning("COI extraction failed for vendor %s: %s", vendor_id, exc.message)
                message = f"Document uploaded, but extraction failed: {exc.message}"
            else:
                patch = normalize_insurance(extracted)
                vendor = merge_insurance(vendor, patch)
                count = len(patch.insurance_policies)
                message = (
                    f"Document uploaded. Extracted {count} insurance "
                    f"{'policy' if count == 1 else 'policies'}."
                    if count else "Document uploaded. No insurance policies were found."
                )

        vendor = refresh_vendor(vendor)
        await self._repo.save(vendor)
        await self._activity.log(vendor.id, "COI uploaded", f"{document.name} was uploaded", "positive")
        await self._notify_transition(before, vendor)
        return VendorUploadResponse(
            document=document,
            extracted_data=extracted,
            vendor=vendor,
            updated_status=vendor.status,
            message=message,
        )

    async def delete_document(self, vendor_id: str, path: str) -> DocumentDeleteResponse:
        """Detach a document; clear insurance data when no certificate remains."""
        vendor = await self.get_vendor(vendor_id)
        before = vendor.status
        document = next((d for d in vendor.documents if d.path == path), None)
        if document is None:
            raise NotFoundError("Document", path)

        try:
            await self._blobs.delete(path)
        except (OSError, AppException) as exc:
            logger.warning("Failed to delete blob %s: %s", path, exc)

        remaining = [d for d in vendor.documents if d.path != path]
        changes: dict = {"documents": remaining, "updated_at": datetime.now(timezone.utc)}
        cleared = not any(_is_certificate(d) for d in remaining)
        if cleared:
            changes.update(insurance_policies=[], insurance_expiry=None)

        vendor = refresh_vendor(vendor.model_copy(update=changes))
        await self._repo.save(vendor)
        await self._activity.log(
            vendor.id,
            "Document removed",
            f"{document.name} was removed"
            + (". Insurance information was cleared." if cleared else ""),
            "warning" if cleared else "neutral",
        )
        await self._notify_transition(before, vendor)
        return DocumentDeleteResponse(vendor=vendor, policies_cleared=cleared)

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    async def _notify_transition(self, before: ComplianceStatus | None, vendor: Vendor) -> None:
        if vendor.status == before:
            return
        if vendor.status == ComplianceStatus.AT_RISK:
            await self._activity.notify(
                "Insurance expiring soon",
                f"{vendor.name} insurance expires on {vendor.insurance_expiry}",
                kind="warning",
                vendor_id=vendor.id,
                vendor_name=vendor.name,
            )
        elif vendor.status == ComplianceStatus.NON_COMPLIANT and before is not None:
            await self._activity.notify(
                "Vendor non-compliant",
                f"{vendor.name} no longer has valid insurance on file",
                kind="alert",
                vendor_id=vendor.id,
                vendor_name=vendor.name,
            )
