"""Contract service — CRUD and document uploads with AI extraction.

Contract status is derived from ``end_date`` with the 60-day contract
threshold and recomputed on every read. ``value`` is stored as the display
string; anything numeric a caller sends is normalized on the way in.
"""


import logging
import uuid
from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from covera.core.exceptions import AppException, NotFoundError
from covera.core.pagination import PaginationParams
from covera.repositories.contract import ContractRepository
from covera.repositories.vendor import VendorRepository
from covera.schemas.contract import Contract, ContractCreate, ContractUpdate
from covera.schemas.extraction import ContractUploadResponse
from covera.services.normalizer import (
    apply_contract_patch,
    format_currency,
    normalize_contract,
    parse_currency,
)
from covera.services.openai_service import DocumentExtractionClient
from covera.services.status import contract_status
from covera.services.storage import CONTRACTS_FOLDER, BlobStore, document_type, format_size

logger = logging.getLogger(__name__)


def refresh_contract(contract: Contract, today: date | None = None) -> Contract:
    return contract.model_copy(update={"status": contract_status(contract.end_date, today)})


def display_value(value: Any) -> str | None:
    """``50000``, ``"50000"`` and ``"$50,000.00"`` all become ``"$50,000"``."""
    return format_currency(parse_currency(value))


class ContractService:
    def __init__(
        self,
        session: AsyncSession,
        org_id: str,
        extraction_client: DocumentExtractionClient | None = None,
        blob_store: BlobStore | None = None,
    ):
        self._org_id = org_id
        self._repo = ContractRepository(session, org_id)
        self._vendors = VendorRepository(session, org_id)
        self._client = extraction_client
        self._blobs = blob_store or BlobStore()

    async def _vendor_name(self, vendor_id: str) -> str:
        vendor = await self._vendors.get(vendor_id)
        if not vendor:
            raise NotFoundError("Vendor", vendor_id)
        return vendor.name

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    async def list_contracts(
        self, pagination: PaginationParams, status: str | None = None,
    ) -> tuple[list[Contract], int]:
        contracts = [refresh_contract(c) for c in await self._repo.list()]
        if status:
            contracts = [c for c in contracts if c.status == status]
        by_id = {c.id: c for c in contracts}
        page = pagination.apply([c.model_dump(mode="json", by_alias=True) for c in contracts])
        return [by_id[row["id"]] for row in page], len(contracts)

    async def get_contract(self, contract_id: str) -> Contract:
        contract = await self._repo.get(contract_id)
        if not contract:
            raise NotFoundError("Contract", contract_id)
        return refresh_contract(contract)

    async def create_contract(self, data: ContractCreate) -> Contract:
        fields = data.model_dump(exclude={"value"})
        if data.vendor_id and not data.vendor_name:
            fields["vendor_name"] = await self._vendor_name(data.vendor_id)

        now = datetime.now(timezone.utc)
        contract = refresh_contract(Contract(
            id=uuid.uuid4().hex,
            **fields,
            value=display_value(data.value),
            created_at=now,
            updated_at=now,
        ))
        await self._repo.save(contract)
        logger.info("Created contract %s (%s)", contract.id, contract.contract_type)
        return contract

    async def update_contract(self, contract_id: str, data: ContractUpdate) -> Contract:
        existing = await self.get_contract(contract_id)  # raises 404 if missing
        changes = data.model_dump(exclude_unset=True)
        # Re-validate nested items from the request so model_copy gets models
        for field in ("parties", "milestones", "deliverables", "slas"):
            if field in changes:
                changes[field] = getattr(data, field) or []
        if "value" in changes:
            changes["value"] = display_value(data.value)
        if changes.get("vendor_id") and "vendor_name" not in changes:
            changes["vendor_name"] = await self._vendor_name(changes["vendor_id"])

        changes["updated_at"] = datetime.now(timezone.utc)
        contract = refresh_contract(existing.model_copy(update=changes))
        await self._repo.save(contract)
        return contract

    async def delete_contract(self, contract_id: str) -> None:
        contract = await self._repo.get(contract_id)
        if not contract:
            raise NotFoundError("Contract", contract_id)
        if contract.document_path:
            try:
                await self._blobs.delete(contract.document_path)
            except (OSError, AppException) as exc:
                logger.warning("Failed to delete blob %s: %s", contract.document_path, exc)
        await self._repo.delete(contract_id)
        logger.info("Deleted contract %s", contract_id)

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    async def upload_document(
        self,
        contract_id: str,
        filename: str | None,
        content_type: str | None,
        contents: bytes,
    ) -> ContractUploadResponse:
        """Attach a contract document and apply the fields extracted from it.

        Only non-null extracted values overwrite the stored contract;
        extraction failures leave the contract as uploaded.
        """
        contract = await self.get_contract(contract_id)
        replaced_path = contract.document_path
        now = datetime.now(timezone.utc)

        path = self._blobs.build_path(self._org_id, CONTRACTS_FOLDER, filename)
        await self._blobs.save(path, contents)
        contract = contract.model_copy(update={
            "document_name": filename or path.rsplit("/", 1)[-1],
            "document_type": document_type(content_type),
            "document_size": format_size(len(contents)),
            "document_path": path,
            "updated_at": now,
        })

        extracted = None
        if self._client is None:
            message = "Document uploaded. AI extraction is not configured."
        else:
            try:
                extracted = await self._client.extract(contents, content_type, "contract")
            except AppException as exc:
                logger.warning("Contract extraction failed for %s: %s", contract_id, exc.message)
                message = f"Document uploaded, but extraction failed: {exc.message}"
            else:
                contract = apply_contract_patch(contract, normalize_contract(extracted))
                message = "Document uploaded and contract details extracted."

        contract = refresh_contract(contract)
        await self._repo.save(contract)

        # the old file goes only once the record points at the new one
        if replaced_path:
            try:
                await self._blobs.delete(replaced_path)
            except (OSError, AppException) as exc:
                logger.warning("Failed to delete replaced blob %s: %s", replaced_path, exc)
        return ContractUploadResponse(contract=contract, extracted_data=extracted, message=message)
