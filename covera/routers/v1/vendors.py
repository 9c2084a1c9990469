"""Vendor router — CRUD, activity history and COI documents.

Pattern:
  1. Inject DB session (and the extraction client for uploads) via Depends
  2. Instantiate the service with (session, settings.default_org_id)
  3. Call service methods and wrap the result in the response envelope
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from covera.core.config import settings
from covera.core.pagination import PaginationParams
from covera.core.response import DataResponse, ListResponse, paginated
from covera.db.base import get_db
from covera.routers.uploads import validate_and_read_file
from covera.schemas.activity import Activity
from covera.schemas.extraction import DocumentDeleteResponse, VendorUploadResponse
from covera.schemas.vendor import Vendor, VendorCreate, VendorUpdate
from covera.services.openai_service import DocumentExtractionClient, get_optional_extraction_client
from covera.services.status import ComplianceStatus
from covera.services.vendor import VendorService

router = APIRouter(prefix="/vendors", tags=["Vendors"])


# ------------------------------------------------------------------
# Helper — instantiate service with session + default organization
# ------------------------------------------------------------------

def _svc(session: AsyncSession, client: DocumentExtractionClient | None = None) -> VendorService:
    return VendorService(session, settings.default_org_id, extraction_client=client)


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.get("", response_model=ListResponse[Vendor])
async def list_vendors(
    filter_status: Optional[ComplianceStatus] = Query(default=None, alias="status", description="Filter by status"),
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
):
    """List vendors (paginated). Filter by ?status=compliant|at-risk|non-compliant."""
    items, total = await _svc(session).list_vendors(
        pagination, status=filter_status.value if filter_status else None,
    )
    return paginated(items, total, pagination)


@router.post("", response_model=DataResponse[Vendor], status_code=status.HTTP_201_CREATED)
async def create_vendor(
    body: VendorCreate,
    session: AsyncSession = Depends(get_db),
):
    """Create a new vendor. Status is derived, never accepted from the client."""
    vendor = await _svc(session).create_vendor(body)
    return {"data": vendor}


@router.get("/{vendor_id}", response_model=DataResponse[Vendor])
async def get_vendor(
    vendor_id: str,
    session: AsyncSession = Depends(get_db),
):
    vendor = await _svc(session).get_vendor(vendor_id)
    return {"data": vendor}


@router.put("/{vendor_id}", response_model=DataResponse[Vendor])
async def update_vendor(
    vendor_id: str,
    body: VendorUpdate,
    session: AsyncSession = Depends(get_db),
):
    vendor = await _svc(session).update_vendor(vendor_id, body)
    return {"data": vendor}


@router.delete("/{vendor_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_vendor(
    vendor_id: str,
    session: AsyncSession = Depends(get_db),
):
    await _svc(session).delete_vendor(vendor_id)


@router.get("/{vendor_id}/activities", response_model=DataResponse[list[Activity]])
async def list_vendor_activities(
    vendor_id: str,
    session: AsyncSession = Depends(get_db),
):
    """Activity history for one vendor, newest first."""
    activities = await _svc(session).list_activities(vendor_id)
    return {"data": activities}


@router.post(
    "/{vendor_id}/documents",
    response_model=DataResponse[VendorUploadResponse],
    status_code=status.HTTP_201_CREATED,
)
async def upload_vendor_document(
    vendor_id: str,
    file: UploadFile = File(...),
    session: AsyncSession = Depends(get_db),
    client: DocumentExtractionClient | None = Depends(get_optional_extraction_client),
):
    """Upload a Certificate of Insurance (PDF, JPEG or PNG).

    The document is always stored. When AI is configured the certificate is
    extracted and its policies merged into the vendor.
    """
    contents, mime_type = await validate_and_read_file(file)
    result = await _svc(session, client).upload_coi(vendor_id, file.filename, mime_type, contents)
    return {"data": result}


@router.delete("/{vendor_id}/documents", response_model=DataResponse[DocumentDeleteResponse])
async def delete_vendor_document(
    vendor_id: str,
    path: str = Query(..., description="Storage path of the document to remove"),
    session: AsyncSession = Depends(get_db),
):
    result = await _svc(session).delete_document(vendor_id, path)
    return {"data": result}
