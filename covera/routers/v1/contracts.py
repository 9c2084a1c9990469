"""Contract router — CRUD and document upload."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from covera.core.config import settings
from covera.core.pagination import PaginationParams
from covera.core.response import DataResponse, ListResponse, paginated
from covera.db.base import get_db
from covera.routers.uploads import validate_and_read_file
from covera.schemas.contract import Contract, ContractCreate, ContractUpdate
from covera.schemas.extraction import ContractUploadResponse
from covera.services.contract import ContractService
from covera.services.openai_service import DocumentExtractionClient, get_optional_extraction_client
from covera.services.status import ComplianceStatus

router = APIRouter(prefix="/contracts", tags=["Contracts"])


def _svc(session: AsyncSession, client: DocumentExtractionClient | None = None) -> ContractService:
    return ContractService(session, settings.default_org_id, extraction_client=client)


@router.get("", response_model=ListResponse[Contract])
async def list_contracts(
    filter_status: Optional[ComplianceStatus] = Query(default=None, alias="status", description="Filter by status"),
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
):
    items, total = await _svc(session).list_contracts(
        pagination, status=filter_status.value if filter_status else None,
    )
    return paginated(items, total, pagination)


@router.post("", response_model=DataResponse[Contract], status_code=status.HTTP_201_CREATED)
async def create_contract(
    body: ContractCreate,
    session: AsyncSession = Depends(get_db),
):
    contract = await _svc(session).create_contract(body)
    return {"data": contract}


@router.get("/{contract_id}", response_model=DataResponse[Contract])
async def get_contract(
    contract_id: str,
    session: AsyncSession = Depends(get_db),
):
    contract = await _svc(session).get_contract(contract_id)
    return {"data": contract}


@router.put("/{contract_id}", response_model=DataResponse[Contract])
async def update_contract(
    contract_id: str,
    body: ContractUpdate,
    session: AsyncSession = Depends(get_db),
):
    contract = await _svc(session).update_contract(contract_id, body)
    return {"data": contract}


@router.delete("/{contract_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_contract(
    contract_id: str,
    session: AsyncSession = Depends(get_db),
):
    await _svc(session).delete_contract(contract_id)


@router.post(
    "/{contract_id}/documents",
    response_model=DataResponse[ContractUploadResponse],
    status_code=status.HTTP_201_CREATED,
)
async def upload_contract_document(
    contract_id: str,
    file: UploadFile = File(...),
    session: AsyncSession = Depends(get_db),
    client: DocumentExtractionClient | None = Depends(get_optional_extraction_client),
):
    """Attach a contract document; extracted non-null fields are applied."""
    contents, mime_type = await validate_and_read_file(file)
    result = await _svc(session, client).upload_document(
        contract_id, file.filename, mime_type, contents,
    )
    return {"data": result}
