"""Analyze-only extraction endpoint — nothing is stored."""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, File, Query, UploadFile

from covera.core.response import DataResponse
from covera.routers.uploads import validate_and_read_file
from covera.schemas.extraction import AnalyzeResponse
from covera.services.extraction import ExtractionService
from covera.services.openai_service import DocumentExtractionClient, get_extraction_client

router = APIRouter(prefix="/documents", tags=["Documents"])


@router.post(
    "/analyze",
    response_model=DataResponse[AnalyzeResponse],
    summary="AI Document Extraction",
    description=(
        "Upload a certificate of insurance or a contract (PDF, JPEG or PNG) and "
        "receive the raw AI-extracted fields alongside the normalized record patch."
    ),
)
async def analyze_document(
    kind: Literal["insurance", "contract"] = Query(..., description="Document kind"),
    file: UploadFile = File(...),
    client: DocumentExtractionClient = Depends(get_extraction_client),
):
    contents, mime_type = await validate_and_read_file(file)
    result = await ExtractionService(client).analyze(contents, mime_type, kind)
    return {"data": result}
