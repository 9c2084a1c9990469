"""Analyze a document without storing it: raw extraction plus normalized patch."""


import logging
from datetime import date

from covera.schemas.extraction import AnalyzeResponse, DocumentKind
from covera.services.normalizer import normalize
from covera.services.openai_service import DocumentExtractionClient

logger = logging.getLogger(__name__)


class ExtractionService:
    def __init__(self, client: DocumentExtractionClient):
        self._client = client

    async def analyze(
        self,
        contents: bytes,
        mime_type: str | None,
        kind: DocumentKind,
        today: date | None = None,
    ) -> AnalyzeResponse:
        """Errors from the extraction client propagate to the caller."""
        raw = await self._client.extract(contents, mime_type, kind)
        normalized = normalize(raw, kind, today)
        logger.info("Analyzed %s document (%d bytes)", kind, len(contents))
        return AnalyzeResponse(kind=kind, extracted_data=raw, normalized=normalized)
