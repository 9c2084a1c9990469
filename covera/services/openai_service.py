"""Document extraction client — one OpenAI chat-completions call per document.

Two paths:
1. **PDF** — text is pulled locally (pdfplumber, then a byte-strip
   fallback) and sent in a text prompt. When no usable text exists at all the
   client returns the all-null structure without calling the model.
2. **Image** — bytes are base64-encoded and sent as a vision message. There
   is no local OCR, so failures propagate.

Both use ``temperature=0`` and ``response_format=json_object``. The reply is
parsed as JSON and checked against the expected top-level keys; a
structurally wrong reply is a :class:`DocumentExtractionError`, while a
well-formed reply full of nulls is a legitimate "not on the document" answer.
"""

from __future__ import annotations

import base64
import copy
import json
import logging
from typing import Any, Dict, List

from openai import AsyncOpenAI, OpenAIError

from covera.core.config import settings
from covera.core.exceptions import (
    ConfigurationError,
    DocumentExtractionError,
    UnsupportedDocumentError,
    ValidationError,
)
from covera.schemas.extraction import DocumentKind
from covera.services.prompts import (
    CONTRACT_SYSTEM_PROMPT,
    INSURANCE_SYSTEM_PROMPT,
    contract_prompt,
    insurance_prompt,
)
from covera.services.text_extraction import extract_document_text

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"

EMPTY_INSURANCE_FIELDS: Dict[str, Any] = {
    "expirationDate": None,
    "policies": [],
    "insuredName": None,
    "certificateHolder": None,
}

EMPTY_CONTRACT_FIELDS: Dict[str, Any] = {
    "contractType": None,
    "startDate": None,
    "endDate": None,
    "value": None,
    "autoRenewal": None,
    "parties": [],
    "description": None,
}

_EMPTY_FIELDS: Dict[str, Dict[str, Any]] = {
    "insurance": EMPTY_INSURANCE_FIELDS,
    "contract": EMPTY_CONTRACT_FIELDS,
}

# Top-level keys whose value must be a JSON array when present and non-null
_LIST_KEYS: Dict[str, str] = {"insurance": "policies", "contract": "parties"}

_SYSTEM_PROMPTS: Dict[str, str] = {
    "insurance": INSURANCE_SYSTEM_PROMPT,
    "contract": CONTRACT_SYSTEM_PROMPT,
}


def empty_fields(kind: DocumentKind) -> Dict[str, Any]:
    """Fresh all-null extraction result for *kind* (safe to mutate)."""
    return copy.deepcopy(_EMPTY_FIELDS[kind])


def _user_prompt(kind: DocumentKind, text: str | None) -> str:
    return insurance_prompt(text) if kind == "insurance" else contract_prompt(text)


class DocumentExtractionClient:
    """Thin async wrapper around OpenAI for insurance and contract extraction."""

    def __init__(self, client: AsyncOpenAI | None = None) -> None:
        if client is None:
            if not settings.ai_enabled:
                raise ConfigurationError(
                    "OpenAI API key is not configured. Set OPENAI_API_KEY in your .env file."
                )
            client = AsyncOpenAI(
                api_key=settings.openai_api_key,
                timeout=settings.openai_timeout,
                max_retries=settings.openai_max_retries,
            )
        self.client = client
        self.model = settings.openai_model
        self.max_tokens = settings.openai_max_tokens

    # ── Core OpenAI call ──────────────────────────────────────────────────

    async def _call_openai(self, messages: List[Dict[str, Any]]) -> Any:
        """Send one chat-completions request and return the parsed JSON content."""
        try:
            logger.info("Calling OpenAI model=%s", self.model)
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                response_format={"type": "json_object"},
                temperature=0,
                max_tokens=self.max_tokens,
            )
        except OpenAIError as exc:
            logger.error("OpenAI API error: %s", exc)
            raise DocumentExtractionError(f"OpenAI service error: {exc}") from exc

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise DocumentExtractionError("Empty response from OpenAI")

        try:
            return json.loads(content)
        except json.JSONDecodeError as exc:
            logger.error("Invalid JSON from OpenAI: %s", exc)
            raise DocumentExtractionError(f"Invalid JSON response: {exc}") from exc

    # ── Message builders ──────────────────────────────────────────────────

    def _text_messages(self, kind: DocumentKind, text: str) -> List[Dict[str, Any]]:
        limit = settings.openai_max_input_chars
        if len(text) > limit:
            logger.info("Truncating PDF text from %d to %d chars", len(text), limit)
            text = text[:limit]
        return [
            {"role": "system", "content": _SYSTEM_PROMPTS[kind]},
            {"role": "user", "content": _user_prompt(kind, text)},
        ]

    def _vision_messages(
        self, kind: DocumentKind, contents: bytes, mime_type: str,
    ) -> List[Dict[str, Any]]:
        image_mime = "image/png" if mime_type == "image/png" else "image/jpeg"
        encoded = base64.b64encode(contents).decode("ascii")
        return [
            {"role": "system", "content": _SYSTEM_PROMPTS[kind]},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": _user_prompt(kind, None)},
                    {
                        "type": "image_url",
                        "image_url": {
                            "url": f"data:{image_mime};base64,{encoded}",
                            "detail": settings.openai_vision_detail,
                        },
                    },
                ],
            },
        ]

    # ── Response validation ───────────────────────────────────────────────

    @staticmethod
    def _validate(payload: Any, kind: DocumentKind) -> Dict[str, Any]:
        if not isinstance(payload, dict):
            raise DocumentExtractionError(
                f"Expected a JSON object from OpenAI, got {type(payload).__name__}"
            )
        missing = sorted(set(_EMPTY_FIELDS[kind]) - set(payload))
        if missing:
            raise DocumentExtractionError(
                f"OpenAI response is missing keys: {', '.join(missing)}"
            )
        list_key = _LIST_KEYS[kind]
        if payload[list_key] is None:
            payload[list_key] = []
        elif not isinstance(payload[list_key], list):
            raise DocumentExtractionError(f"'{list_key}' must be a list")

        if kind == "insurance" and not payload["policies"]:
            logger.warning("No insurance policies could be extracted from document")
        if kind == "contract" and not any(
            payload.get(k) for k in ("contractType", "startDate", "endDate")
        ):
            logger.warning("No contract data could be extracted from document")
        return payload

    # ── Public API ────────────────────────────────────────────────────────

    async def extract(
        self, contents: bytes, mime_type: str | None, kind: DocumentKind,
    ) -> Dict[str, Any]:
        """Extract raw fields for *kind* from a PDF or image.

        Returns the model's JSON object (or the all-null structure when a PDF
        has no usable text). Raises :class:`DocumentExtractionError` for
        upstream failures and :class:`UnsupportedDocumentError` for other
        file types.
        """
        if kind not in _EMPTY_FIELDS:
            raise ValidationError(f"Unknown document kind '{kind}'")

        mime = (mime_type or "").lower()
        if mime == PDF_MIME_TYPE:
            text = extract_document_text(contents)
            if text is None:
                return empty_fields(kind)
            messages = self._text_messages(kind, text)
        elif mime.startswith("image/"):
            messages = self._vision_messages(kind, contents, mime)
        else:
            raise UnsupportedDocumentError(mime_type)

        payload = await self._call_openai(messages)
        logger.info("OpenAI %s extraction successful", kind)
        return self._validate(payload, kind)


def get_extraction_client() -> DocumentExtractionClient:
    """Factory / FastAPI dependency for :class:`DocumentExtractionClient`.

    Raises ``ConfigurationError`` when the OpenAI key is not configured.
    """
    return DocumentExtractionClient()


def get_optional_extraction_client() -> DocumentExtractionClient | None:
    """Like :func:`get_extraction_client` but ``None`` when AI is disabled.

    Upload endpoints use this: storing the document must work without a key.
    """
    if not settings.ai_enabled:
        return None
    return DocumentExtractionClient()
