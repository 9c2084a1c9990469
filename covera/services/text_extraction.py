"""PDF text extraction for AI processing.

Primary path is **pdfplumber**. When it raises, or returns text that is too
short or mostly non-word characters (typical of scanned or oddly encoded
PDFs), :func:`extract_document_text` falls back to stripping the raw bytes
down to printable ASCII. If even that leaves fewer than
``MIN_USABLE_TEXT_CHARS`` characters, it returns ``None`` and the caller
must not call the model.
"""


import io
import logging
import re

import pdfplumber

logger = logging.getLogger(__name__)

__all__ = [
    "MIN_USABLE_TEXT_CHARS",
    "extract_raw_text",
    "naive_text",
    "is_usable_text",
    "extract_document_text",
]

MIN_USABLE_TEXT_CHARS = 50

# Share of characters that must be letters, digits, whitespace or common
# punctuation for pdfplumber output to count as real text.
_MIN_WORDLIKE_RATIO = 0.6

_NON_PRINTABLE_RE = re.compile(r"[^\x20-\x7E\n\r\t]")
_WHITESPACE_RE = re.compile(r"\s+")
_WORDLIKE_RE = re.compile(r"[A-Za-z0-9\s.,:;/$()\-#&'%]")


def extract_raw_text(pdf_bytes: bytes) -> str:
    """Extract the full raw text from a PDF with pdfplumber."""
    pages: list[str] = []
    with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
        for page in pdf.pages:
            text = page.extract_text()
            if text:
                pages.append(text)
    return "\n".join(pages)


def naive_text(contents: bytes) -> str:
    """Decode bytes leniently and keep only printable ASCII, whitespace collapsed."""
    decoded = contents.decode("utf-8", errors="replace")
    printable = _NON_PRINTABLE_RE.sub(" ", decoded)
    return _WHITESPACE_RE.sub(" ", printable).strip()


def is_usable_text(text: str | None) -> bool:
    if not text:
        return False
    stripped = text.strip()
    if len(stripped) < MIN_USABLE_TEXT_CHARS:
        return False
    wordlike = len(_WORDLIKE_RE.findall(stripped))
    return wordlike / len(stripped) >= _MIN_WORDLIKE_RATIO


def extract_document_text(pdf_bytes: bytes) -> str | None:
    """Best-effort text for the prompt, or ``None`` when nothing usable exists."""
    try:
        text = extract_raw_text(pdf_bytes)
        if is_usable_text(text):
            logger.info("Extracted PDF text length=%d", len(text))
            return text
        logger.warning(
            "pdfplumber returned unusable text (length=%d); using byte fallback",
            len(text.strip()),
        )
    except Exception as exc:
        logger.warning("PDF text extraction failed, using byte fallback: %s", exc)

    text = naive_text(pdf_bytes)
    if len(text) < MIN_USABLE_TEXT_CHARS:
        logger.warning(
            "Could not extract meaningful text from PDF (fallback length=%d)", len(text),
        )
        return None
    logger.info("Fallback text extraction length=%d", len(text))
    return text
