"""Shared file validation for multipart uploads (HTTP concern, stays in routers)."""


import logging

from fastapi import UploadFile

from covera.core.config import settings
from covera.core.exceptions import EmptyUploadError, UnsupportedDocumentError, UploadTooLargeError

logger = logging.getLogger(__name__)

_ALLOWED_CONTENT_TYPES: set[str] = {"application/pdf", "image/jpeg", "image/png"}
_ALLOWED_EXTENSIONS: dict[str, str] = {
    ".pdf": "application/pdf",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
}


def detect_mime_type(file: UploadFile) -> str:
    """Return the document MIME type based on content type, then extension.

    Raises :class:`UnsupportedDocumentError` when neither is supported.
    """
    content_type = (file.content_type or "").lower()
    if content_type in _ALLOWED_CONTENT_TYPES:
        return content_type

    filename = (file.filename or "").lower()
    for ext, mime in _ALLOWED_EXTENSIONS.items():
        if filename.endswith(ext):
            return mime

    raise UnsupportedDocumentError(file.content_type)


async def validate_and_read_file(file: UploadFile) -> tuple[bytes, str]:
    """Validate the uploaded file and return ``(contents, mime_type)``."""
    mime_type = detect_mime_type(file)

    contents = await file.read()

    if len(contents) == 0:
        raise EmptyUploadError()

    if len(contents) > settings.max_upload_size_bytes:
        raise UploadTooLargeError(settings.max_upload_size_mb)

    logger.debug("Accepted upload %s (%s, %d bytes)", file.filename, mime_type, len(contents))
    return contents, mime_type
