"""Error hierarchy and the handlers that render it.

Every error leaves the API as ``{"error": {"code": ..., "message": ...}}``.
Subclasses pin ``status_code`` and ``code``; services raise them and never
touch HTTP directly.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppException(Exception):
    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, status_code: int | None = None, code: str | None = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code
        super().__init__(message)


class NotFoundError(AppException):
    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: str | None = None):
        super().__init__(f"{entity} '{entity_id}' not found" if entity_id else f"{entity} not found")


class ForbiddenError(AppException):
    status_code = 403
    code = "FORBIDDEN"


class ValidationError(AppException):
    status_code = 422
    code = "VALIDATION_ERROR"


class EmptyUploadError(AppException):
    status_code = 400
    code = "EMPTY_FILE"

    def __init__(self):
        super().__init__("Uploaded file is empty.")


class UploadTooLargeError(AppException):
    status_code = 413
    code = "FILE_TOO_LARGE"

    def __init__(self, limit_mb: int):
        super().__init__(f"File size exceeds the {limit_mb}MB limit.")


class UnsupportedDocumentError(AppException):
    status_code = 415
    code = "UNSUPPORTED_MEDIA_TYPE"

    def __init__(self, mime_type: str | None):
        super().__init__(f"Unsupported document type '{mime_type}'. Accepted: PDF, PNG, JPEG.")


class ConfigurationError(AppException):
    """A required setting (the OpenAI key) is missing."""

    status_code = 503
    code = "AI_NOT_CONFIGURED"


class DocumentExtractionError(AppException):
    """The model call failed or returned something that is not the expected JSON."""

    status_code = 502
    code = "AI_EXTRACTION_ERROR"


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": {"code": code, "message": message}})


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return _error_response(exc.status_code, exc.code, exc.message)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error_response(500, "INTERNAL_ERROR", "An unexpected error occurred")
