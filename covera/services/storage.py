"""Local blob store for uploaded documents.

Stands in for object storage: records only ever hold the relative ``path``
returned by :meth:`BlobStore.build_path`, never the bytes. Paths look like
``{org_id}/{vendor_id|contracts}/{timestamp}_{uuid}.{ext}``.
"""


import asyncio
import logging
import time
import uuid
from pathlib import Path, PurePosixPath

from covera.core.config import settings
from covera.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

CONTRACTS_FOLDER = "contracts"


class BlobStore:
    def __init__(self, root: str | Path | None = None):
        self._root = Path(root or settings.upload_dir).resolve()

    @staticmethod
    def build_path(org_id: str, owner: str, filename: str | None) -> str:
        """Unique relative path for a new upload; *owner* is a vendor id or ``contracts``."""
        ext = PurePosixPath(filename or "").suffix.lstrip(".").lower() or "bin"
        stamp = int(time.time() * 1000)
        return f"{org_id}/{owner}/{stamp}_{uuid.uuid4().hex}.{ext}"

    def _resolve(self, path: str) -> Path:
        target = (self._root / path).resolve()
        if not target.is_relative_to(self._root):
            raise ValidationError(f"Invalid document path '{path}'")
        return target

    async def save(self, path: str, contents: bytes) -> str:
        target = self._resolve(path)

        def _write() -> None:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(contents)

        await asyncio.to_thread(_write)
        logger.info("Stored blob path=%s size=%d", path, len(contents))
        return path

    async def delete(self, path: str) -> bool:
        """Remove a blob; returns False when it was already gone."""
        target = self._resolve(path)

        def _unlink() -> bool:
            if not target.exists():
                return False
            target.unlink()
            return True

        removed = await asyncio.to_thread(_unlink)
        logger.info("Deleted blob path=%s removed=%s", path, removed)
        return removed


def format_size(num_bytes: int) -> str:
    """Human-readable size used on document references (``"245.3 KB"``)."""
    if num_bytes < 1024:
        return f"{num_bytes} B"
    if num_bytes < 1024 * 1024:
        return f"{num_bytes / 1024:.1f} KB"
    return f"{num_bytes / (1024 * 1024):.1f} MB"


def document_type(mime_type: str | None) -> str:
    return "Image" if (mime_type or "").lower().startswith("image/") else "PDF"
