"""
Resource file storage.

Uploaded files live under ``<UPLOAD_DIR>/<category>/<generated-name>``.
Rows in ``resources`` reference them by absolute URL ending in
``/uploads/<category>/<generated-name>``.
"""

import logging
import os
import random
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Tuple

from app.core.config import settings
from app.core.exceptions import PayloadTooLargeError, ValidationError
from app.models.enums import ResourceCategory

logger = logging.getLogger(__name__)

# Also the fallback search order used by ``locate``
CATEGORIES = tuple(c.value for c in ResourceCategory)
DEFAULT_CATEGORY = ResourceCategory.OTHER.value

ALLOWED_MIME_TYPES = frozenset({
    "application/pdf",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
    "text/csv",
    "image/jpeg",
    "image/png",
    "image/gif",
})

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_-]")
_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")
_URL_MARKER = "/uploads/"


def normalize_category(category: Optional[str]) -> str:
    """Map anything outside the known buckets to ``other``."""
    if category and category.strip().lower() in CATEGORIES:
        return category.strip().lower()
    return DEFAULT_CATEGORY


def validate_upload(content_type: Optional[str], size: int, max_size: Optional[int] = None) -> None:
    if content_type not in ALLOWED_MIME_TYPES:
        raise ValidationError(
            "Invalid file type. Allowed types: PDF, Excel, Word, Text, CSV, Images",
            detail=f"Received content type: {content_type}",
        )
    max_size = settings.MAX_UPLOAD_SIZE if max_size is None else max_size
    if size > max_size:
        raise PayloadTooLargeError(
            "File too large",
            detail=f"Maximum upload size is {format_file_size(max_size)}",
        )


async def read_upload(upload, max_size: Optional[int] = None, chunk_size: int = 1024 * 1024) -> bytes:
    """
    Validate and read an uploaded file, never buffering more than ``max_size + 1`` bytes.

    ``upload`` is anything with an async ``read(n)`` and optional ``size`` and
    ``content_type`` attributes, such as FastAPI's ``UploadFile``.
    """
    max_size = settings.MAX_UPLOAD_SIZE if max_size is None else max_size
    declared = getattr(upload, "size", None)
    validate_upload(upload.content_type, declared or 0, max_size)

    chunks = []
    total = 0
    while True:
        chunk = await upload.read(min(chunk_size, max_size + 1 - total))
        if not chunk:
            break
        chunks.append(chunk)
        total += len(chunk)
        if total > max_size:
            validate_upload(upload.content_type, total, max_size)
    return b"".join(chunks)


def sanitize_name(name: str) -> str:
    return _UNSAFE_CHARS.sub("_", name)


def generate_stored_filename(original: str, now: Optional[datetime] = None, rand: Optional[int] = None) -> str:
    """
    Build ``<sanitized stem>-<epoch ms>-<random>.<ext>`` for an upload.

    Only the basename of ``original`` is used, so client-supplied
    directories never reach the filesystem.
    """
    base = os.path.basename(original.replace("\\", "/"))
    stem, ext = os.path.splitext(base)
    now = now or datetime.now(timezone.utc)
    if rand is None:
        rand = random.randint(0, 10 ** 9)
    millis = int(now.timestamp() * 1000)
    return f"{sanitize_name(stem)}-{millis}-{rand}{ext}"


def format_file_size(num_bytes: int) -> str:
    """
    Human readable size: ``0 Bytes``, ``1 KB``, ``1.5 KB``, ``2.25 MB``.
    """
    if num_bytes <= 0:
        return "0 Bytes"
    # Integer unit selection, same as floor(log_1024(n)) without float drift
    unit = 0
    while unit < len(_SIZE_UNITS) - 1 and num_bytes >= 1024 ** (unit + 1):
        unit += 1
    value = round(num_bytes / 1024 ** unit, 2)
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {_SIZE_UNITS[unit]}"


def file_type_label(content_type: Optional[str]) -> str:
    mime = (content_type or "").lower()
    if "pdf" in mime:
        return "PDF Document"
    if "excel" in mime or "spreadsheet" in mime:
        return "Excel Spreadsheet"
    if "word" in mime or "document" in mime:
        return "Word Document"
    if "text" in mime:
        return "Text File"
    if "image" in mime:
        return "Image"
    return "Unknown"


class ResourceStorage:
    """Category-bucketed file store rooted at a single directory."""

    def __init__(self, root):
        self.root = Path(root).resolve()

    def ensure_dirs(self) -> None:
        for category in CATEGORIES:
            (self.root / category).mkdir(parents=True, exist_ok=True)

    def save(self, category: str, original_name: str, content: bytes) -> str:
        """Write ``content`` and return its relative path ``category/filename``."""
        category = normalize_category(category)
        filename = generate_stored_filename(original_name)
        target = self.root / category / filename
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "wb") as f:
            f.write(content)
        logger.info("Stored %s (%s) at %s", original_name, format_file_size(len(content)), target)
        return f"{category}/{filename}"

    @staticmethod
    def build_file_url(base_url: str, relative: str) -> str:
        return f"{base_url.rstrip('/')}{_URL_MARKER}{relative.lstrip('/')}"

    @staticmethod
    def relative_path_from_url(url: Optional[str]) -> Optional[str]:
        if not url or _URL_MARKER not in url:
            return None
        relative = url.split(_URL_MARKER, 1)[1].split("?", 1)[0].split("#", 1)[0]
        return relative or None

    @staticmethod
    def base_from_url(url: str) -> str:
        return url.split(_URL_MARKER, 1)[0]

    def resolve(self, relative: Optional[str]) -> Optional[Path]:
        """Absolute path for ``relative``, or None when it escapes the root."""
        if not relative:
            return None
        candidate = (self.root / relative).resolve()
        if candidate != self.root and self.root not in candidate.parents:
            logger.warning("Rejected path outside upload root: %s", relative)
            return None
        return candidate

    def locate(self, category: Optional[str], filename: str) -> Optional[Tuple[str, Path]]:
        """
        Find ``filename`` on disk.

        The recorded category is tried first, then every bucket in
        ``CATEGORIES`` order. Returns ``(category, path)`` or None.
        """
        if not filename or os.path.basename(filename) != filename or filename in (".", ".."):
            return None
        searched = []
        if category in CATEGORIES:
            searched.append(category)
        searched.extend(c for c in CATEGORIES if c not in searched)
        for bucket in searched:
            path = self.resolve(f"{bucket}/{filename}")
            if path is not None and path.is_file():
                return bucket, path
        return None

    def delete(self, relative: Optional[str]) -> bool:
        path = self.resolve(relative)
        if path is None:
            return False
        try:
            if path.is_file():
                path.unlink()
                logger.info("Deleted file %s", path)
                return True
            logger.warning("File already missing: %s", path)
        except OSError as e:
            logger.warning("Could not delete %s: %s", path, e)
        return False


storage = ResourceStorage(settings.UPLOAD_DIR)
