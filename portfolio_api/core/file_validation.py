"""Image upload validation.

Checks the declared MIME type against the allow-list, cross-checks it with
the file's magic bytes to stop renamed payloads, and enforces the size
ceiling while reading so oversized uploads are never fully buffered.
"""

from __future__ import annotations

import logging
import re

from starlette.datastructures import UploadFile

from portfolio_api.core.config import parse_csv, settings
from portfolio_api.core.errors import ErrorDetails, ValidationAppError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024

# Magic number signatures for accepted image formats
IMAGE_SIGNATURES: dict[str, tuple[bytes, ...]] = {
    "image/jpeg": (b"\xff\xd8\xff",),
    "image/png": (b"\x89PNG\r\n\x1a\n",),
    "image/webp": (b"RIFF",),
}

EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
}

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def allowed_upload_types() -> list[str]:
    return parse_csv(settings.app.allowed_upload_types)


def validate_image_type(content_type: str | None) -> str:
    """Check the declared MIME type of an upload.

    Returns:
        The normalized MIME type.

    Raises:
        ValidationAppError: INVALID_FILE_TYPE when the type is not accepted.
    """
    normalized = (content_type or "").split(";")[0].strip().lower()
    allowed = allowed_upload_types()
    if normalized not in allowed:
        logger.warning("upload.rejected_type", extra={"content_type": normalized or None})
        details: ErrorDetails = {"allowedTypes": allowed}
        raise ValidationAppError(
            code="INVALID_FILE_TYPE",
            message="Invalid file type. Only JPEG, PNG, and WebP images are allowed.",
            details=dict(details),
        )
    return normalized


def validate_image_signature(data: bytes, content_type: str) -> bool:
    """Validate file magic numbers to prevent MIME type spoofing.

    Args:
        data: File content as bytes.
        content_type: Declared (already allow-listed) MIME type.

    Returns:
        True if the signature matches the declared type.
    """
    signatures = IMAGE_SIGNATURES.get(content_type, ())
    matched = any(data.startswith(sig) for sig in signatures)
    if matched and content_type == "image/webp":
        matched = data[8:12] == b"WEBP"

    if not matched:
        logger.warning(
            "upload.signature_mismatch",
            extra={"content_type": content_type, "actual_prefix": data[:12].hex() if data else "EMPTY"},
        )
    return matched


def safe_filename(filename: str | None, content_type: str) -> str:
    """Reduce a client-supplied filename to a safe basename with the right extension.

    Examples:
        >>> safe_filename("../../etc/My Photo.PNG", "image/png")
        'My_Photo.png'
        >>> safe_filename(None, "image/jpeg")
        'image.jpg'
    """
    basename = (filename or "").replace("\\", "/").rsplit("/", 1)[-1]
    stem = basename.rsplit(".", 1)[0] if "." in basename else basename
    stem = _UNSAFE_FILENAME_CHARS.sub("_", stem).strip("._") or "image"
    return f"{stem[:80]}{EXTENSIONS.get(content_type, '')}"


def _too_large(max_bytes: int) -> ValidationAppError:
    details: ErrorDetails = {"maxBytes": max_bytes}
    return ValidationAppError(
        code="FILE_TOO_LARGE",
        message=f"File size exceeds {settings.app.max_upload_size_mb}MB limit",
        details=dict(details),
    )


async def read_upload_file_limited(file: UploadFile) -> bytes:
    """Read an uploaded file in chunks enforcing the max size limit.

    Uses ``file.size`` when the multipart parser reports it, and enforces the
    limit again while reading.

    Raises:
        ValidationAppError: FILE_TOO_LARGE when over the limit, EMPTY_FILE when empty.
    """
    max_bytes = settings.app.max_upload_bytes

    file_size = getattr(file, "size", None)
    if file_size is not None and file_size > max_bytes:
        logger.warning(
            "upload.rejected_by_header",
            extra={"file_size": file_size, "max_bytes": max_bytes},
        )
        raise _too_large(max_bytes)

    size = 0
    chunks: list[bytes] = []
    while True:
        chunk = await file.read(CHUNK_SIZE)
        if not chunk:
            break
        size += len(chunk)
        if size > max_bytes:
            logger.warning(
                "upload.rejected_by_chunked_read",
                extra={"size": size, "max_bytes": max_bytes},
            )
            raise _too_large(max_bytes)
        chunks.append(chunk)

    if size == 0:
        raise ValidationAppError(code="EMPTY_FILE", message="Uploaded file is empty")

    return b"".join(chunks)


async def read_validated_image(file: UploadFile) -> tuple[bytes, str]:
    """Run every upload check and return ``(data, content_type)``.

    Raises:
        ValidationAppError: On type, signature or size violations.
    """
    content_type = validate_image_type(file.content_type)
    data = await read_upload_file_limited(file)
    if not validate_image_signature(data, content_type):
        raise ValidationAppError(
            code="INVALID_FILE_TYPE",
            message="File content does not match its declared image type.",
        )
    return data, content_type
