"""Admin image upload endpoint."""

import logging

from fastapi import APIRouter, Depends, Request, status
from starlette.datastructures import UploadFile

from portfolio_api.adapters.media.base import AbstractMediaStorage
from portfolio_api.api.dependencies import get_media_storage
from portfolio_api.core.auth import AdminIdentity, require_admin
from portfolio_api.core.config import parse_csv, settings
from portfolio_api.core.errors import ErrorDetails, ValidationAppError, validation_failed
from portfolio_api.core.file_validation import read_validated_image, safe_filename
from portfolio_api.schemas.errors import ErrorResponse
from portfolio_api.schemas.upload import UploadResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])

DEFAULT_FOLDER = "projects"


def resolve_folder(folder: object) -> str:
    """Check the requested upload folder against the allow-list.

    Raises:
        ValidationAppError: INVALID_FOLDER for anything not allow-listed.
    """
    allowed = parse_csv(settings.app.upload_folders)
    name = folder.strip() if isinstance(folder, str) and folder.strip() else DEFAULT_FOLDER
    if name not in allowed:
        details: ErrorDetails = {"allowedFolders": allowed}
        raise ValidationAppError(
            code="INVALID_FOLDER",
            message=f"Invalid folder. Allowed folders: {', '.join(allowed)}",
            details=dict(details),
        )
    return name


@router.post(
    "/upload",
    response_model=UploadResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
async def upload_image(
    request: Request,
    identity: AdminIdentity = Depends(require_admin),
    media: AbstractMediaStorage = Depends(get_media_storage),
) -> UploadResponse:
    """Store an image and return its public reference.

    Expects ``multipart/form-data`` with a ``file`` part (JPEG, PNG or WebP,
    at most ``APP_MAX_UPLOAD_SIZE_MB``) and an optional ``folder`` field
    (``projects``, ``profile`` or ``temp``).
    """
    form = await request.form()
    upload = form.get("file")
    if not isinstance(upload, UploadFile):
        raise validation_failed({"file": "An image file is required"})

    folder = resolve_folder(form.get("folder"))
    data, content_type = await read_validated_image(upload)
    filename = safe_filename(upload.filename, content_type)

    stored = await media.save(folder, filename, data, content_type)
    logger.info(
        "admin.image_uploaded",
        extra={"actor": identity.subject, "media_path": stored.path, "size": stored.size},
    )
    return UploadResponse(
        url=stored.url,
        path=stored.path,
        content_type=stored.content_type,
        size=stored.size,
    )
