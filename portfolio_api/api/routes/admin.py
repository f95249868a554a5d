"""Admin endpoints for projects, the profile and inquiries.

Every route resolves the caller through ``require_admin`` before reading the
body, so unauthenticated requests always get the same 401 regardless of
what they sent. Admin reads are never filtered by visibility.
"""

import logging

from fastapi import APIRouter, Depends, Request, status

from portfolio_api.adapters.store.base import AbstractDocumentStore
from portfolio_api.api.dependencies import get_document_store, read_json_object
from portfolio_api.core.auth import AdminIdentity, require_admin
from portfolio_api.core.validation import (
    parse_inquiry_update,
    parse_profile_update,
    parse_project_create,
    parse_project_update,
)
from portfolio_api.schemas.errors import ErrorResponse
from portfolio_api.schemas.inquiry import InquiryListResponse, InquiryResponse
from portfolio_api.schemas.profile import ProfileResponse
from portfolio_api.schemas.project import DeleteResponse, ProjectListResponse, ProjectResponse

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    responses={401: {"model": ErrorResponse}},
)

_NOT_FOUND = {404: {"model": ErrorResponse}}
_INVALID = {400: {"model": ErrorResponse}}


# Projects


@router.get("/projects", response_model=ProjectListResponse)
async def list_all_projects(
    identity: AdminIdentity = Depends(require_admin),
    store: AbstractDocumentStore = Depends(get_document_store),
) -> ProjectListResponse:
    """List every project, drafts included."""
    projects = await store.list_projects(include_unpublished=True)
    return ProjectListResponse(projects=projects)


@router.get("/projects/{project_id}", response_model=ProjectResponse, responses=_NOT_FOUND)
async def get_any_project(
    project_id: str,
    identity: AdminIdentity = Depends(require_admin),
    store: AbstractDocumentStore = Depends(get_document_store),
) -> ProjectResponse:
    """Fetch a project whatever its visibility."""
    project = await store.get_project(project_id, include_unpublished=True)
    return ProjectResponse(project=project)


@router.post(
    "/projects",
    response_model=ProjectResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_INVALID,
)
async def create_project(
    request: Request,
    identity: AdminIdentity = Depends(require_admin),
    store: AbstractDocumentStore = Depends(get_document_store),
) -> ProjectResponse:
    data = parse_project_create(await read_json_object(request))
    project = await store.create_project(data)
    logger.info(
        "admin.project_created",
        extra={"actor": identity.subject, "project_id": project.id},
    )
    return ProjectResponse(project=project)


@router.put(
    "/projects/{project_id}",
    response_model=ProjectResponse,
    responses={**_INVALID, **_NOT_FOUND},
)
async def update_project(
    project_id: str,
    request: Request,
    identity: AdminIdentity = Depends(require_admin),
    store: AbstractDocumentStore = Depends(get_document_store),
) -> ProjectResponse:
    """Apply a partial update; ``updatedAt`` is always refreshed."""
    patch = parse_project_update(await read_json_object(request))
    project = await store.update_project(project_id, patch)
    logger.info(
        "admin.project_updated",
        extra={
            "actor": identity.subject,
            "project_id": project_id,
            "changed_fields": sorted(patch.model_fields_set),
        },
    )
    return ProjectResponse(project=project)


@router.delete("/projects/{project_id}", response_model=DeleteResponse, responses=_NOT_FOUND)
async def delete_project(
    project_id: str,
    identity: AdminIdentity = Depends(require_admin),
    store: AbstractDocumentStore = Depends(get_document_store),
) -> DeleteResponse:
    await store.delete_project(project_id)
    logger.info("admin.project_deleted", extra={"actor": identity.subject, "project_id": project_id})
    return DeleteResponse(id=project_id)


# Profile


@router.put("/profile", response_model=ProfileResponse, responses={**_INVALID, **_NOT_FOUND})
async def update_profile(
    request: Request,
    identity: AdminIdentity = Depends(require_admin),
    store: AbstractDocumentStore = Depends(get_document_store),
) -> ProfileResponse:
    patch = parse_profile_update(await read_json_object(request))
    profile = await store.update_profile(patch)
    logger.info(
        "admin.profile_updated",
        extra={"actor": identity.subject, "changed_fields": sorted(patch.model_fields_set)},
    )
    return ProfileResponse(profile=profile)


# Inquiries


@router.get("/inquiries", response_model=InquiryListResponse)
async def list_inquiries(
    identity: AdminIdentity = Depends(require_admin),
    store: AbstractDocumentStore = Depends(get_document_store),
) -> InquiryListResponse:
    """List contact submissions, newest first."""
    return InquiryListResponse(inquiries=await store.list_inquiries())


@router.get("/inquiries/{inquiry_id}", response_model=InquiryResponse, responses=_NOT_FOUND)
async def get_inquiry(
    inquiry_id: str,
    identity: AdminIdentity = Depends(require_admin),
    store: AbstractDocumentStore = Depends(get_document_store),
) -> InquiryResponse:
    return InquiryResponse(inquiry=await store.get_inquiry(inquiry_id))


@router.patch(
    "/inquiries/{inquiry_id}",
    response_model=InquiryResponse,
    responses={**_INVALID, **_NOT_FOUND},
)
async def update_inquiry(
    inquiry_id: str,
    request: Request,
    identity: AdminIdentity = Depends(require_admin),
    store: AbstractDocumentStore = Depends(get_document_store),
) -> InquiryResponse:
    """Mark an inquiry read and/or replied. Sender fields cannot change."""
    patch = parse_inquiry_update(await read_json_object(request))
    inquiry = await store.update_inquiry(inquiry_id, patch)
    logger.info(
        "admin.inquiry_updated",
        extra={"actor": identity.subject, "inquiry_id": inquiry_id, "read": inquiry.read, "replied": inquiry.replied},
    )
    return InquiryResponse(inquiry=inquiry)


@router.delete("/inquiries/{inquiry_id}", response_model=DeleteResponse, responses=_NOT_FOUND)
async def delete_inquiry(
    inquiry_id: str,
    identity: AdminIdentity = Depends(require_admin),
    store: AbstractDocumentStore = Depends(get_document_store),
) -> DeleteResponse:
    await store.delete_inquiry(inquiry_id)
    logger.info("admin.inquiry_deleted", extra={"actor": identity.subject, "inquiry_id": inquiry_id})
    return DeleteResponse(id=inquiry_id)
