"""Public project endpoints. Only published projects are ever visible here."""

from fastapi import APIRouter, Depends

from portfolio_api.adapters.store.base import AbstractDocumentStore
from portfolio_api.api.dependencies import get_document_store
from portfolio_api.schemas.errors import ErrorResponse
from portfolio_api.schemas.project import ProjectListResponse, ProjectResponse

router = APIRouter(tags=["Projects"])


@router.get("/projects", response_model=ProjectListResponse)
async def list_projects(
    store: AbstractDocumentStore = Depends(get_document_store),
) -> ProjectListResponse:
    """List published projects, newest first."""
    projects = await store.list_published()
    return ProjectListResponse(projects=projects)


@router.get(
    "/projects/{project_id}",
    response_model=ProjectResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_project(
    project_id: str,
    store: AbstractDocumentStore = Depends(get_document_store),
) -> ProjectResponse:
    """Fetch one published project.

    Drafts answer exactly like missing ids (404 NOT_FOUND), so anonymous
    callers cannot discover unpublished content.
    """
    project = await store.get_project(project_id)
    return ProjectResponse(project=project)
