from fastapi import APIRouter, Depends

from portfolio_api.adapters.store.base import AbstractDocumentStore
from portfolio_api.api.dependencies import get_document_store
from portfolio_api.schemas.errors import ErrorResponse
from portfolio_api.schemas.profile import ProfileResponse

router = APIRouter(tags=["Profile"])


@router.get("/profile", response_model=ProfileResponse, responses={404: {"model": ErrorResponse}})
async def get_profile(
    store: AbstractDocumentStore = Depends(get_document_store),
) -> ProfileResponse:
    """Return the site owner's profile."""
    return ProfileResponse(profile=await store.get_profile())
