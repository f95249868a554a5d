"""Public contact form endpoint.

Stages run strictly in order and any of them may short-circuit:
validate → rate-check → store → respond.
"""

import logging

from fastapi import APIRouter, Depends, Request, status

from portfolio_api.adapters.rate_limit.base import AbstractRateLimiter
from portfolio_api.adapters.store.base import AbstractDocumentStore
from portfolio_api.api.dependencies import get_document_store, read_json_object
from portfolio_api.core.rate_limit import (
    enforce_contact_rate_limit,
    get_client_origin,
    get_rate_limiter,
)
from portfolio_api.core.validation import parse_contact_form
from portfolio_api.schemas.errors import ErrorResponse
from portfolio_api.schemas.inquiry import ContactResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Contact"])


@router.post(
    "/contact",
    response_model=ContactResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 429: {"model": ErrorResponse}},
)
async def submit_contact(
    request: Request,
    store: AbstractDocumentStore = Depends(get_document_store),
    limiter: AbstractRateLimiter = Depends(get_rate_limiter),
) -> ContactResponse:
    """Accept a contact form submission from an anonymous visitor.

    Body: ``{"name", "email", "subject", "message"}``.

    Raises:
        ValidationAppError: 400 listing every offending field.
        RateLimitAppError: 429 when the origin already sent the maximum
            number of messages inside the window.
    """
    payload = await read_json_object(request)
    submission = parse_contact_form(payload)

    origin = get_client_origin(request)
    await enforce_contact_rate_limit(limiter, origin)

    inquiry = await store.create_inquiry(submission, origin)
    logger.info("contact.submitted", extra={"inquiry_id": inquiry.id})
    return ContactResponse()
