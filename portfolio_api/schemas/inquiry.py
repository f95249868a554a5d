"""Pydantic schemas for contact-form inquiries."""

from __future__ import annotations

from datetime import datetime
from typing import List

from portfolio_api.schemas.common import CamelModel


class ContactSubmission(CamelModel):
    """Sender-supplied fields of a contact form, already validated and trimmed."""

    name: str
    email: str
    subject: str
    message: str


class Inquiry(ContactSubmission):
    """A stored inquiry. Only ``read`` and ``replied`` change after creation."""

    id: str
    origin: str
    created_at: datetime
    read: bool = False
    replied: bool = False


class InquiryUpdate(CamelModel):
    read: bool | None = None
    replied: bool | None = None


class ContactResponse(CamelModel):
    success: bool = True
    message: str = "Inquiry submitted successfully"


class InquiryListResponse(CamelModel):
    inquiries: List[Inquiry]


class InquiryResponse(CamelModel):
    inquiry: Inquiry
