"""Request payload validation.

This module is the boundary where untyped JSON bodies become typed models.
The ``validate_*`` functions are pure predicates returning a field → message
map (empty on success); the ``parse_*`` functions wrap them and either
return a typed schema instance or raise ``ValidationAppError`` listing every
offending field.
"""

from __future__ import annotations

import re
from typing import Any, Mapping

from portfolio_api.core.config import settings
from portfolio_api.core.errors import validation_failed
from portfolio_api.schemas.inquiry import ContactSubmission, InquiryUpdate
from portfolio_api.schemas.profile import ProfileUpdate
from portfolio_api.schemas.project import ProjectCreate, ProjectUpdate

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

CONTACT_MAX_LENGTHS = {
    "name": 100,
    "email": 254,
    "subject": 200,
    "message": 5000,
}

CONTACT_REQUIRED_MESSAGES = {
    "name": "Please enter your name",
    "email": "Please enter your email address",
    "subject": "Please enter a subject",
    "message": "Please enter a message",
}

PROJECT_REQUIRED_TEXT = ("title", "description", "fullDescription", "thumbnail", "category")
PROJECT_OPTIONAL_URLS = ("liveUrl", "githubUrl")
PROJECT_FIELDS = frozenset(
    PROJECT_REQUIRED_TEXT
    + PROJECT_OPTIONAL_URLS
    + ("images", "technologies", "featured", "published", "order")
)
READ_ONLY_FIELDS = frozenset({"id", "createdAt", "updatedAt"})

PROFILE_TEXT_FIELDS = ("name", "title", "bio")
PROFILE_OPTIONAL_TEXT = ("email", "linkedin", "github", "twitter", "resumeUrl", "avatar")
PROFILE_FIELDS = frozenset(PROFILE_TEXT_FIELDS + PROFILE_OPTIONAL_TEXT + ("skills", "experience"))

INQUIRY_FLAGS = frozenset({"read", "replied"})


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def _is_string_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def _is_int(value: Any) -> bool:
    # bool is an int subclass; ``true`` is not a valid display order
    return isinstance(value, int) and not isinstance(value, bool)


def validate_email(value: Any) -> bool:
    """Check that ``value`` looks like ``local@domain.tld``.

    Only the shape is checked: a non-empty local part, a single ``@`` and a
    domain containing at least one dot. No DNS verification is performed.

    Examples:
        >>> validate_email("ada@example.com")
        True
        >>> validate_email("ada.example.com")
        False
        >>> validate_email("ada@localhost")
        False
    """
    if not isinstance(value, str):
        return False
    return EMAIL_PATTERN.match(value) is not None


def validate_contact_form(fields: Mapping[str, Any]) -> dict[str, str]:
    """Validate a contact form submission.

    Args:
        fields: Raw request body (``name``, ``email``, ``subject``, ``message``).

    Returns:
        Map of field name to error message; empty when the form is valid.
    """
    errors: dict[str, str] = {}
    min_chars = settings.app.contact_message_min_chars

    for name, required_message in CONTACT_REQUIRED_MESSAGES.items():
        value = fields.get(name)
        if _is_blank(value):
            errors[name] = required_message
            continue

        stripped = value.strip()
        if len(stripped) > CONTACT_MAX_LENGTHS[name]:
            errors[name] = f"Must be at most {CONTACT_MAX_LENGTHS[name]} characters"
        elif name == "email" and not validate_email(stripped):
            errors[name] = "Please enter a valid email address"
        elif name == "message" and len(stripped) < min_chars:
            errors[name] = f"Message must be at least {min_chars} characters"

    return errors


def parse_contact_form(fields: Mapping[str, Any]) -> ContactSubmission:
    """Validate and convert a raw contact form body into a typed submission.

    Raises:
        ValidationAppError: If any field is missing or malformed.
    """
    errors = validate_contact_form(fields)
    if errors:
        raise validation_failed(errors)

    return ContactSubmission(
        name=fields["name"].strip(),
        email=fields["email"].strip(),
        subject=fields["subject"].strip(),
        message=fields["message"].strip(),
    )


def validate_project_fields(fields: Mapping[str, Any], *, partial: bool = False) -> dict[str, str]:
    """Validate a project payload.

    Args:
        fields: Raw request body keyed by wire (camelCase) names.
        partial: When True (updates), only the fields present are checked.

    Returns:
        Map of field name to error message; empty when the payload is valid.
    """
    errors: dict[str, str] = {}

    for key in fields:
        if key in READ_ONLY_FIELDS:
            errors[key] = "Field is read-only"
        elif key not in PROJECT_FIELDS:
            errors[key] = "Unknown field"

    for key in PROJECT_REQUIRED_TEXT:
        if partial and key not in fields:
            continue
        if _is_blank(fields.get(key)):
            errors[key] = f"{key} is required"

    for key in PROJECT_OPTIONAL_URLS:
        value = fields.get(key)
        if value is not None and not isinstance(value, str):
            errors[key] = "Must be a string"

    if "technologies" in fields or not partial:
        if not _is_string_list(fields.get("technologies")):
            errors["technologies"] = "Technologies must be an array of strings"

    if fields.get("images") is not None and not _is_string_list(fields["images"]):
        errors["images"] = "Images must be an array of strings"

    for key in ("featured", "published"):
        if fields.get(key) is not None and not isinstance(fields[key], bool):
            errors[key] = "Must be a boolean"

    if fields.get("order") is not None and not _is_int(fields["order"]):
        errors["order"] = "Must be an integer"

    return errors


def _clean_project_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
    cleaned: dict[str, Any] = {}
    for key, value in fields.items():
        if key in PROJECT_REQUIRED_TEXT:
            cleaned[key] = value.strip()
        elif key in PROJECT_OPTIONAL_URLS:
            # Blank URLs clear the link
            cleaned[key] = value.strip() if isinstance(value, str) and value.strip() else None
        elif value is not None:
            cleaned[key] = value
    return cleaned


def parse_project_create(fields: Mapping[str, Any]) -> ProjectCreate:
    """Validate and convert a raw body into a ``ProjectCreate``.

    Raises:
        ValidationAppError: If required fields are missing or mistyped.
    """
    errors = validate_project_fields(fields)
    if errors:
        raise validation_failed(errors)
    return ProjectCreate.model_validate(_clean_project_fields(fields))


def parse_project_update(fields: Mapping[str, Any]) -> ProjectUpdate:
    """Validate and convert a raw body into a partial ``ProjectUpdate``.

    Fields absent from the body are left unset so the store only touches
    what the caller sent.

    Raises:
        ValidationAppError: If a present field is mistyped or unknown.
    """
    errors = validate_project_fields(fields, partial=True)
    if errors:
        raise validation_failed(errors)
    return ProjectUpdate.model_validate(_clean_project_fields(fields))


def validate_profile_fields(fields: Mapping[str, Any]) -> dict[str, str]:
    """Validate a partial profile update."""
    errors: dict[str, str] = {}

    for key in fields:
        if key not in PROFILE_FIELDS:
            errors[key] = "Field is read-only" if key == "updatedAt" else "Unknown field"

    for key in ("name", "title"):
        if key in fields and _is_blank(fields[key]):
            errors[key] = f"{key} is required"

    if "bio" in fields and not isinstance(fields["bio"], str):
        errors["bio"] = "Must be a string"

    for key in PROFILE_OPTIONAL_TEXT:
        value = fields.get(key)
        if value is not None and not isinstance(value, str):
            errors[key] = "Must be a string"

    email = fields.get("email")
    if isinstance(email, str) and email.strip() and not validate_email(email.strip()):
        errors["email"] = "Please enter a valid email address"

    if "skills" in fields and not _is_string_list(fields["skills"]):
        errors["skills"] = "Skills must be an array of strings"

    experience = fields.get("experience")
    if "experience" in fields and not (
        isinstance(experience, list) and all(isinstance(item, dict) for item in experience)
    ):
        errors["experience"] = "Experience must be an array of objects"

    return errors


def parse_profile_update(fields: Mapping[str, Any]) -> ProfileUpdate:
    """Validate and convert a raw body into a partial ``ProfileUpdate``.

    Raises:
        ValidationAppError: If a present field is mistyped or unknown.
    """
    errors = validate_profile_fields(fields)
    if errors:
        raise validation_failed(errors)

    cleaned = {
        key: value.strip() if isinstance(value, str) else value
        for key, value in fields.items()
    }
    return ProfileUpdate.model_validate(cleaned)


def parse_inquiry_update(fields: Mapping[str, Any]) -> InquiryUpdate:
    """Validate an admin inquiry patch; only ``read`` and ``replied`` may change.

    Raises:
        ValidationAppError: If any other field is present or a flag is not boolean.
    """
    errors: dict[str, str] = {}
    for key, value in fields.items():
        if key not in INQUIRY_FLAGS:
            errors[key] = "Field is immutable"
        elif not isinstance(value, bool):
            errors[key] = "Must be a boolean"
    if not fields:
        errors["body"] = "Provide read and/or replied"
    if errors:
        raise validation_failed(errors)
    return InquiryUpdate.model_validate(dict(fields))
