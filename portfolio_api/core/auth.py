"""Admin bearer-token authentication (the auth gate).

Every admin-scoped handler depends on ``require_admin``, which turns the raw
``Authorization`` header into an ``AdminIdentity`` or a single uniform
failure. Missing headers, malformed headers, bad signatures, expired tokens
and non-admin subjects all produce the same 401 body; only the server log
records which case occurred.

Design principles:
- No ambient identity: the resolved identity is returned to the handler as a
  parameter, never stored in module or process state.
- Configuration-driven: secret, issuer, audience and the admin allow-list
  come from environment variables.
- Testable: ``resolve_admin_identity`` is plain logic with no FastAPI types.
"""

from __future__ import annotations

import hashlib
import logging
import time
from dataclasses import dataclass, field
from typing import Annotated, Any

import jwt
from fastapi import Header

from portfolio_api.core.config import settings
from portfolio_api.core.errors import auth_error

logger = logging.getLogger(__name__)

BEARER_PREFIX = "bearer "


@dataclass(frozen=True)
class AdminIdentity:
    """Caller identity resolved from a verified bearer token."""

    subject: str
    email: str | None = None
    claims: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)


def _token_fingerprint(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()[:16]


def _reject(reason: str, **context: Any):
    """Log the internal failure reason and return the uniform error."""
    logger.warning("auth.rejected", extra={"reason": reason, **context})
    return auth_error()


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token from a ``Bearer <token>`` header value, if well-formed.

    Examples:
        >>> extract_bearer_token("Bearer abc.def.ghi")
        'abc.def.ghi'
        >>> extract_bearer_token("Basic dXNlcjpwYXNz") is None
        True
    """
    if not authorization or not authorization.lower().startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token or " " in token:
        return None
    return token


def resolve_admin_identity(authorization: str | None) -> AdminIdentity:
    """Resolve an ``Authorization`` header into an admin identity.

    Args:
        authorization: Raw header value, possibly absent.

    Returns:
        AdminIdentity for a valid, unexpired token whose subject is an admin.

    Raises:
        AuthenticationAppError: For every failure, with identical code and message.
    """
    if authorization is None or not authorization.strip():
        raise _reject("missing_header")

    token = extract_bearer_token(authorization)
    if token is None:
        raise _reject("malformed_header")

    secret = settings.app.auth_jwt_secret
    if not secret:
        logger.error("auth.not_configured", extra={"hint": "Set APP_AUTH_JWT_SECRET"})
        raise auth_error()

    fingerprint = _token_fingerprint(token)
    options = {"require": ["exp", "sub"]}
    try:
        claims = jwt.decode(
            token,
            secret,
            algorithms=[settings.app.auth_jwt_algorithm],
            audience=settings.app.auth_audience,
            issuer=settings.app.auth_issuer,
            options=options,
        )
    except jwt.ExpiredSignatureError:
        raise _reject("expired_token", token_hash=fingerprint) from None
    except jwt.InvalidTokenError as exc:
        raise _reject("invalid_token", token_hash=fingerprint, error_type=type(exc).__name__) from None

    subject = str(claims["sub"])
    email = claims.get("email")
    allowed = settings.app.admin_subjects
    if allowed and subject not in allowed and email not in allowed:
        raise _reject("not_admin", token_hash=fingerprint)

    logger.info("auth.success", extra={"token_hash": fingerprint, "subject": subject})
    return AdminIdentity(subject=subject, email=email, claims=claims)


async def require_admin(
    authorization: Annotated[str | None, Header()] = None,
) -> AdminIdentity:
    """FastAPI dependency guarding admin routes.

    Usage:
        @router.post("/admin/projects")
        async def create(identity: AdminIdentity = Depends(require_admin)): ...

    Raises:
        AuthenticationAppError: 401 with a generic body on any failure.
    """
    return resolve_admin_identity(authorization)


def issue_admin_token(
    subject: str,
    *,
    email: str | None = None,
    ttl_seconds: int | None = None,
    now: float | None = None,
) -> str:
    """Mint a signed admin token (bootstrap tooling and tests).

    Raises:
        ValueError: If no signing secret is configured.
    """
    secret = settings.app.auth_jwt_secret
    if not secret:
        raise ValueError("APP_AUTH_JWT_SECRET is required to issue tokens")

    issued_at = int(now if now is not None else time.time())
    payload: dict[str, Any] = {
        "sub": subject,
        "iat": issued_at,
        "exp": issued_at + (ttl_seconds or settings.app.auth_token_ttl_seconds),
    }
    if email:
        payload["email"] = email
    if settings.app.auth_issuer:
        payload["iss"] = settings.app.auth_issuer
    if settings.app.auth_audience:
        payload["aud"] = settings.app.auth_audience

    return jwt.encode(payload, secret, algorithm=settings.app.auth_jwt_algorithm)
