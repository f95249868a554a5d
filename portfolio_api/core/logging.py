"""Structured logging for the portfolio API.

Events are logged under dotted names (``contact.submitted``,
``auth.rejected``, ``store.project_created``) with context passed through
``extra=``. Handlers attached by ``configure_logging`` stamp each record with
the current request id and redact credentials and visitor contact data
before the record is rendered, as one JSON object per line by default.
"""

from __future__ import annotations

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from logging import LogRecord
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Iterable, Mapping

from portfolio_api.core.config import LogSettings, settings

_request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)

REDACTED = "[REDACTED]"

# Structured fields that must never reach log output verbatim
SENSITIVE_KEYS_DEFAULT: frozenset[str] = frozenset(
    {
        "authorization",
        "token",
        "access_token",
        "id_token",
        "secret",
        "auth_jwt_secret",
        "password",
        "cookie",
        "set-cookie",
        # Visitor-supplied contact data
        "email",
        "sender_email",
        "contact_message",
        "body",
        "origin",
        "client_ip",
    }
)

# Built-in LogRecord attributes that are not user "extra" fields
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "asctime", "stack", "taskName"}


def set_request_id(request_id: str | None) -> None:
    """Store the current request id in a context variable."""
    _request_id_var.set(request_id)


def get_request_id() -> str | None:
    """Fetch the current request id from context."""
    return _request_id_var.get()


def clear_request_id() -> None:
    """Clear any stored request id from context."""
    _request_id_var.set(None)


def _redact_value(value: Any, sensitive_keys: frozenset[str]) -> Any:
    """Recursively redact sensitive keys inside mappings and sequences."""
    if isinstance(value, Mapping):
        return {
            k: REDACTED if str(k).lower() in sensitive_keys else _redact_value(v, sensitive_keys)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return type(value)(_redact_value(v, sensitive_keys) for v in value)
    return value


def extract_extras(record: LogRecord, sensitive_keys: frozenset[str]) -> dict[str, Any]:
    """Collect the ``extra=`` fields of a record with sensitive values redacted.

    Args:
        record: LogRecord to inspect.
        sensitive_keys: Lower-case field names that must be redacted.

    Returns:
        Dict of extra fields safe to emit.
    """
    extras: dict[str, Any] = {}
    for key, value in record.__dict__.items():
        if key in _RECORD_ATTRS or key.startswith("_"):
            continue
        if key.lower() in sensitive_keys:
            extras[key] = REDACTED
        else:
            extras[key] = _redact_value(value, sensitive_keys)
    return extras


NO_REQUEST_ID = "-"


class RequestIdFilter(logging.Filter):
    """Stamp every record with the request id from context (``-`` outside a request)."""

    def filter(self, record: LogRecord) -> bool:  # noqa: D401
        if not getattr(record, "request_id", None):
            record.request_id = get_request_id() or NO_REQUEST_ID
        return True


class SensitiveDataFilter(logging.Filter):
    """Redact sensitive extra fields on the record before any formatter sees it."""

    def __init__(self, sensitive_keys: Iterable[str] | None = None) -> None:
        super().__init__()
        self.sensitive_keys = frozenset(k.lower() for k in (sensitive_keys or SENSITIVE_KEYS_DEFAULT))

    def filter(self, record: LogRecord) -> bool:  # noqa: D401
        for key, value in extract_extras(record, self.sensitive_keys).items():
            setattr(record, key, value)
        return True


class JsonFormatter(logging.Formatter):
    """Format LogRecord as a single JSON line."""

    def __init__(
        self,
        *,
        sensitive_keys: Iterable[str] | None = None,
        ensure_ascii: bool = True,
    ) -> None:
        super().__init__()
        self.sensitive_keys = frozenset(k.lower() for k in (sensitive_keys or SENSITIVE_KEYS_DEFAULT))
        self.ensure_ascii = ensure_ascii

    def format(self, record: LogRecord) -> str:  # noqa: D401
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }

        extras = extract_extras(record, self.sensitive_keys)
        request_id = extras.pop("request_id", None) or get_request_id()
        if request_id and request_id != NO_REQUEST_ID:
            payload["request_id"] = request_id
        payload.update(extras)

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str, ensure_ascii=self.ensure_ascii)


def _build_handler(log_settings: LogSettings) -> logging.Handler:
    """Construct the stdout or (rotating) file handler from settings."""
    if log_settings.output.lower() != "file":
        return logging.StreamHandler(sys.stdout)

    file_path = Path(log_settings.file_path or "logs/portfolio_api.log")
    file_path.parent.mkdir(parents=True, exist_ok=True)
    if log_settings.max_bytes:
        return RotatingFileHandler(
            file_path,
            maxBytes=log_settings.max_bytes,
            backupCount=log_settings.backup_count,
            encoding="utf-8",
        )
    return logging.FileHandler(file_path, encoding="utf-8")


def _select_formatter(log_settings: LogSettings) -> logging.Formatter:
    if log_settings.format.lower() == "plain":
        return logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s request_id=%(request_id)s")
    return JsonFormatter()


def configure_logging(log_settings: LogSettings | None = None, *, debug: bool | None = None) -> None:
    """Install the redacting handler on the root logger.

    ``APP_DEBUG`` forces DEBUG level regardless of ``LOG_LEVEL``.
    """
    cfg = log_settings or settings.log
    if debug is None:
        debug = settings.app.debug

    level = logging.DEBUG if debug else getattr(logging, cfg.level.upper(), logging.INFO)

    handler = _build_handler(cfg)
    # Request id first so the plain format can always reference it
    handler.addFilter(RequestIdFilter())
    handler.addFilter(SensitiveDataFilter())
    handler.setFormatter(_select_formatter(cfg))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)

    # uvicorn installs its own handlers; keep its records off the root handler
    for name in ("uvicorn", "uvicorn.access"):
        logging.getLogger(name).propagate = False
    # Multipart parsing is chatty at DEBUG
    logging.getLogger("python_multipart").setLevel(max(level, logging.INFO))
