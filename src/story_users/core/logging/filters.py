"""
Logging filters.

- RequestIdFilter: stamps `record.request_id` from a contextvar set per HTTP request, so any
  formatter can reference `%(request_id)s`. Falls back to "-" outside a request.
- RedactFilter: masks sensitive attributes passed through `extra={...}` before any handler
  writes them. User emails count as sensitive here.

contextvars (not threading.local) keep the id attached across `await` boundaries:

    token = set_request_id("3f2a...")
    try:
        logger.info("userrepo.insert.success")   # record.request_id == "3f2a..."
    finally:
        reset_request_id(token)
"""

import contextvars
import logging
from logging import LogRecord

REDACTED = "***REDACTED***"

_request_id_ctx: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)


def set_request_id(request_id: str | None) -> contextvars.Token:
    """Set the request id for the current context; keep the token to reset it."""
    return _request_id_ctx.set(request_id)


def reset_request_id(token: contextvars.Token) -> None:
    _request_id_ctx.reset(token)


def get_request_id() -> str | None:
    return _request_id_ctx.get()


class RequestIdFilter(logging.Filter):
    """
    Ensure every record has `request_id`: an explicit `extra={"request_id": ...}` wins,
    then the contextvar, then "-". Never drops a record.
    """

    def filter(self, record: LogRecord) -> bool:
        record.request_id = getattr(record, "request_id", None) or get_request_id() or "-"
        return True


class RedactFilter(logging.Filter):
    """Replace the value of sensitive record attributes (case-insensitive key match)."""

    SENSITIVE = frozenset({
        "password",
        "secret",
        "token",
        "access_token",
        "refresh_token",
        "authorization",
        "email",
        "mysql_password",
    })

    def filter(self, record: LogRecord) -> bool:
        for key in list(record.__dict__):
            if key.lower() in self.SENSITIVE:
                record.__dict__[key] = REDACTED
        return True
