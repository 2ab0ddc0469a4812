"""
Application-level error catalog.

Every failure that leaves the repository layer is a `DomainError`. A DomainError belongs to one
`ErrorKind` of a small, closed catalog; the kind fixes the HTTP status, the stable numeric code and
the client-safe base message. Only the message suffix and the wrapped cause vary per occurrence.

The catalog members are shared prototypes: composing operations (`wrap`, `with_message`, ...)
always build a new DomainError and never touch the member or the instance they are called on.

    # raise a plain catalog error
    raise ErrorKind.UNKNOWN_RESOURCE.error()

    # keep the low-level error for server-side diagnostics only
    raise ErrorKind.INTERNAL_ERROR.wrap(exc, "userrepo: insert one user fail")

    # add client-visible context
    raise ErrorKind.INVALID_PARAM.with_messagef("conflict duplicate %s", field)

The cause of a DomainError is never part of its client payload (`to_payload()`); it is kept for
logs and tracebacks.
"""

from __future__ import annotations

import traceback
from enum import Enum
from http import HTTPStatus
from typing import Any

# Stable application error codes.
# INVALID_PARAM_CODE intentionally equals AUTHENTICATION_FAIL_CODE: deployed clients already
# match on 0x0041 for bad input, see DESIGN.md before changing it.
AUTHENTICATION_FAIL_CODE = 0x0041
UNKNOWN_RESOURCE_CODE = 0x0044
INVALID_PARAM_CODE = 0x0041
OPERATION_UNSUPPORTED_CODE = 0x0043
INTERNAL_ERROR_CODE = 0x0050

# Frames kept when capturing the call site of wrap()
_STACK_LIMIT = 16


class AnnotatedError(Exception):
    """
    Diagnostic wrapper around a low-level error.

    - error: the original error (also chained as __cause__)
    - debug: free text describing what the caller was doing
    - stack: call site captured when the error was wrapped
    """

    def __init__(self, error: BaseException, debug: str, stack: traceback.StackSummary | None = None):
        super().__init__(debug, error)
        self.error = error
        self.debug = debug
        self.stack = stack if stack is not None else traceback.StackSummary()
        self.__cause__ = error

    def __str__(self) -> str:
        return f"{self.debug}: {self.error}"

    def format_stack(self) -> str:
        return "".join(self.stack.format())


def _capture_stack() -> traceback.StackSummary:
    # drop this helper and the wrap() frame that called it
    stack = traceback.extract_stack(limit=_STACK_LIMIT + 2)
    return traceback.StackSummary.from_list(stack[:-2])


class DomainError(Exception):
    """
    A single occurrence of an application error.

    Attributes are read-only; use the composing methods to derive a new error.
    """

    def __init__(self, kind: ErrorKind, message: str | None = None, cause: BaseException | None = None):
        self._kind = kind
        self._message = kind.message if message is None else message
        self._cause = cause
        super().__init__(self._message)
        if cause is not None:
            self.__cause__ = cause

    # --- accessors -----------------------------------------------------------------------------

    @property
    def kind(self) -> ErrorKind:
        return self._kind

    @property
    def http_status(self) -> int:
        return int(self._kind.http_status)

    @property
    def code(self) -> int:
        return self._kind.code

    @property
    def message(self) -> str:
        """Client-safe summary."""
        return self._message

    @property
    def cause(self) -> BaseException | None:
        """Wrapped low-level error, for diagnostics only."""
        return self._cause

    # --- composition ---------------------------------------------------------------------------

    def wrap(self, err: BaseException | None, debug: str) -> DomainError | None:
        """
        Return a copy of this error whose cause is `err` annotated with `debug` and the
        current call site. Returns None when `err` is None, so success paths pass through.
        """
        if err is None:
            return None
        cause = AnnotatedError(err, debug, _capture_stack())
        return DomainError(self._kind, self._message, cause)

    def wrapf(self, err: BaseException | None, debugf: str, *args: Any) -> DomainError | None:
        if err is None:
            return None
        cause = AnnotatedError(err, debugf % args if args else debugf, _capture_stack())
        return DomainError(self._kind, self._message, cause)

    def with_message(self, message: str) -> DomainError:
        """Return a copy with `": " + message` appended to the client message."""
        return DomainError(self._kind, f"{self._message}: {message}", self._cause)

    def with_messagef(self, messagef: str, *args: Any) -> DomainError:
        return self.with_message(messagef % args if args else messagef)

    # --- projections ---------------------------------------------------------------------------

    def to_payload(self) -> dict[str, Any]:
        """JSON body for clients. Never contains the cause."""
        return {"errorMsg": self._message, "code": self.code}

    def __str__(self) -> str:
        if self._cause is not None:
            return f"{self._message}: {self._cause}"
        return self._message

    def __repr__(self) -> str:
        return f"DomainError(kind={self._kind.name}, message={self._message!r}, cause={self._cause!r})"


class ErrorKind(Enum):
    """The closed catalog of application errors: (http status, stable code, message)."""

    AUTHENTICATION_FAIL = (
        HTTPStatus.UNAUTHORIZED, AUTHENTICATION_FAIL_CODE, "Invalid credentials or unrecognized keys"
    )
    UNKNOWN_RESOURCE = (
        HTTPStatus.NOT_FOUND, UNKNOWN_RESOURCE_CODE, "Requested resource not available"
    )
    INVALID_PARAM = (
        HTTPStatus.BAD_REQUEST, INVALID_PARAM_CODE, "Invalid or malformed parameters"
    )
    OPERATION_UNSUPPORTED = (
        HTTPStatus.FORBIDDEN, OPERATION_UNSUPPORTED_CODE, "Insufficient Permission Required"
    )
    INTERNAL_ERROR = (
        HTTPStatus.INTERNAL_SERVER_ERROR, INTERNAL_ERROR_CODE, "Internal Server Error"
    )

    def __init__(self, http_status: HTTPStatus, code: int, message: str):
        self.http_status = http_status
        self.code = code
        self.message = message

    def error(self) -> DomainError:
        """A fresh occurrence of this kind with the catalog message."""
        return DomainError(self)

    def wrap(self, err: BaseException | None, debug: str) -> DomainError | None:
        if err is None:
            return None
        return DomainError(self, self.message, AnnotatedError(err, debug, _capture_stack()))

    def wrapf(self, err: BaseException | None, debugf: str, *args: Any) -> DomainError | None:
        if err is None:
            return None
        debug = debugf % args if args else debugf
        return DomainError(self, self.message, AnnotatedError(err, debug, _capture_stack()))

    def with_message(self, message: str) -> DomainError:
        return DomainError(self, f"{self.message}: {message}")

    def with_messagef(self, messagef: str, *args: Any) -> DomainError:
        return self.with_message(messagef % args if args else messagef)


__all__ = [
    "AUTHENTICATION_FAIL_CODE",
    "UNKNOWN_RESOURCE_CODE",
    "INVALID_PARAM_CODE",
    "OPERATION_UNSUPPORTED_CODE",
    "INTERNAL_ERROR_CODE",
    "AnnotatedError",
    "DomainError",
    "ErrorKind",
]
