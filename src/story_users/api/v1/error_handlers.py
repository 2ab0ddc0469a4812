"""
FastAPI exception handler projecting DomainError onto HTTP.

Status and body come from the error itself (`http_status`, `to_payload()`), so the handler
stays the same whatever kind is raised:

    HTTP 404
    {"errorMsg": "Requested resource not available: item not found with specified identifier/field",
     "code": 68}

The wrapped cause is logged for 5xx errors and never sent to the client.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from story_users.domain.errors import DomainError

logger = logging.getLogger(__name__)


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    context = {
        "method": request.method,
        "path": request.url.path,
        "error_kind": exc.kind.name,
        "code": exc.code,
    }
    if exc.http_status >= 500:
        cause = exc.cause
        logger.error(
            "api.domain_error.internal",
            extra=context,
            exc_info=(type(cause), cause, cause.__traceback__) if cause is not None else None,
        )
    else:
        logger.info("api.domain_error.client", extra=context)

    return JSONResponse(status_code=exc.http_status, content=exc.to_payload())


# Call from the app factory
def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
