import re
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from .filters import reset_request_id, set_request_id

REQUEST_ID_HEADER = "X-Request-ID"
# Incoming ids end up in log lines: no whitespace/newlines, bounded length
_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def _incoming_request_id(request: Request) -> str | None:
    rid = request.headers.get(REQUEST_ID_HEADER)
    if rid and _VALID_REQUEST_ID.match(rid):
        return rid
    return None


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Give every request an id for log correlation.

    Reuses a well-formed `X-Request-ID` header, otherwise generates a UUID4. The id is stored
    in the request-id contextvar for the duration of the request and echoed on the response.
    """

    async def dispatch(self, request: Request, call_next):
        rid = _incoming_request_id(request) or str(uuid.uuid4())
        token = set_request_id(rid)
        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = rid
            return response
        finally:
            reset_request_id(token)
