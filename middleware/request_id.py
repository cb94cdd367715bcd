"""
Request ID middleware.

Every request gets an id (client supplied X-Request-ID or a fresh UUID) that is
echoed back in the response and stamped on every log record emitted while the
request is handled. Payment providers retrying a webhook can be correlated
through it.
"""

import uuid
import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware that adds a unique request ID to each request.

    1. Take X-Request-ID from the client or generate a UUID
    2. Store it in request.state
    3. Attach it to log records through the record factory
    4. Return it in the X-Request-ID response header
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID")

        if not request_id:
            request_id = str(uuid.uuid4())

        request.state.request_id = request_id

        old_factory = logging.getLogRecordFactory()

        def record_factory(*args, **kwargs):
            record = old_factory(*args, **kwargs)
            record.request_id = request_id
            return record

        logging.setLogRecordFactory(record_factory)

        try:
            response: Response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            logging.setLogRecordFactory(old_factory)



def get_request_id(request: Request) -> str:
    """
    Request ID of the current request, or "no-request-id" outside the middleware.
    """
    return getattr(request.state, "request_id", "no-request-id")
