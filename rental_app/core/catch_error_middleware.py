import logging
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            trace_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:16]
            logger.exception(
                f"Unhandled server error TraceID={trace_id} on {request.url.path}: {e}"
            )
            return JSONResponse(
                {
                    "detail": {
                        "message": "Something went wrong on our end. Please try again.",
                        "trace_id": trace_id,
                    }
                },
                status_code=500,
            )
