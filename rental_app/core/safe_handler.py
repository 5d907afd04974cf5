import logging
import uuid
from functools import wraps

from fastapi import HTTPException, Request

from .friendly_msg import get_friendly_message

logger = logging.getLogger(__name__)


def safe_handler(func):
    @wraps(func)
    async def wrapper(*args, **kwargs):
        request: Request | None = None
        for arg in list(args) + list(kwargs.values()):
            if isinstance(arg, Request):
                request = arg
                break

        trace_id = (
            request.headers.get("X-Request-ID") if request else None
        ) or uuid.uuid4().hex[:16]

        try:
            return await func(*args, **kwargs)
        except HTTPException as e:
            if request:
                client_ip = request.client.host if request.client else "unknown"
                logger.warning(
                    f"[HTTPException] TraceID={trace_id} | {e.status_code} - {request.url.path} "
                    f"from {client_ip}: {e.detail}"
                )
            else:
                logger.warning(
                    f"[HTTPException] TraceID={trace_id} | {e.status_code} in {func.__name__}: {e.detail}"
                )
            raise
        except Exception as e:
            if request:
                client_ip = request.client.host if request.client else "unknown"
                logger.error(
                    f"[Unhandled Error] TraceID={trace_id} | in {func.__name__} | Path: {request.url.path} | "
                    f"Client: {client_ip} | Error: {e}",
                    exc_info=True,
                )
            else:
                logger.error(
                    f"[Unhandled Error] TraceID={trace_id} | in {func.__name__}: {e}",
                    exc_info=True,
                )
            raise HTTPException(
                status_code=500,
                detail={"message": get_friendly_message(e), "trace_id": trace_id},
            )

    return wrapper
