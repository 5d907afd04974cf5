from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class ValidationErrorHandler:
    """Flattens request validation failures into a stable 422 payload."""

    @staticmethod
    def field_name(loc) -> str:
        parts = [str(p) for p in (loc or ()) if p not in ("body", "query", "path")]
        return ".".join(parts) or "request"

    async def __call__(self, request: Request, exc: RequestValidationError):
        errors = [
            {
                "field": self.field_name(err.get("loc")),
                "loc": err.get("loc"),
                "msg": str(err.get("msg")),
                "type": err.get("type"),
            }
            for err in exc.errors()
        ]

        return JSONResponse(
            status_code=422,
            content={
                "success": False,
                "error": "Validation failed",
                "details": errors,
            },
        )
