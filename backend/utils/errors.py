# backend/utils/errors.py
import logging
from typing import Any, Dict, List, Optional, Sequence

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class NotFoundError(Exception):
    def __init__(self, message: str = "Resource not found"):
        super().__init__(message)
        self.message = message


class ValidationFailed(Exception):
    """Malformed or missing input, reported field by field."""

    def __init__(self, errors: List[Dict[str, str]], message: str = "Invalid data"):
        super().__init__(message)
        self.message = message
        self.errors = errors

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationFailed":
        return cls([{"field": field, "message": message}], message=message)

    @classmethod
    def from_pydantic(cls, exc: ValidationError) -> "ValidationFailed":
        return cls(field_errors(exc.errors()))


class UpstreamServiceError(Exception):
    """A dependency (Gemini, Vinted) failed. The caller may retry by hand."""

    retryable = True

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def payload(self) -> Dict[str, Any]:
        return {"message": self.message, "retryable": self.retryable}


class AIServiceError(UpstreamServiceError):
    pass


def field_errors(errors: Sequence[Dict[str, Any]]) -> List[Dict[str, str]]:
    out = []
    for err in errors:
        # Drop the "body"/"query" prefix FastAPI puts in front of the field name
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path", "form")]
        out.append({"field": ".".join(loc) or "body", "message": err.get("msg", "Invalid value")})
    return out


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationFailed)
    async def _validation_failed(request: Request, exc: ValidationFailed):
        return JSONResponse(status_code=400, content={"message": exc.message, "errors": exc.errors})

    @app.exception_handler(RequestValidationError)
    async def _request_validation(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"message": "Invalid data", "errors": field_errors(exc.errors())},
        )

    @app.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"message": exc.message})

    @app.exception_handler(UpstreamServiceError)
    async def _upstream(request: Request, exc: UpstreamServiceError):
        logger.warning("Upstream failure on %s %s: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=502, content=exc.payload())

    @app.exception_handler(StarletteHTTPException)
    async def _http_exception(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": _detail_message(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"message": "Internal server error"})


def _detail_message(detail: Optional[Any]) -> str:
    if isinstance(detail, str):
        return detail
    return "Request failed"
