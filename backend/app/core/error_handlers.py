import logging
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.errors import InvalidInput, ServiceError

logger = logging.getLogger("canvas_shelf.middleware")


def _error_body(request: Request, message: str, code: str) -> dict:
    return {"error": message, "code": code, "path": request.url.path}


def _describe_invalid(errors) -> str:
    fields = []
    for error in errors:
        if error.get("type") == "json_invalid":
            return "Malformed request body"
        name = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        if name and name not in fields:
            fields.append(name)
    if not fields:
        return "Malformed request body"
    return "Invalid fields: " + ", ".join(fields)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "Unhandled exception",
                extra={"path": request.url.path, "method": request.method},
            )
            response = JSONResponse(
                status_code=500,
                content=_error_body(request, "Internal server error", "internal_error"),
            )

        duration_ms = (time.perf_counter() - start) * 1000
        response.headers["X-Request-Duration-ms"] = f"{duration_ms:.2f}"
        logger.info(
            "Request completed",
            extra={
                "path": request.url.path,
                "method": request.method,
                "duration_ms": duration_ms,
                "status_code": response.status_code,
            },
        )
        return response


def register_error_handlers(app: FastAPI) -> None:
    app.add_middleware(RequestLoggingMiddleware)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        logger.info(
            "Request validation error",
            extra={"path": request.url.path, "method": request.method, "errors": errors},
        )
        return JSONResponse(
            status_code=InvalidInput.status_code,
            content=_error_body(request, _describe_invalid(errors), InvalidInput.code),
        )

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        if exc.status_code >= 500:
            # Detail was already logged where the failure was caught
            logger.error(
                "Service dependency failure",
                extra={"path": request.url.path, "method": request.method, "error": exc.message},
            )
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(request, exc.message, exc.code),
        )
