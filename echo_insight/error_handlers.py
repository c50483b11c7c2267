import logging
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from echo_insight.core.models import AnalysisError, ErrorKind

logger = logging.getLogger("echo_insight.errors")

ANALYSIS_STATUS = {
    ErrorKind.invalid_image_dimensions: 400,
    ErrorKind.unreadable_image: 400,
    ErrorKind.unknown_character: 422,
    ErrorKind.ocr_backend_failure: 502,
}


def register_error_handlers(app: FastAPI):
    @app.exception_handler(AnalysisError)
    async def analysis_exc_handler(request: Request, exc: AnalysisError):
        status = ANALYSIS_STATUS.get(exc.kind, 400)
        log = logger.error if status >= 500 else logger.warning
        log("AnalysisError path=%s kind=%s detail=%r", request.url.path, exc.kind.value, exc.message)
        return JSONResponse(status_code=status, content=exc.to_api())

    @app.exception_handler(HTTPException)
    async def http_exc_handler(request: Request, exc: HTTPException):
        logger.warning(
            "HTTPException path=%s status=%s detail=%r",
            request.url.path, exc.status_code, exc.detail
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail) if exc.detail else "HTTP error"},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exc_handler(request: Request, exc: RequestValidationError):
        logger.warning(
            "ValidationError path=%s errors=%s",
            request.url.path, exc.errors()
        )
        return JSONResponse(
            status_code=422,
            content={"error": "Validation error", "details": exc.errors()},
        )

    @app.exception_handler(Exception)
    async def unhandled_exc_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error at path=%s", request.url.path)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error"},
        )
