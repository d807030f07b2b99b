from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from starlette.exceptions import HTTPException as StarletteHTTPException

from sms_inspector.core.exceptions import SmsInspectorError
from sms_inspector.core.logging import get_logger
from sms_inspector.schemas.response import ErrorResponse
from sms_inspector.core.config import settings

logger = get_logger(__name__)

def add_exception_handlers(app: FastAPI):
    """
    Registers exception handlers with the FastAPI app.
    Every failure leaves the API as {"error", "code", "details"}.
    """
    @app.exception_handler(SmsInspectorError)
    async def sms_inspector_exception_handler(request: Request, exc: SmsInspectorError):
        if exc.status_code >= 500:
            logger.error(f"{exc.code}: {exc.message}", extra={"action": request.url.path})
        else:
            logger.info(f"{exc.code}: {exc.message}", extra={"action": request.url.path})
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=exc.message,
                code=exc.code,
                details=exc.details
            ).model_dump()
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """
        Handles standard HTTP exceptions (404, 405, etc.)
        """
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=str(exc.detail),
                code="HTTP_ERROR",
                details=None
            ).model_dump()
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """
        Handles Pydantic validation errors.
        """
        return JSONResponse(
            status_code=422,
            content=ErrorResponse(
                error="Input validation failed",
                code="VALIDATION_ERROR",
                details=jsonable_encoder(exc.errors())
            ).model_dump()
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Catch-all for unhandled exceptions.
        """
        logger.error(
            f"Unhandled exception: {str(exc)}",
            extra={
                "method": request.method,
                "url": str(request.url),
                "client": request.client.host if request.client else "unknown"
            },
            exc_info=True
        )

        message = "An internal error occurred. Please try again later." if settings.is_production else str(exc)

        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error=message,
                code="INTERNAL_ERROR",
                details=None
            ).model_dump()
        )
