"""Exception handlers for the FastAPI application."""
import logging
from fastapi import Request, status
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.responses import JSONResponse

from regbot.exceptions import RecordStoreError, TextGenerationError

logger = logging.getLogger(__name__)


def create_error_response(status_code: int, message: str) -> JSONResponse:
    """Create an error response in the API's {"error": ...} format."""
    return JSONResponse(status_code=status_code, content={"error": message})


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions raised by the routes."""
    return create_error_response(exc.status_code, str(exc.detail))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Reject malformed request bodies."""
    return create_error_response(status.HTTP_400_BAD_REQUEST, "Invalid request body")


async def record_store_exception_handler(request: Request, exc: RecordStoreError) -> JSONResponse:
    """Persistence failures are fatal to the request."""
    logger.error(f"Failed to save registration: {exc.message}", extra={"path": request.url.path})
    return create_error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to save registration")


async def text_generation_exception_handler(request: Request, exc: TextGenerationError) -> JSONResponse:
    """The language model is unavailable."""
    logger.error(f"OpenAI request failed: {exc.message}", extra={"path": request.url.path})
    return create_error_response(
        status.HTTP_503_SERVICE_UNAVAILABLE,
        "OpenAI request failed; please try again later."
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all other unhandled exceptions with error logging."""
    logger.exception(
        "Unhandled exception occurred",
        extra={"path": request.url.path, "method": request.method}
    )
    return create_error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
