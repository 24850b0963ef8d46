from typing import Any, Optional

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .domain.errors import BookingError


def create_error_response(message: str, error: Optional[str] = None) -> dict:
    """Legacy envelope for failures"""
    return {
        "success": False,
        "message": message,
        "error": error or message,
    }

def create_success_response(message: str, data: Any = None) -> dict:
    """Legacy envelope for successes"""
    body = {"success": True, "message": message}
    if data is not None:
        body["data"] = data
    return body

async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    """Domain outcomes keep the legacy contract: HTTP 200 with success=false"""
    return JSONResponse(status_code=200, content=create_error_response(exc.message, exc.code))

async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(status_code=422, content=create_error_response(message, "validation_error"))

async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Custom exception handler for HTTPException"""
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(str(exc.detail)),
    )
