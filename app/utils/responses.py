"""
Standardized response utilities
"""

from typing import Any, Optional
from fastapi import HTTPException, status
from fastapi.responses import JSONResponse, PlainTextResponse

from app.schemas.common import StandardResponse, ErrorResponse

# Plain-text outcomes of gated event operations
UNAUTHORIZED_MESSAGE = "Unauthorized"
AUTHORITY_GRANTED_MESSAGE = "Authority granted"
AUTHORITY_GRANT_FAILED_MESSAGE = "Authority grant failed"

def success_response(
    message: str,
    data: Any = None,
    status_code: int = 200
) -> JSONResponse:
    """Create standardized success response"""
    response = StandardResponse(
        success=True,
        message=message,
        data=data
    )
    return JSONResponse(
        content=response.model_dump(mode="json"),
        status_code=status_code
    )

def error_response(
    message: str,
    error_code: Optional[str] = None,
    details: Any = None,
    status_code: int = 400
) -> JSONResponse:
    """Create standardized error response"""
    response = ErrorResponse(
        message=message,
        error_code=error_code,
        details=details
    )
    return JSONResponse(
        content=response.model_dump(mode="json"),
        status_code=status_code
    )

def outcome_text(message: str) -> PlainTextResponse:
    """Plain-text body for an expected, caller-recoverable outcome"""
    return PlainTextResponse(content=message, status_code=status.HTTP_200_OK)

def not_found_error(resource: str = "Resource"):
    """Create not found error"""
    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"{resource} not found"
    )

def rate_limit_error():
    """Create rate limit error"""
    raise HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail="Rate limit exceeded. Please try again later."
    )
