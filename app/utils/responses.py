"""
Standardized response utilities
"""

import logging
from typing import Any, Optional
from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse

from app.schemas.common import StandardResponse, ErrorResponse
from app.utils.errors import ErrorSeverity, ErrorType, TenantStoreError

logger = logging.getLogger(__name__)

LOG_LEVELS = {
    ErrorSeverity.LOW: logging.WARNING,
    ErrorSeverity.MEDIUM: logging.WARNING,
    ErrorSeverity.HIGH: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}

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
        content=response.model_dump(),
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
        content=response.model_dump(),
        status_code=status_code
    )

def store_error_response(exc: TenantStoreError) -> JSONResponse:
    """Map a storage-core error onto the error envelope"""
    return error_response(
        message=exc.message,
        error_code=exc.error_code,
        details=exc.details,
        status_code=exc.status_code
    )

async def tenant_store_exception_handler(request: Request, exc: TenantStoreError) -> JSONResponse:
    """Log by severity and render the error envelope"""
    logger.log(
        LOG_LEVELS[exc.severity],
        f"{exc.error_type.value} error {exc.error_code} on {request.url.path}: {exc.message}",
        exc_info=exc if exc.error_type is ErrorType.STORAGE else None,
    )
    return store_error_response(exc)

def rate_limit_error():
    """Create rate limit error"""
    raise HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail="Rate limit exceeded. Please try again later."
    )
