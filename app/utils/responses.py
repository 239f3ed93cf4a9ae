"""
Standardized response utilities
"""

from typing import Any, Optional
from fastapi import HTTPException, status
from fastapi.responses import JSONResponse

from app.core.exceptions import (
    ArrangementConflictError,
    DragRejectedError,
    GuestNotFoundError,
    NoEventSelectedError,
    SeatingError,
    TableGeometryError,
    TableNotFoundError,
    TableValidationError,
)
from app.schemas.common import StandardResponse, ErrorResponse

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

# Domain error -> (error code, HTTP status)
SEATING_ERROR_STATUS = {
    TableNotFoundError: ("table_not_found", status.HTTP_404_NOT_FOUND),
    GuestNotFoundError: ("guest_not_found", status.HTTP_404_NOT_FOUND),
    TableValidationError: ("invalid_table", status.HTTP_422_UNPROCESSABLE_ENTITY),
    TableGeometryError: ("invalid_table_geometry", status.HTTP_422_UNPROCESSABLE_ENTITY),
    DragRejectedError: ("drag_rejected", status.HTTP_409_CONFLICT),
    ArrangementConflictError: ("arrangement_conflict", status.HTTP_409_CONFLICT),
    NoEventSelectedError: ("no_event_selected", status.HTTP_409_CONFLICT),
}

def seating_error_response(exc: SeatingError) -> JSONResponse:
    """Map a seating engine error onto the standard error envelope"""
    error_code, status_code = SEATING_ERROR_STATUS.get(
        type(exc), ("seating_error", status.HTTP_400_BAD_REQUEST)
    )
    return error_response(message=str(exc), error_code=error_code, status_code=status_code)

def not_found_error(resource: str = "Resource"):
    """Create not found error"""
    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"{resource} not found"
    )
