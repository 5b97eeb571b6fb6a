from fastapi import HTTPException, status

from app.domain.exceptions import (
    BlockedDatesConflict,
    ConflictError,
    DateHasBookingsError,
    NotFoundError,
    SchedulingError,
    SlotUnavailableError,
    ValidationError,
)


def to_http_exception(exc: SchedulingError) -> HTTPException:
    """Map a scheduler error onto the HTTP status the API contract promises."""
    if isinstance(exc, ValidationError):
        code = status.HTTP_422_UNPROCESSABLE_ENTITY
    elif isinstance(exc, (ConflictError, SlotUnavailableError, DateHasBookingsError, BlockedDatesConflict)):
        code = status.HTTP_409_CONFLICT
    elif isinstance(exc, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    else:
        code = status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=code, detail=exc.to_detail())
