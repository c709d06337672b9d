"""Translation of domain errors into HTTP errors."""

from fastapi import HTTPException, status

from subway.core.store import LineNameTakenError, StationInUseError, StationMissingError, StoreError
from subway.helpers.section_chain import (
    SectionConflictError,
    SectionNotFoundError,
    SectionTopologyError,
    SectionValidationError,
)


def domain_error_to_http(error: SectionTopologyError | StoreError) -> HTTPException:
    """
    Map a rejected section operation or store write to the HTTP error reported to clients.

    Args:
        error: Error raised by the section topology helpers or the store

    Returns:
        HTTPException with 400 (validation), 404 (not found) or 409 (conflict)
    """
    match error:
        case SectionValidationError():
            status_code = status.HTTP_400_BAD_REQUEST
        case SectionNotFoundError() | StationMissingError():
            status_code = status.HTTP_404_NOT_FOUND
        case SectionConflictError() | LineNameTakenError() | StationInUseError():
            status_code = status.HTTP_409_CONFLICT
        case _:
            status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=status_code, detail=str(error))
