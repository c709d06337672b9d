"""Lines API endpoints, including the sections of each line."""

from fastapi import APIRouter, Depends, Query, status

from subway.core.store import Store, get_store
from subway.schemas.lines import (
    CreateLineRequest,
    LineResponse,
    LineSectionsResponse,
    SectionRequest,
    SectionResponse,
    UpdateLineRequest,
)
from subway.services.line_service import LineService
from subway.services.section_service import SectionService

router = APIRouter(prefix="/lines", tags=["lines"])


# ==================== Line Endpoints ====================


@router.post("", response_model=LineResponse, status_code=status.HTTP_201_CREATED)
def create_line(
    request: CreateLineRequest,
    store: Store = Depends(get_store),
) -> LineResponse:
    """
    Create a line with its first section.

    Args:
        request: Line name, color and seed section
        store: Application store

    Returns:
        Created line with its stations

    Raises:
        HTTPException: 400 if the seed section is invalid, 404 if a station is unknown,
            409 if the line name is taken
    """
    line = LineService(store).create_line(request)
    return LineResponse.from_line(line)


@router.get("", response_model=list[LineResponse])
def list_lines(store: Store = Depends(get_store)) -> list[LineResponse]:
    """List all lines with their ordered stations."""
    return [LineResponse.from_line(line) for line in LineService(store).list_lines()]


@router.get("/{line_id}", response_model=LineResponse)
def get_line(line_id: int, store: Store = Depends(get_store)) -> LineResponse:
    """
    Get a line by ID.

    Raises:
        HTTPException: 404 if line not found
    """
    return LineResponse.from_line(LineService(store).get_line(line_id))


@router.patch("/{line_id}", response_model=LineResponse)
def update_line(
    line_id: int,
    request: UpdateLineRequest,
    store: Store = Depends(get_store),
) -> LineResponse:
    """
    Rename or recolor a line.

    Only updates fields that are provided in the request.

    Raises:
        HTTPException: 404 if line not found, 409 if the name is taken
    """
    return LineResponse.from_line(LineService(store).update_line(line_id, request))


@router.delete("/{line_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_line(line_id: int, store: Store = Depends(get_store)) -> None:
    """
    Delete a line and all its sections.

    Raises:
        HTTPException: 404 if line not found
    """
    LineService(store).delete_line(line_id)


# ==================== Section Endpoints ====================


@router.post(
    "/{line_id}/sections",
    response_model=LineSectionsResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_section(
    line_id: int,
    request: SectionRequest,
    store: Store = Depends(get_store),
) -> LineSectionsResponse:
    """
    Add a section to a line.

    Exactly one endpoint must already be on the line. The section is prepended,
    appended, or splits the existing section it starts or ends at.

    Args:
        line_id: Line ID
        request: Section endpoints and distance
        store: Application store

    Returns:
        The line's sections after the insert, top-most first

    Raises:
        HTTPException: 400 for distance violations, 404 if neither endpoint is on the line
            (or the line/station is unknown), 409 if both endpoints are already on it
    """
    line = SectionService(store).add_section(line_id, request)
    return LineSectionsResponse.from_line(line)


@router.get("/{line_id}/sections", response_model=LineSectionsResponse)
def list_sections(line_id: int, store: Store = Depends(get_store)) -> LineSectionsResponse:
    """
    Get a line's sections, top-most first.

    Raises:
        HTTPException: 404 if line not found
    """
    sections = SectionService(store).list_sections(line_id)
    return LineSectionsResponse(
        line_id=line_id,
        sections=[SectionResponse.model_validate(section) for section in sections],
    )


@router.delete("/{line_id}/sections", status_code=status.HTTP_204_NO_CONTENT)
def remove_section(
    line_id: int,
    station_id: int = Query(..., description="Terminal station to detach"),
    store: Store = Depends(get_store),
) -> None:
    """
    Detach the line's terminal station by removing its last section.

    Raises:
        HTTPException: 400 if the station is not the terminal station or the line has
            a single section, 404 if the line or station is unknown
    """
    SectionService(store).remove_section(line_id, station_id)
