"""Pydantic schemas for lines and their sections."""

from pydantic import BaseModel, ConfigDict, Field

from subway.models import Line
from subway.schemas.stations import StationResponse

# ==================== Request Schemas ====================


class CreateLineRequest(BaseModel):
    """Request to create a line with its first section."""

    name: str = Field(..., min_length=1, max_length=255, description="Line name")
    color: str = Field(..., min_length=1, max_length=50, description="Line color (e.g. 'bg-red-600')")
    upstream_station_id: int = Field(..., description="Top-most station of the seed section")
    downstream_station_id: int = Field(..., description="Bottom-most station of the seed section")
    # Range is checked by the section rules so the client gets the same error as for sections
    distance: int = Field(..., description="Seed section distance (at least 1)")


class UpdateLineRequest(BaseModel):
    """Request to rename or recolor a line. Omitted fields are left unchanged."""

    name: str | None = Field(None, min_length=1, max_length=255)
    color: str | None = Field(None, min_length=1, max_length=50)


class SectionRequest(BaseModel):
    """Request to add a section to a line."""

    upstream_station_id: int
    downstream_station_id: int
    distance: int = Field(..., description="Section distance (at least 1)")


# ==================== Response Schemas ====================


class SectionResponse(BaseModel):
    """Response schema for one section of a line."""

    model_config = ConfigDict(from_attributes=True)

    upstream: StationResponse
    downstream: StationResponse
    distance: int


class LineSectionsResponse(BaseModel):
    """Ordered sections of a line, top-most first."""

    line_id: int
    sections: list[SectionResponse]

    @classmethod
    def from_line(cls, line: Line) -> "LineSectionsResponse":
        return cls(line_id=line.id, sections=[SectionResponse.model_validate(s) for s in line.sections])


class LineResponse(BaseModel):
    """Response schema for a line with its ordered stations."""

    id: int
    name: str
    color: str
    stations: list[StationResponse]
    total_distance: int

    @classmethod
    def from_line(cls, line: Line) -> "LineResponse":
        return cls(
            id=line.id,
            name=line.name,
            color=line.color,
            stations=[StationResponse.model_validate(station) for station in line.stations],
            total_distance=line.sections.total_distance,
        )
