"""Pydantic schemas for stations."""

from pydantic import BaseModel, ConfigDict, Field


class CreateStationRequest(BaseModel):
    """Request to create a station."""

    name: str = Field(..., min_length=1, max_length=255, description="Station name")


class StationResponse(BaseModel):
    """Response schema for a station."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
