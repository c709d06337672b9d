"""Stations API endpoints."""

from fastapi import APIRouter, Depends, status

from subway.core.store import Store, get_store
from subway.models import Station
from subway.schemas.stations import CreateStationRequest, StationResponse
from subway.services.station_service import StationService

router = APIRouter(prefix="/stations", tags=["stations"])


@router.post("", response_model=StationResponse, status_code=status.HTTP_201_CREATED)
def create_station(
    request: CreateStationRequest,
    store: Store = Depends(get_store),
) -> Station:
    """
    Create a station.

    Args:
        request: Station creation request
        store: Application store

    Returns:
        Created station
    """
    return StationService(store).create_station(request)


@router.get("", response_model=list[StationResponse])
def list_stations(store: Store = Depends(get_store)) -> list[Station]:
    """List all stations ordered by ID."""
    return StationService(store).list_stations()


@router.get("/{station_id}", response_model=StationResponse)
def get_station(station_id: int, store: Store = Depends(get_store)) -> Station:
    """
    Get a station by ID.

    Raises:
        HTTPException: 404 if station not found
    """
    return StationService(store).get_station(station_id)


@router.delete("/{station_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_station(station_id: int, store: Store = Depends(get_store)) -> None:
    """
    Delete a station.

    Raises:
        HTTPException: 404 if station not found, 409 if a line still uses it
    """
    StationService(store).delete_station(station_id)
