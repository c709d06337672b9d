"""Station management service."""

import structlog
from fastapi import HTTPException, status

from subway.core.store import StationInUseError, Store
from subway.models import Station
from subway.schemas.stations import CreateStationRequest
from subway.services.errors import domain_error_to_http

logger = structlog.get_logger(__name__)


class StationService:
    """Service for managing stations."""

    def __init__(self, store: Store) -> None:
        """
        Initialize the station service.

        Args:
            store: Application store
        """
        self.store = store

    def create_station(self, request: CreateStationRequest) -> Station:
        station = self.store.add_station(request.name)
        logger.info("station_created", station_id=station.id, name=station.name)
        return station

    def list_stations(self) -> list[Station]:
        return self.store.list_stations()

    def get_station(self, station_id: int) -> Station:
        """
        Get a station by ID.

        Args:
            station_id: Station ID

        Returns:
            Station

        Raises:
            HTTPException: 404 if station not found
        """
        if not (station := self.store.get_station(station_id)):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Station {station_id} not found.",
            )
        return station

    def delete_station(self, station_id: int) -> None:
        """
        Delete a station that no line uses any more.

        The in-use check and the delete happen in one store operation, so a
        section saved concurrently either blocks the delete or is refused.

        Args:
            station_id: Station ID

        Raises:
            HTTPException: 404 if station not found, 409 if a line still passes through it
        """
        self.get_station(station_id)

        try:
            self.store.delete_station(station_id)
        except StationInUseError as e:
            logger.info("station_delete_rejected", station_id=station_id, line_names=e.line_names)
            raise domain_error_to_http(e) from e

        logger.info("station_deleted", station_id=station_id)
