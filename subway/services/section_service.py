"""Section management service.

Runs the section topology rules against a snapshot of a line while holding
that line's lock, and saves the new chain only when the rules accept it.
"""

import structlog
from fastapi import HTTPException, status

from subway.core.store import Store, StoreError
from subway.core.telemetry import service_span
from subway.helpers.section_chain import SectionTopologyError, SectionValidationError, ValidationReason
from subway.models import Line, Section, Station
from subway.schemas.lines import SectionRequest
from subway.services.errors import domain_error_to_http

logger = structlog.get_logger(__name__)


class SectionService:
    """Service for adding and removing sections of a line."""

    def __init__(self, store: Store) -> None:
        """
        Initialize the section service.

        Args:
            store: Application store
        """
        self.store = store

    def get_line(self, line_id: int) -> Line:
        """
        Get a line snapshot by ID.

        Raises:
            HTTPException: 404 if line not found
        """
        if not (line := self.store.get_line(line_id)):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Line {line_id} not found.",
            )
        return line

    def _get_station(self, station_id: int) -> Station:
        if not (station := self.store.get_station(station_id)):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Station {station_id} not found.",
            )
        return station

    def list_sections(self, line_id: int) -> list[Section]:
        return self.get_line(line_id).sections.sections()

    def add_section(self, line_id: int, request: SectionRequest) -> Line:
        """
        Add a section to a line, extending or splitting the chain.

        Args:
            line_id: Line ID
            request: Section endpoints and distance

        Returns:
            The updated line

        Raises:
            HTTPException: 400 for distance violations, 404 if the line or a station is unknown
                (or deleted meanwhile) or both endpoints are missing from the line,
                409 if both endpoints are already on it
        """
        upstream = self._get_station(request.upstream_station_id)
        downstream = self._get_station(request.downstream_station_id)
        section = Section(upstream, downstream, request.distance)

        with (
            service_span(
                "sections.add",
                "section-service",
                line_id=line_id,
                upstream_station_id=upstream.id,
                downstream_station_id=downstream.id,
                distance=request.distance,
            ) as span,
            self.store.line_lock(line_id),
        ):
            line = self.get_line(line_id)
            try:
                line.add_section(section)
                self.store.save_line(line)
            except (SectionTopologyError, StoreError) as e:
                logger.info(
                    "section_add_rejected",
                    line_id=line_id,
                    upstream_station_id=upstream.id,
                    downstream_station_id=downstream.id,
                    distance=request.distance,
                    error_type=type(e).__name__,
                )
                raise domain_error_to_http(e) from e

            span.set_attribute("sections.count", len(line.sections))

        logger.info(
            "section_added",
            line_id=line_id,
            upstream_station_id=upstream.id,
            downstream_station_id=downstream.id,
            distance=request.distance,
            section_count=len(line.sections),
        )
        return line

    def remove_section(self, line_id: int, station_id: int) -> Line:
        """
        Detach the terminal station of a line.

        Args:
            line_id: Line ID
            station_id: Station to detach (must be the line's last station)

        Returns:
            The updated line

        Raises:
            HTTPException: 400 if the station is not the terminal station (unknown
                stations included) or the line has a single section, 404 if the line is unknown
        """
        with (
            service_span("sections.remove", "section-service", line_id=line_id, station_id=station_id) as span,
            self.store.line_lock(line_id),
        ):
            line = self.get_line(line_id)
            try:
                if (station := self.store.get_station(station_id)) is None:
                    # An unknown station is never the terminal station
                    raise SectionValidationError(ValidationReason.NOT_TERMINAL_STATION, station_id=station_id)
                line.remove_station(station)
                self.store.save_line(line)
            except (SectionTopologyError, StoreError) as e:
                logger.info(
                    "section_remove_rejected",
                    line_id=line_id,
                    station_id=station_id,
                    error_type=type(e).__name__,
                )
                raise domain_error_to_http(e) from e

            span.set_attribute("sections.count", len(line.sections))

        logger.info("section_removed", line_id=line_id, station_id=station_id, section_count=len(line.sections))
        return line
