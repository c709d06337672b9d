"""Line management service."""

import structlog
from fastapi import HTTPException, status

from subway.core.store import Store, StoreError
from subway.core.telemetry import service_span
from subway.helpers.section_chain import SectionTopologyError
from subway.models import Line
from subway.schemas.lines import CreateLineRequest, UpdateLineRequest
from subway.services.errors import domain_error_to_http
from subway.services.station_service import StationService

logger = structlog.get_logger(__name__)


class LineService:
    """Service for managing lines."""

    def __init__(self, store: Store) -> None:
        """
        Initialize the line service.

        Args:
            store: Application store
        """
        self.store = store
        self.station_service = StationService(store)

    def create_line(self, request: CreateLineRequest) -> Line:
        """
        Create a line seeded with one section.

        The name is checked for uniqueness by the store when the line is saved,
        so two concurrent requests for the same name cannot both succeed.

        Args:
            request: Line creation request

        Returns:
            Created line

        Raises:
            HTTPException: 404 if a station is unknown (or deleted meanwhile), 400 if the
                seed section is invalid, 409 if the name is already used
        """
        upstream = self.station_service.get_station(request.upstream_station_id)
        downstream = self.station_service.get_station(request.downstream_station_id)

        with service_span("lines.create", "line-service", line_name=request.name):
            try:
                line = Line.create(
                    self.store.next_line_id(),
                    request.name,
                    request.color,
                    upstream,
                    downstream,
                    request.distance,
                )
                self.store.save_line(line)
            except (SectionTopologyError, StoreError) as e:
                logger.info("line_create_rejected", name=request.name, error_type=type(e).__name__)
                raise domain_error_to_http(e) from e

        logger.info("line_created", line_id=line.id, name=line.name, color=line.color)
        return line

    def list_lines(self) -> list[Line]:
        return self.store.list_lines()

    def get_line(self, line_id: int) -> Line:
        """
        Get a line by ID.

        Raises:
            HTTPException: 404 if line not found
        """
        if not (line := self.store.get_line(line_id)):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Line {line_id} not found.",
            )
        return line

    def update_line(self, line_id: int, request: UpdateLineRequest) -> Line:
        """
        Rename or recolor a line.

        Fields left as None keep their current value.

        Raises:
            HTTPException: 404 if line not found, 409 if the new name is used by another line
        """
        with self.store.line_lock(line_id):
            line = self.get_line(line_id)
            line.modify(name=request.name, color=request.color)
            try:
                self.store.save_line(line)
            except StoreError as e:
                logger.info("line_update_rejected", line_id=line_id, name=line.name, error_type=type(e).__name__)
                raise domain_error_to_http(e) from e

        logger.info("line_updated", line_id=line_id, name=line.name, color=line.color)
        return line

    def delete_line(self, line_id: int) -> None:
        """
        Delete a line and its sections.

        Raises:
            HTTPException: 404 if line not found
        """
        with self.store.line_lock(line_id):
            self.get_line(line_id)
            self.store.delete_line(line_id)

        logger.info("line_deleted", line_id=line_id)
