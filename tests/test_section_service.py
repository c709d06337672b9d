"""Tests for the section service, including concurrent section changes."""

from collections.abc import Generator
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from unittest.mock import patch

import pytest
from fastapi import HTTPException
from subway.core.store import LineNameTakenError, StationInUseError, StationMissingError, Store, StoreError
from subway.helpers.section_chain import (
    InvalidChainError,
    SectionChain,
    SectionConflictError,
    SectionNotFoundError,
    SectionTopologyError,
    SectionValidationError,
    ValidationReason,
)
from subway.models import Line, Station
from subway.schemas.lines import SectionRequest
from subway.services.errors import domain_error_to_http
from subway.services.section_service import SectionService
from subway.services.station_service import StationService


class StationDeletingStore(Store):
    """Store that deletes a station as soon as a line lock is taken."""

    doomed_station_id: int | None = None

    @contextmanager
    def line_lock(self, line_id: int) -> Generator[None]:
        with super().line_lock(line_id):
            if self.doomed_station_id is not None:
                StationService(self).delete_station(self.doomed_station_id)
            yield


class TestDomainErrorToHttp:
    """Test mapping of section and store errors to HTTP errors."""

    @pytest.mark.parametrize(
        ("error", "status_code"),
        [
            (SectionValidationError(ValidationReason.NON_POSITIVE_DISTANCE, distance=0), 400),
            (SectionValidationError(ValidationReason.SINGLE_SECTION), 400),
            (SectionNotFoundError(1, 2), 404),
            (StationMissingError(3), 404),
            (SectionConflictError(1, 2), 409),
            (LineNameTakenError("Line 2"), 409),
            (StationInUseError(3, ["Line 2"]), 409),
            (InvalidChainError("broken"), 500),
        ],
    )
    def test_status_codes(self, error: SectionTopologyError | StoreError, status_code: int) -> None:
        """Test each error kind maps to its status code."""
        http_error = domain_error_to_http(error)

        assert isinstance(http_error, HTTPException)
        assert http_error.status_code == status_code
        assert http_error.detail == str(error)


class TestSectionService:
    """Test SectionService against the store."""

    @pytest.fixture
    def line(self, store: Store, gangnam: Station, yangjae: Station) -> Line:
        """Store a line seeded with Gangnam-Yangjae (10)."""
        line = Line.create(store.next_line_id(), "Shinbundang", "bg-red-600", gangnam, yangjae, 10)
        store.save_line(line)
        return line

    @pytest.fixture
    def service(self, store: Store) -> SectionService:
        """Section service bound to the test store."""
        return SectionService(store)

    def test_add_section_saves_line(self, service: SectionService, store: Store, line: Line, yangjae: Station) -> None:
        """Test that an accepted section is persisted."""
        seolleung = store.add_station("Seolleung")

        service.add_section(
            line.id,
            SectionRequest(upstream_station_id=yangjae.id, downstream_station_id=seolleung.id, distance=5),
        )

        stored = store.get_line(line.id)
        assert stored is not None
        assert stored.stations[1:] == [yangjae, seolleung]

    def test_rejected_add_not_saved(self, service: SectionService, store: Store, line: Line, gangnam: Station) -> None:
        """Test that a rejected section leaves the stored line alone."""
        yeoksam = store.add_station("Yeoksam")
        before = store.get_line(line.id)

        with patch("subway.services.section_service.logger") as mock_logger:
            with pytest.raises(HTTPException) as exc_info:
                service.add_section(
                    line.id,
                    SectionRequest(upstream_station_id=gangnam.id, downstream_station_id=yeoksam.id, distance=10),
                )

        assert exc_info.value.status_code == 400
        mock_logger.info.assert_called_once()
        assert mock_logger.info.call_args[0][0] == "section_add_rejected"
        assert mock_logger.info.call_args[1]["error_type"] == "SectionValidationError"
        assert store.get_line(line.id).sections == before.sections  # type: ignore[union-attr]

    def test_add_section_logs_success(
        self, service: SectionService, store: Store, line: Line, yangjae: Station
    ) -> None:
        """Test that an accepted section is logged."""
        seolleung = store.add_station("Seolleung")

        with patch("subway.services.section_service.logger") as mock_logger:
            service.add_section(
                line.id,
                SectionRequest(upstream_station_id=yangjae.id, downstream_station_id=seolleung.id, distance=5),
            )

        call_args = mock_logger.info.call_args
        assert call_args[0][0] == "section_added"
        assert call_args[1]["section_count"] == 2

    def test_remove_section(self, service: SectionService, store: Store, line: Line, yangjae: Station) -> None:
        """Test detaching the terminal station."""
        seolleung = store.add_station("Seolleung")
        service.add_section(
            line.id,
            SectionRequest(upstream_station_id=yangjae.id, downstream_station_id=seolleung.id, distance=5),
        )

        updated = service.remove_section(line.id, seolleung.id)

        assert len(updated.sections) == 1
        assert len(store.get_line(line.id).sections) == 1  # type: ignore[union-attr]

    def test_remove_unknown_line(self, service: SectionService, gangnam: Station) -> None:
        """Test removing from a line that does not exist."""
        with pytest.raises(HTTPException) as exc_info:
            service.remove_section(999, gangnam.id)

        assert exc_info.value.status_code == 404

    def test_concurrent_splits_keep_chain_consistent(self, service: SectionService, store: Store) -> None:
        """Test that concurrent inserts on one line never lose or corrupt sections."""
        top = store.add_station("Top")
        bottom = store.add_station("Bottom")
        line = Line.create(store.next_line_id(), "Long Line", "bg-gray-600", top, bottom, 1000)
        store.save_line(line)
        middles = [(store.add_station(f"Middle {i}"), 5 + 20 * i) for i in range(40)]

        def split(args: tuple[Station, int]) -> bool:
            station, distance = args
            try:
                service.add_section(
                    line.id,
                    SectionRequest(upstream_station_id=top.id, downstream_station_id=station.id, distance=distance),
                )
            except HTTPException:
                return False
            return True

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(split, middles))

        stored = store.get_line(line.id)
        assert stored is not None
        assert len(stored.sections) == 1 + sum(results)
        assert stored.sections.total_distance == 1000
        assert stored.sections.head == top
        assert stored.sections.tail == bottom
        assert SectionChain.from_sections(stored.sections.sections()) == stored.sections

    def test_remove_unknown_station_is_not_terminal(self, service: SectionService, store: Store, line: Line) -> None:
        """Test that a station id nobody knows is rejected as not terminal."""
        with pytest.raises(HTTPException) as exc_info:
            service.remove_section(line.id, 999)

        assert exc_info.value.status_code == 400
        assert "999" in exc_info.value.detail

    def test_station_deleted_while_adding_is_refused(self) -> None:
        """Test that a section whose station is deleted before the save is not stored."""
        store = StationDeletingStore()
        gangnam = store.add_station("Gangnam")
        yangjae = store.add_station("Yangjae")
        seolleung = store.add_station("Seolleung")
        line = Line.create(store.next_line_id(), "Shinbundang", "bg-red-600", gangnam, yangjae, 10)
        store.save_line(line)
        store.doomed_station_id = seolleung.id

        with pytest.raises(HTTPException) as exc_info:
            SectionService(store).add_section(
                line.id,
                SectionRequest(upstream_station_id=yangjae.id, downstream_station_id=seolleung.id, distance=5),
            )

        assert exc_info.value.status_code == 404
        assert store.get_station(seolleung.id) is None
        assert store.get_line(line.id).stations == [gangnam, yangjae]  # type: ignore[union-attr]

    def test_concurrent_adds_and_deletes_never_orphan_stations(self, service: SectionService, store: Store) -> None:
        """Test that every station on a line still exists after racing adds and deletes."""
        top = store.add_station("Top")
        bottom = store.add_station("Bottom")
        line = Line.create(store.next_line_id(), "Long Line", "bg-gray-600", top, bottom, 1000)
        store.save_line(line)
        middles = [(store.add_station(f"Middle {i}"), 990 - 30 * i) for i in range(30)]
        stations = StationService(store)

        def add(station: Station, distance: int) -> None:
            try:
                service.add_section(
                    line.id,
                    SectionRequest(upstream_station_id=top.id, downstream_station_id=station.id, distance=distance),
                )
            except HTTPException:
                pass

        def delete(station: Station) -> None:
            try:
                stations.delete_station(station.id)
            except HTTPException:
                pass

        with ThreadPoolExecutor(max_workers=8) as pool:
            for station, distance in middles:
                pool.submit(add, station, distance)
                pool.submit(delete, station)

        stored = store.get_line(line.id)
        assert stored is not None
        assert all(store.get_station(station.id) is not None for station in stored.stations)
