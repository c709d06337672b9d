"""In-memory storage for stations and lines.

The store is the persistence boundary: services load a snapshot of a line,
run a section operation on it and save the result. Lines are copied on the
way in and out, so an operation that fails never touches stored state.

Rules that span more than one line (unique line names, stations still in
use) are checked inside the store lock together with the write they guard.
"""

import dataclasses
import itertools
import threading
from collections.abc import Generator
from contextlib import contextmanager, nullcontext

from subway.models import Line, Station

# Module-level singleton (lazy initialization)
_store: "Store | None" = None
_store_lock = threading.Lock()


class Store:
    """Thread-safe in-memory store for stations and lines."""

    def __init__(self) -> None:
        self._stations: dict[int, Station] = {}
        self._lines: dict[int, Line] = {}
        self._station_ids = itertools.count(1)
        self._line_ids = itertools.count(1)
        self._lock = threading.Lock()
        self._line_locks: dict[int, threading.Lock] = {}

    # ==================== Stations ====================

    def add_station(self, name: str) -> Station:
        with self._lock:
            station = Station(id=next(self._station_ids), name=name)
            self._stations[station.id] = station
        return station

    def get_station(self, station_id: int) -> Station | None:
        return self._stations.get(station_id)

    def list_stations(self) -> list[Station]:
        with self._lock:
            return sorted(self._stations.values(), key=lambda s: s.id)

    def delete_station(self, station_id: int) -> None:
        """
        Delete a station that no line passes through.

        Args:
            station_id: Station ID (unknown ids are ignored)

        Raises:
            StationInUseError: If any stored line still uses the station
        """
        with self._lock:
            if (station := self._stations.get(station_id)) is None:
                return
            if line_names := [line.name for line in self._sorted_lines() if line.has_station(station)]:
                raise StationInUseError(station_id, line_names)
            del self._stations[station_id]

    # ==================== Lines ====================

    def next_line_id(self) -> int:
        with self._lock:
            return next(self._line_ids)

    def get_line(self, line_id: int) -> Line | None:
        """
        Get a detached copy of a line.

        Args:
            line_id: Line ID

        Returns:
            Copy of the stored line, or None if no line has that id
        """
        with self._lock:
            line = self._lines.get(line_id)
            return dataclasses.replace(line) if line is not None else None

    def list_lines(self) -> list[Line]:
        with self._lock:
            return [dataclasses.replace(line) for line in self._sorted_lines()]

    def save_line(self, line: Line) -> None:
        """
        Store a copy of the line, replacing any line with the same id.

        Args:
            line: Line to store

        Raises:
            StationMissingError: If a station on the line has been deleted
            LineNameTakenError: If another line already has the line's name
        """
        with self._lock:
            for station in line.stations:
                if station.id not in self._stations:
                    raise StationMissingError(station.id)
            if any(other.name == line.name and other.id != line.id for other in self._lines.values()):
                raise LineNameTakenError(line.name)
            self._lines[line.id] = dataclasses.replace(line)

    def delete_line(self, line_id: int) -> None:
        with self._lock:
            self._lines.pop(line_id, None)
            self._line_locks.pop(line_id, None)

    @contextmanager
    def line_lock(self, line_id: int) -> Generator[None]:
        """
        Hold the per-line lock for one read-modify-write of a line.

        Operations on different lines never wait on each other. No lock is
        kept for an id with no stored line; the caller's lookup then fails.
        """
        with self._lock:
            lock = self._line_locks.get(line_id)
            if lock is None and line_id in self._lines:
                lock = self._line_locks[line_id] = threading.Lock()
        with lock or nullcontext():
            yield

    def _sorted_lines(self) -> list[Line]:
        return sorted(self._lines.values(), key=lambda ln: ln.id)


def get_store() -> Store:
    """
    Dependency for getting the application store.

    Returns:
        Store: Process-wide store instance
    """
    global _store  # noqa: PLW0603
    if _store is None:
        with _store_lock:
            if _store is None:  # Double-checked locking
                _store = Store()
    return _store


def reset_store() -> None:
    """Drop all stored data. Used by tests."""
    global _store  # noqa: PLW0603
    with _store_lock:
        _store = None


# Custom domain exceptions


class StoreError(Exception):
    """Base exception for writes the store refuses."""

    pass


class StationInUseError(StoreError):
    """Raised when deleting a station that lines still pass through."""

    def __init__(self, station_id: int, line_names: list[str]) -> None:
        self.station_id = station_id
        self.line_names = line_names
        super().__init__(f"Station {station_id} is still used by line(s): {', '.join(line_names)}.")


class StationMissingError(StoreError):
    """Raised when saving a line that references a deleted station."""

    def __init__(self, station_id: int) -> None:
        self.station_id = station_id
        super().__init__(f"Station {station_id} not found.")


class LineNameTakenError(StoreError):
    """Raised when saving a line under a name another line already has."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"A line named '{name}' already exists.")
