"""Section model."""

from dataclasses import dataclass

from subway.models.station import Station


@dataclass(frozen=True, slots=True)
class Section:
    """Directed, weighted edge between two stations of one line."""

    upstream: Station
    downstream: Station
    distance: int

    def __repr__(self) -> str:
        """String representation of the section."""
        return f"<Section({self.upstream.name} -> {self.downstream.name}, distance={self.distance})>"
