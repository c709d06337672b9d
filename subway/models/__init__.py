"""Domain models for subway lines."""

from subway.models.line import Line
from subway.models.section import Section
from subway.models.station import Station

__all__ = [
    "Line",
    "Section",
    "Station",
]
