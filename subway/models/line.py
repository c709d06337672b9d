"""Line model."""

from __future__ import annotations

from dataclasses import dataclass

from subway.helpers import section_chain
from subway.models.section import Section
from subway.models.station import Station


@dataclass(eq=False)
class Line:
    """
    A subway line: a name, a color and a single chain of sections.

    The chain is replaced wholesale by add_section() and remove_station(), so a
    rejected operation leaves the line exactly as it was.
    """

    id: int
    name: str
    color: str
    sections: section_chain.SectionChain

    @classmethod
    def create(
        cls,
        line_id: int,
        name: str,
        color: str,
        upstream: Station,
        downstream: Station,
        distance: int,
    ) -> Line:
        """
        Create a line seeded with its first section.

        Raises:
            SectionValidationError: If the seed section is invalid
        """
        return cls(
            id=line_id,
            name=name,
            color=color,
            sections=section_chain.SectionChain.seed(Section(upstream, downstream, distance)),
        )

    def add_section(self, section: Section) -> None:
        self.sections = section_chain.apply_insert(self.sections, section)

    def remove_station(self, station: Station) -> None:
        self.sections = section_chain.apply_remove(self.sections, station)

    def modify(self, name: str | None = None, color: str | None = None) -> None:
        """Rename or recolor the line. None or unchanged values are ignored."""
        if name is not None:
            self.name = name
        if color is not None:
            self.color = color

    def has_station(self, station: Station) -> bool:
        return self.sections.has_station(station)

    @property
    def stations(self) -> list[Station]:
        return self.sections.stations()

    def __repr__(self) -> str:
        """String representation of the line."""
        return f"<Line(id={self.id}, name={self.name!r}, color={self.color!r}, sections={len(self.sections)})>"
