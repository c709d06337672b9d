"""
Section topology helpers for keeping a line's sections a single path.

A line's sections are held in a SectionChain: an immutable mapping from each
upstream station id to its outgoing section. The station order is derived by
walking downstream from the head, the only station that is never a downstream
endpoint.

apply_insert() and apply_remove() are pure functions. They either return a new
chain or raise a SectionTopologyError; the chain passed in is never modified.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Iterator

from subway.models.section import Section
from subway.models.station import Station

MIN_SECTION_DISTANCE = 1
MIN_SECTION_COUNT = 1


class SectionChain:
    """Immutable, ordered chain of sections for one line."""

    __slots__ = ("_by_downstream", "_by_upstream", "_head")

    def __init__(
        self,
        by_upstream: dict[int, Section],
        by_downstream: dict[int, Section],
        head: Station,
    ) -> None:
        self._by_upstream = by_upstream
        self._by_downstream = by_downstream
        self._head = head

    @classmethod
    def seed(cls, section: Section) -> SectionChain:
        """
        Create a chain holding only the line's initial section.

        Args:
            section: The seed section

        Returns:
            Single-section chain

        Raises:
            SectionValidationError: If the distance is not positive or both endpoints are the same station
        """
        _validate_section(section)
        return cls(
            {section.upstream.id: section},
            {section.downstream.id: section},
            section.upstream,
        )

    @classmethod
    def from_sections(cls, sections: Iterable[Section]) -> SectionChain:
        """
        Rebuild a chain from sections in any order.

        Used when a line's sections come back across the persistence boundary.

        Args:
            sections: Sections of one line, in any order

        Returns:
            Chain with the sections linked head to tail

        Raises:
            SectionValidationError: If any section breaks the distance or endpoint rules
            InvalidChainError: If the sections do not form exactly one unbranching path
        """
        by_upstream: dict[int, Section] = {}
        by_downstream: dict[int, Section] = {}

        for section in sections:
            _validate_section(section)
            if section.upstream.id in by_upstream:
                raise InvalidChainError(f"Station {section.upstream.id} has more than one outgoing section.")
            if section.downstream.id in by_downstream:
                raise InvalidChainError(f"Station {section.downstream.id} has more than one incoming section.")
            by_upstream[section.upstream.id] = section
            by_downstream[section.downstream.id] = section

        if not by_upstream:
            raise InvalidChainError("A line must have at least one section.")

        heads = [s.upstream for s in by_upstream.values() if s.upstream.id not in by_downstream]
        if len(heads) != 1:
            raise InvalidChainError(f"Expected exactly one head station, found {len(heads)}.")

        chain = cls(by_upstream, by_downstream, heads[0])
        # A cycle detached from the head path leaves sections unreachable
        if sum(1 for _ in chain) != len(by_upstream):
            raise InvalidChainError("Sections do not form a single connected path.")
        return chain

    def __iter__(self) -> Iterator[Section]:
        """Iterate sections from head to tail."""
        current = self._by_upstream.get(self._head.id)
        while current is not None:
            yield current
            current = self._by_upstream.get(current.downstream.id)

    def __len__(self) -> int:
        return len(self._by_upstream)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SectionChain):
            return NotImplemented
        return self.sections() == other.sections()

    def __hash__(self) -> int:
        return hash(tuple(self.sections()))

    def __repr__(self) -> str:
        path = " -> ".join(f"{s.upstream.name}({s.distance})" for s in self)
        return f"<SectionChain {path} -> {self.tail.name}>"

    @property
    def head(self) -> Station:
        """Top-most station: the one that is never a downstream endpoint."""
        return self._head

    @property
    def tail(self) -> Station:
        """Terminal station: the most-downstream station of the chain."""
        station = self._head
        while (section := self._by_upstream.get(station.id)) is not None:
            station = section.downstream
        return station

    @property
    def total_distance(self) -> int:
        return sum(section.distance for section in self._by_upstream.values())

    def sections(self) -> list[Section]:
        """Return sections ordered head to tail."""
        return list(self)

    def stations(self) -> list[Station]:
        """
        Return stations ordered head to tail.

        The list always has one more entry than the chain has sections.
        """
        return [self._head, *(section.downstream for section in self)]

    def has_station(self, station: Station) -> bool:
        return station.id in self._by_upstream or station.id in self._by_downstream

    def section_from(self, station: Station) -> Section | None:
        """Return the section leaving the station, if any."""
        return self._by_upstream.get(station.id)

    def section_into(self, station: Station) -> Section | None:
        """Return the section arriving at the station, if any."""
        return self._by_downstream.get(station.id)

    def _replace(self, removed: Iterable[Section], added: Iterable[Section]) -> SectionChain:
        by_upstream = dict(self._by_upstream)
        by_downstream = dict(self._by_downstream)
        for section in removed:
            del by_upstream[section.upstream.id]
            del by_downstream[section.downstream.id]
        for section in added:
            by_upstream[section.upstream.id] = section
            by_downstream[section.downstream.id] = section

        head = self._head
        if head.id in by_downstream:
            head = by_downstream[head.id].upstream
        return SectionChain(by_upstream, by_downstream, head)


# ==================== Chain Operations ====================


def apply_insert(chain: SectionChain, new_section: Section) -> SectionChain:
    """
    Insert a section into the chain, extending or splitting as needed.

    Exactly one endpoint of the new section must already be on the line:
    - downstream is the head: the section becomes the new head
    - upstream is the tail: the section becomes the new tail
    - upstream leaves an existing section S: S is split after its upstream
    - downstream enters an existing section S: S is split before its downstream

    When splitting, the new section must be shorter than S. The remainder of S
    keeps S's unmatched endpoint and the distance S.distance - new_section.distance.

    Args:
        chain: Current chain of the line
        new_section: Section to insert

    Returns:
        New chain containing the section

    Raises:
        SectionValidationError: Non-positive distance, identical endpoints, or split distance too long
        SectionConflictError: Both endpoints are already on the line
        SectionNotFoundError: Neither endpoint is on the line

    Examples:
        >>> chain = SectionChain.seed(Section(a, b, 10))
        >>> [s.name for s in apply_insert(chain, Section(a, d, 6)).stations()]
        ['A', 'D', 'B']
    """
    _validate_section(new_section)

    upstream = new_section.upstream
    downstream = new_section.downstream
    has_upstream = chain.has_station(upstream)
    has_downstream = chain.has_station(downstream)

    if has_upstream and has_downstream:
        raise SectionConflictError(upstream.id, downstream.id)
    if not has_upstream and not has_downstream:
        raise SectionNotFoundError(upstream.id, downstream.id)

    if downstream == chain.head or upstream == chain.tail:
        return chain._replace(removed=(), added=(new_section,))

    if has_upstream:
        existing = chain.section_from(upstream)
        assert existing is not None  # upstream is on the line and is not the tail
        _validate_split(existing, new_section)
        remainder = Section(downstream, existing.downstream, existing.distance - new_section.distance)
    else:
        existing = chain.section_into(downstream)
        assert existing is not None  # downstream is on the line and is not the head
        _validate_split(existing, new_section)
        remainder = Section(existing.upstream, upstream, existing.distance - new_section.distance)

    return chain._replace(removed=(existing,), added=(new_section, remainder))


def apply_remove(chain: SectionChain, station: Station) -> SectionChain:
    """
    Detach the terminal station by dropping the chain's last section.

    Only the most-downstream station can be removed, and a line always keeps
    at least one section.

    Args:
        chain: Current chain of the line
        station: Station to detach

    Returns:
        New chain without the last section

    Raises:
        SectionValidationError: Single-section chain, or station is not the terminal station
    """
    if len(chain) <= MIN_SECTION_COUNT:
        raise SectionValidationError(ValidationReason.SINGLE_SECTION, station_id=station.id)
    if station != chain.tail:
        raise SectionValidationError(ValidationReason.NOT_TERMINAL_STATION, station_id=station.id)

    last = chain.section_into(station)
    assert last is not None
    return chain._replace(removed=(last,), added=())


def _validate_section(section: Section) -> None:
    if section.distance < MIN_SECTION_DISTANCE:
        raise SectionValidationError(ValidationReason.NON_POSITIVE_DISTANCE, distance=section.distance)
    if section.upstream == section.downstream:
        raise SectionValidationError(ValidationReason.SAME_ENDPOINTS, station_id=section.upstream.id)


def _validate_split(existing: Section, new_section: Section) -> None:
    if new_section.distance >= existing.distance:
        raise SectionValidationError(
            ValidationReason.SPLIT_DISTANCE_TOO_LONG,
            distance=new_section.distance,
            existing_distance=existing.distance,
        )


# Custom domain exceptions


class ValidationReason(str, enum.Enum):
    """Why a section operation failed validation."""

    NON_POSITIVE_DISTANCE = "non_positive_distance"
    SAME_ENDPOINTS = "same_endpoints"
    SPLIT_DISTANCE_TOO_LONG = "split_distance_too_long"
    NOT_TERMINAL_STATION = "not_terminal_station"
    SINGLE_SECTION = "single_section"


class SectionTopologyError(Exception):
    """Base exception for rejected section operations."""

    pass


class SectionValidationError(SectionTopologyError):
    """
    Raised when a section or removal request breaks a distance or terminal rule.

    The offending values are kept as attributes so callers can branch on
    `reason` without parsing the message.
    """

    _MESSAGES = {
        ValidationReason.NON_POSITIVE_DISTANCE: "Section distance must be at least {min}, got {distance}.",
        ValidationReason.SAME_ENDPOINTS: "Section cannot start and end at the same station {station_id}.",
        ValidationReason.SPLIT_DISTANCE_TOO_LONG: (
            "New section distance {distance} must be shorter than the existing section distance {existing_distance}."
        ),
        ValidationReason.NOT_TERMINAL_STATION: "Only the terminal station can be removed, not station {station_id}.",
        ValidationReason.SINGLE_SECTION: "A line with a single section cannot lose a section.",
    }

    def __init__(
        self,
        reason: ValidationReason,
        *,
        distance: int | None = None,
        existing_distance: int | None = None,
        station_id: int | None = None,
    ) -> None:
        self.reason = reason
        self.distance = distance
        self.existing_distance = existing_distance
        self.station_id = station_id
        super().__init__(
            self._MESSAGES[reason].format(
                min=MIN_SECTION_DISTANCE,
                distance=distance,
                existing_distance=existing_distance,
                station_id=station_id,
            )
        )


class SectionNotFoundError(SectionTopologyError):
    """Raised when neither endpoint of a new section is on the line."""

    def __init__(self, upstream_id: int, downstream_id: int) -> None:
        self.upstream_id = upstream_id
        self.downstream_id = downstream_id
        super().__init__(f"Neither station {upstream_id} nor station {downstream_id} is on the line.")


class SectionConflictError(SectionTopologyError):
    """Raised when both endpoints of a new section are already on the line."""

    def __init__(self, upstream_id: int, downstream_id: int) -> None:
        self.upstream_id = upstream_id
        self.downstream_id = downstream_id
        super().__init__(f"Stations {upstream_id} and {downstream_id} are both already on the line.")


class InvalidChainError(SectionTopologyError):
    """Raised when a list of sections does not form a single unbranching path."""

    pass
