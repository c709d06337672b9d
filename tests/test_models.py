"""Tests for domain models."""

import pytest
from subway.helpers.section_chain import SectionConflictError, SectionValidationError
from subway.models import Line, Section, Station

from tests.helpers.network import make_stations


@pytest.fixture
def stations() -> dict[str, Station]:
    """Line 2 stations."""
    return make_stations("Gangnam", "Yeoksam", "Seolleung", "Samseong", "Gyodae")


@pytest.fixture
def line_two(stations: dict[str, Station]) -> Line:
    """Line 2 seeded with Gangnam-Yeoksam (10)."""
    return Line.create(1, "Line 2", "green", stations["Gangnam"], stations["Yeoksam"], 10)


class TestStation:
    """Test Station identity."""

    def test_equality_uses_id_only(self) -> None:
        """Two stations with the same id are the same station."""
        assert Station(id=1, name="Gangnam") == Station(id=1, name="Gangnam (renamed)")
        assert Station(id=1, name="Gangnam") != Station(id=2, name="Gangnam")

    def test_hash_uses_id_only(self) -> None:
        """Stations can key dicts and sets by id."""
        assert len({Station(id=1, name="a"), Station(id=1, name="b")}) == 1

    def test_station_is_immutable(self) -> None:
        """Stations cannot be changed after creation."""
        station = Station(id=1, name="Gangnam")
        with pytest.raises(AttributeError):
            station.name = "Other"  # type: ignore[misc]


class TestLine:
    """Test Line behaviour."""

    def test_create_seeds_one_section(self, line_two: Line, stations: dict[str, Station]) -> None:
        """A new line has exactly its seed section."""
        assert line_two.sections.sections() == [Section(stations["Gangnam"], stations["Yeoksam"], 10)]
        assert line_two.stations == [stations["Gangnam"], stations["Yeoksam"]]

    def test_create_rejects_invalid_seed(self, stations: dict[str, Station]) -> None:
        """The seed section follows the same distance rule."""
        with pytest.raises(SectionValidationError):
            Line.create(1, "Line 2", "green", stations["Gangnam"], stations["Yeoksam"], 0)

    def test_station_list_in_order(self, line_two: Line, stations: dict[str, Station]) -> None:
        """Stations are listed top-most to bottom-most."""
        line_two.add_section(Section(stations["Yeoksam"], stations["Seolleung"], 4))
        line_two.add_section(Section(stations["Seolleung"], stations["Gyodae"], 5))
        line_two.add_section(Section(stations["Gyodae"], stations["Samseong"], 7))

        assert [s.name for s in line_two.stations] == ["Gangnam", "Yeoksam", "Seolleung", "Gyodae", "Samseong"]
        assert len(line_two.sections) == 4

    def test_add_section_between_existing_stations(self, line_two: Line, stations: dict[str, Station]) -> None:
        """Adding from the same upstream splits the existing section."""
        line_two.add_section(Section(stations["Gangnam"], stations["Seolleung"], 8))

        assert [s.name for s in line_two.stations] == ["Gangnam", "Seolleung", "Yeoksam"]

    def test_failed_add_leaves_line_unchanged(self, line_two: Line, stations: dict[str, Station]) -> None:
        """A rejected section must not alter the chain."""
        before = line_two.sections

        with pytest.raises(SectionConflictError):
            line_two.add_section(Section(stations["Yeoksam"], stations["Gangnam"], 3))

        assert line_two.sections is before

    def test_remove_station(self, line_two: Line, stations: dict[str, Station]) -> None:
        """Removing the terminal station drops the last section."""
        line_two.add_section(Section(stations["Yeoksam"], stations["Seolleung"], 10))

        line_two.remove_station(stations["Seolleung"])

        assert len(line_two.sections) == 1

    def test_remove_only_section_rejected(self, line_two: Line, stations: dict[str, Station]) -> None:
        """A line keeps at least one section."""
        with pytest.raises(SectionValidationError):
            line_two.remove_station(stations["Yeoksam"])

    def test_has_station(self, line_two: Line, stations: dict[str, Station]) -> None:
        """Line reports whether a station is on it."""
        assert line_two.has_station(stations["Gangnam"])
        assert not line_two.has_station(stations["Samseong"])

    def test_modify(self, line_two: Line) -> None:
        """Name and color can be changed."""
        line_two.modify("Line 3", "orange")

        assert line_two.name == "Line 3"
        assert line_two.color == "orange"

    def test_modify_ignores_none(self, line_two: Line) -> None:
        """A None value keeps the current attribute."""
        line_two.modify("Line 3", None)

        assert line_two.name == "Line 3"
        assert line_two.color == "green"
        assert "Line 3" in repr(line_two)
        assert "green" in repr(line_two)
