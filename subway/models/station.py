"""Station model."""

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Station:
    """
    A named point that lines pass through.

    Stations are shared between lines, so identity is the id alone; the name
    plays no part in equality or hashing.
    """

    id: int
    name: str = field(compare=False)

    def __repr__(self) -> str:
        """String representation of the station."""
        return f"<Station(id={self.id}, name={self.name!r})>"
