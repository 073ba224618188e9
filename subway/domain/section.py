"""Section value: a directed edge between two adjacent stations on a line."""

from collections.abc import Hashable
from dataclasses import dataclass
from typing import Any

from subway.domain.errors import InvalidSectionError


@dataclass(frozen=True, slots=True)
class Section:
    """
    One directed hop of a line, from up_station to down_station.

    Sections are immutable values. Chain operations never edit a section in place;
    splits and merges build new sections and discard the old ones. Two sections are
    equal when line, stations and distance all match.

    The line reference is opaque here: it is carried along unchanged so that
    sections produced by a split or merge belong to the same line as their source.
    """

    line: Any
    up_station: Hashable
    down_station: Hashable
    distance: int

    def __post_init__(self) -> None:
        # bool is an int subclass but never a distance
        valid_distance = isinstance(self.distance, int) and not isinstance(self.distance, bool) and self.distance > 0
        if self.up_station == self.down_station or not valid_distance:
            raise InvalidSectionError(self.up_station, self.down_station, self.distance)

    @property
    def stations(self) -> tuple[Hashable, Hashable]:
        return (self.up_station, self.down_station)

    def has_station(self, station: Hashable) -> bool:
        return station in (self.up_station, self.down_station)

    def is_up_station(self, station: Hashable) -> bool:
        return self.up_station == station

    def is_down_station(self, station: Hashable) -> bool:
        return self.down_station == station

    # Overlap predicates, named from this (existing) section's point of view.

    def is_outside_overlap_on_up(self, candidate: "Section") -> bool:
        """Candidate ends where this section starts (it sits just before it)."""
        return self.up_station == candidate.down_station

    def is_outside_overlap_on_down(self, candidate: "Section") -> bool:
        """Candidate starts where this section ends (it sits just after it)."""
        return self.down_station == candidate.up_station

    def is_inside_overlap_on_up(self, candidate: "Section") -> bool:
        """Candidate starts where this section starts."""
        return self.up_station == candidate.up_station

    def is_inside_overlap_on_down(self, candidate: "Section") -> bool:
        """Candidate ends where this section ends."""
        return self.down_station == candidate.down_station
