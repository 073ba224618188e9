"""Removing a station from a section chain, merging around interior stations."""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass

from subway.domain.errors import MinimumChainLengthError, StationNotInChainError
from subway.domain.section import Section
from subway.domain.traversal import ChainIndex


@dataclass(frozen=True, slots=True)
class RemovalPlan:
    """Sections to drop and the section (if any) to add in their place."""

    removed: tuple[Section, ...]
    merged: Section | None = None


def merge_sections(front: Section, back: Section) -> Section:
    """
    Join two adjacent sections into one spanning both.

    Examples:
        >>> merge_sections(Section(1, "A", "B", 4), Section(1, "B", "C", 6))
        Section(line=1, up_station='A', down_station='C', distance=10)
    """
    return Section(front.line, front.up_station, back.down_station, front.distance + back.distance)


def plan_removal(index: ChainIndex, station: Hashable) -> RemovalPlan:
    """
    Work out which sections change when `station` leaves the chain.

    Args:
        index: Current chain
        station: Station to remove

    Returns:
        RemovalPlan; nothing is modified here

    Raises:
        MinimumChainLengthError: The chain holds a single section
        StationNotInChainError: No section references the station
    """
    if len(index) == 1:
        raise MinimumChainLengthError()
    if station not in index:
        raise StationNotInChainError(station)

    front = index.previous_section(station)
    back = index.next_section(station)

    if front is not None and back is not None:
        return RemovalPlan(removed=(front, back), merged=merge_sections(front, back))

    # head or tail station: drop the one section touching it
    return RemovalPlan(removed=tuple(section for section in (front, back) if section is not None))
