"""
Where a new section goes relative to an existing chain.

classify_insertion() is a pure function: it looks at the chain and the candidate
and returns a tagged InsertLocation. The aggregate then applies it. Only the
split variants carry the existing section they cut in two.
"""

from __future__ import annotations

from dataclasses import dataclass

from subway.domain.errors import (
    BothEndpointsAlreadyPresentError,
    InvalidSplitLengthError,
    NoAttachmentPointError,
)
from subway.domain.section import Section
from subway.domain.traversal import ChainIndex


@dataclass(frozen=True, slots=True)
class Prepend:
    """Candidate ends at the head station and becomes the new first section."""


@dataclass(frozen=True, slots=True)
class Append:
    """Candidate starts at the tail station and becomes the new last section."""


@dataclass(frozen=True, slots=True)
class SplitHead:
    """Candidate starts where `section` starts and cuts it in two."""

    section: Section


@dataclass(frozen=True, slots=True)
class SplitTail:
    """Candidate ends where `section` ends and cuts it in two."""

    section: Section


@dataclass(frozen=True, slots=True)
class Invalid:
    """Candidate touches the chain nowhere it could be inserted."""


InsertLocation = Prepend | Append | SplitHead | SplitTail | Invalid


def validate_insertion(index: ChainIndex, candidate: Section) -> None:
    """
    Check that a candidate may join a non-empty chain.

    Raises:
        NoAttachmentPointError: Neither station of the candidate is on the chain
        BothEndpointsAlreadyPresentError: Both stations are already on the chain
    """
    if not len(index):
        return

    has_up = candidate.up_station in index
    has_down = candidate.down_station in index
    if not has_up and not has_down:
        raise NoAttachmentPointError(candidate.up_station, candidate.down_station)
    if has_up and has_down:
        raise BothEndpointsAlreadyPresentError(candidate.up_station, candidate.down_station)


def classify_insertion(index: ChainIndex, candidate: Section) -> InsertLocation:
    """
    Decide how a validated candidate attaches to the chain.

    Exactly one station of the candidate is on the chain. If that station is the
    down station, the candidate either extends the head or is nested at the end of
    the section arriving there. If it is the up station, the candidate either
    extends the tail or is nested at the start of the section leaving there.

    Examples:
        >>> index = ChainIndex([Section(1, "A", "C", 10)])
        >>> classify_insertion(index, Section(1, "C", "D", 3))
        Append()
        >>> classify_insertion(index, Section(1, "A", "B", 4))
        SplitHead(section=Section(line=1, up_station='A', down_station='C', distance=10))
    """
    up, down = candidate.up_station, candidate.down_station

    if up in index:
        if index.is_tail(up):
            return Append()
        if (existing := index.next_section(up)) is not None and existing.is_inside_overlap_on_up(candidate):
            return SplitHead(existing)
        return Invalid()

    if down in index:
        if index.is_head(down):
            return Prepend()
        if (existing := index.previous_section(down)) is not None and existing.is_inside_overlap_on_down(candidate):
            return SplitTail(existing)

    return Invalid()


def split_section(location: SplitHead | SplitTail, candidate: Section) -> tuple[Section, Section]:
    """
    Cut the section held by `location` around the candidate.

    Returns:
        (fore, rear) sections replacing the existing one, in travel order. Their
        distances add up to the existing section's distance.

    Raises:
        InvalidSplitLengthError: The candidate is not strictly shorter than the section it splits
    """
    existing = location.section
    if candidate.distance >= existing.distance:
        raise InvalidSplitLengthError(candidate.distance, existing.distance)

    remainder = existing.distance - candidate.distance
    if isinstance(location, SplitHead):
        fore = Section(existing.line, existing.up_station, candidate.down_station, candidate.distance)
        rear = Section(existing.line, candidate.down_station, existing.down_station, remainder)
    else:
        fore = Section(existing.line, existing.up_station, candidate.up_station, remainder)
        rear = Section(existing.line, candidate.up_station, existing.down_station, candidate.distance)
    return fore, rear
