"""Sections aggregate: the section chain of one line."""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Iterator

import structlog

from subway.domain.errors import NoInsertionPointError
from subway.domain.insertion import (
    Append,
    Invalid,
    Prepend,
    SplitHead,
    SplitTail,
    classify_insertion,
    split_section,
    validate_insertion,
)
from subway.domain.removal import plan_removal
from subway.domain.section import Section
from subway.domain.traversal import (
    ChainIndex,
    find_head_section,
    ordered_sections,
    ordered_stations,
    verify_single_path,
)

logger = structlog.get_logger(__name__)


class Sections:
    """
    Owns the sections of one line and keeps them a single simple path.

    Every public mutation validates first and only then touches the collection,
    so a rejected call leaves the chain exactly as it was. The station lookup
    index is rebuilt after each successful mutation.

    Not thread-safe: callers serialize mutations of one chain.

    Example:
        >>> chain = Sections([Section("line-2", "A", "C", 10)])
        >>> chain.add(Section("line-2", "A", "B", 4))
        >>> chain.stations()
        ['A', 'B', 'C']
        >>> chain.remove("B")
        >>> chain.sections()
        [Section(line='line-2', up_station='A', down_station='C', distance=10)]
    """

    def __init__(self, sections: Iterable[Section] = ()) -> None:
        """
        Wrap already-stored sections, in any order.

        Raises:
            BrokenChainError: The sections are not one simple path
        """
        self._sections: list[Section] = list(sections)
        self._index = ChainIndex(self._sections)
        verify_single_path(self._index)

    def __len__(self) -> int:
        return len(self._sections)

    def __iter__(self) -> Iterator[Section]:
        return iter(list(self._sections))

    def __contains__(self, station: object) -> bool:
        return station in self._index

    def __repr__(self) -> str:
        return f"<Sections(stations={self.stations()})>"

    def _replace(self, removed: Iterable[Section], added: Iterable[Section]) -> None:
        for section in removed:
            self._sections.remove(section)
        self._sections.extend(added)
        self._index = ChainIndex(self._sections)

    def add(self, section: Section) -> None:
        """
        Insert a section, splitting an existing one when the new one nests inside it.

        Raises:
            NoAttachmentPointError: The section shares no station with the chain
            BothEndpointsAlreadyPresentError: Both stations are already on the chain
            InvalidSplitLengthError: A nested section is not shorter than the one it splits
            NoInsertionPointError: Internal inconsistency, the chain is corrupt
        """
        validate_insertion(self._index, section)

        if not self._sections:
            self._replace((), (section,))
            logger.debug(
                "section_chain_started",
                up_station=str(section.up_station),
                down_station=str(section.down_station),
            )
            return

        location = classify_insertion(self._index, section)
        match location:
            case Prepend() | Append():
                self._replace((), (section,))
            case SplitHead() | SplitTail():
                fore, rear = split_section(location, section)
                self._replace((location.section,), (fore, rear))
            case Invalid():
                raise NoInsertionPointError(section.up_station, section.down_station)

        logger.debug(
            "section_inserted",
            location=type(location).__name__,
            up_station=str(section.up_station),
            down_station=str(section.down_station),
            distance=section.distance,
        )

    def remove(self, station: Hashable) -> None:
        """
        Take a station off the chain.

        A head or tail station loses its only section. An interior station's two
        sections are merged into one whose distance is their sum.

        Raises:
            MinimumChainLengthError: The chain holds a single section
            StationNotInChainError: The station is not on the chain
        """
        plan = plan_removal(self._index, station)
        self._replace(plan.removed, () if plan.merged is None else (plan.merged,))
        logger.debug("station_detached", station=str(station), merged=plan.merged is not None)

    def stations(self) -> list[Hashable]:
        """Stations from head to tail; empty when there are no sections."""
        return ordered_stations(self._index)

    def sections(self) -> list[Section]:
        """Sections in no particular order."""
        return list(self._sections)

    def ordered_sections(self) -> list[Section]:
        """Sections from head to tail."""
        return ordered_sections(self._index)

    def head_section(self) -> Section | None:
        return find_head_section(self._index)

    def section_from(self, station: Hashable) -> Section | None:
        """Section leaving `station`, if any."""
        return self._index.next_section(station)
