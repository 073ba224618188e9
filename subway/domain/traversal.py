"""
Station lookup maps and head-to-tail traversal of a section chain.

The chain is stored unordered. ChainIndex maps every station to the section
leaving it and the section arriving at it, so predecessor and successor lookups
are dictionary hits instead of scans over all sections.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable

from subway.domain.errors import BrokenChainError
from subway.domain.section import Section


class ChainIndex:
    """Read-only station -> section maps over one set of sections."""

    def __init__(self, sections: Iterable[Section]) -> None:
        self.sections: list[Section] = list(sections)
        self.outgoing: dict[Hashable, Section] = {}
        self.incoming: dict[Hashable, Section] = {}
        for section in self.sections:
            self.outgoing[section.up_station] = section
            self.incoming[section.down_station] = section

    def __len__(self) -> int:
        return len(self.sections)

    def __contains__(self, station: object) -> bool:
        return station in self.outgoing or station in self.incoming

    def next_section(self, station: Hashable) -> Section | None:
        """Section whose up station is `station`, if any."""
        return self.outgoing.get(station)

    def previous_section(self, station: Hashable) -> Section | None:
        """Section whose down station is `station`, if any."""
        return self.incoming.get(station)

    def is_head(self, station: Hashable) -> bool:
        return station in self.outgoing and station not in self.incoming

    def is_tail(self, station: Hashable) -> bool:
        return station in self.incoming and station not in self.outgoing


def find_head_section(index: ChainIndex) -> Section | None:
    """
    Find the first section of the chain.

    Starts from an arbitrary section and walks predecessors until none is left.
    Termination relies on the chain being a simple path.

    Returns:
        The head section, or None for an empty chain
    """
    if not index.sections:
        return None

    section = index.sections[0]
    while (previous := index.previous_section(section.up_station)) is not None:
        section = previous
    return section


def ordered_stations(index: ChainIndex) -> list[Hashable]:
    """
    List every station of the chain from head to tail.

    Examples:
        >>> index = ChainIndex([Section(1, "B", "C", 5), Section(1, "A", "B", 10)])
        >>> ordered_stations(index)
        ['A', 'B', 'C']

        >>> ordered_stations(ChainIndex([]))
        []
    """
    head = find_head_section(index)
    if head is None:
        return []

    stations = [head.up_station]
    section: Section | None = head
    while section is not None:
        stations.append(section.down_station)
        section = index.next_section(section.down_station)
    return stations


def ordered_sections(index: ChainIndex) -> list[Section]:
    """List the sections of the chain from head to tail."""
    result: list[Section] = []
    section = find_head_section(index)
    while section is not None:
        result.append(section)
        section = index.next_section(section.down_station)
    return result


def verify_single_path(index: ChainIndex) -> None:
    """
    Check that the indexed sections form exactly one simple path.

    Raises:
        BrokenChainError: A station has two sections leaving or arriving, there is
            not exactly one head, or some section is unreachable from the head
    """
    count = len(index)
    if not count:
        return

    if len(index.outgoing) != count or len(index.incoming) != count:
        raise BrokenChainError(count, 0)

    heads = [section for section in index.sections if section.up_station not in index.incoming]
    if len(heads) != 1:
        raise BrokenChainError(count, 0)

    reachable = 0
    section: Section | None = heads[0]
    while section is not None:
        reachable += 1
        section = index.next_section(section.down_station)
    if reachable != count:
        raise BrokenChainError(count, reachable)
