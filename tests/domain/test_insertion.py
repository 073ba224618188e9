"""
Unit tests for insertion classification and section splitting.

These are pure functions, tested without a Sections aggregate.
"""

import pytest
from subway.domain import BothEndpointsAlreadyPresentError, InvalidSplitLengthError, NoAttachmentPointError
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
from subway.domain.traversal import ChainIndex

from tests.helpers.network import section


@pytest.fixture
def index() -> ChainIndex:
    """Chain A -(4)- B -(6)- C."""
    return ChainIndex([section("A", "B", 4), section("B", "C", 6)])


class TestValidateInsertion:
    """Test validate_insertion() pre-checks."""

    def test_empty_chain_accepts_anything(self) -> None:
        validate_insertion(ChainIndex([]), section("X", "Y", 1))

    def test_no_shared_station(self, index: ChainIndex) -> None:
        with pytest.raises(NoAttachmentPointError) as exc_info:
            validate_insertion(index, section("X", "Y", 1))

        assert exc_info.value.up_station == "X"
        assert exc_info.value.down_station == "Y"

    def test_both_stations_present(self, index: ChainIndex) -> None:
        with pytest.raises(BothEndpointsAlreadyPresentError):
            validate_insertion(index, section("A", "C", 1))

    def test_both_stations_present_reversed(self, index: ChainIndex) -> None:
        """Direction does not matter; both stations are already on the line."""
        with pytest.raises(BothEndpointsAlreadyPresentError):
            validate_insertion(index, section("C", "A", 1))

    def test_one_shared_station_passes(self, index: ChainIndex) -> None:
        validate_insertion(index, section("C", "D", 1))
        validate_insertion(index, section("Z", "A", 1))


class TestClassifyInsertion:
    """Test classify_insertion() on the A-B-C chain."""

    def test_prepend(self, index: ChainIndex) -> None:
        """Ending at the head station extends the line upwards."""
        assert classify_insertion(index, section("Z", "A", 3)) == Prepend()

    def test_append(self, index: ChainIndex) -> None:
        """Starting at the tail station extends the line downwards."""
        assert classify_insertion(index, section("C", "D", 3)) == Append()

    def test_split_head_at_head_station(self, index: ChainIndex) -> None:
        """Starting at the head station nests inside the first section."""
        assert classify_insertion(index, section("A", "X", 2)) == SplitHead(section("A", "B", 4))

    def test_split_head_at_interior_station(self, index: ChainIndex) -> None:
        """Starting at an interior station nests inside the section leaving it."""
        assert classify_insertion(index, section("B", "X", 2)) == SplitHead(section("B", "C", 6))

    def test_split_tail_at_tail_station(self, index: ChainIndex) -> None:
        """Ending at the tail station nests inside the last section."""
        assert classify_insertion(index, section("X", "C", 2)) == SplitTail(section("B", "C", 6))

    def test_split_tail_at_interior_station(self, index: ChainIndex) -> None:
        """Ending at an interior station nests inside the section arriving there, never branches."""
        assert classify_insertion(index, section("X", "B", 2)) == SplitTail(section("A", "B", 4))

    def test_single_section_chain(self) -> None:
        """With one section, each end station supports both an outside and an inside fit."""
        index = ChainIndex([section("A", "B", 10)])

        assert classify_insertion(index, section("Z", "A", 1)) == Prepend()
        assert classify_insertion(index, section("B", "Z", 1)) == Append()
        assert classify_insertion(index, section("A", "Z", 1)) == SplitHead(section("A", "B", 10))
        assert classify_insertion(index, section("Z", "B", 1)) == SplitTail(section("A", "B", 10))

    def test_unattached_candidate_is_invalid(self, index: ChainIndex) -> None:
        """Without validation first, an unattached candidate classifies as Invalid."""
        assert classify_insertion(index, section("X", "Y", 1)) == Invalid()


class TestSplitSection:
    """Test split_section() results."""

    def test_split_head(self) -> None:
        """Scenario: [A->C,10] + A->B,4 gives A->B,4 and B->C,6."""
        existing = section("A", "C", 10)
        fore, rear = split_section(SplitHead(existing), section("A", "B", 4))

        assert fore == section("A", "B", 4)
        assert rear == section("B", "C", 6)
        assert fore.distance + rear.distance == existing.distance

    def test_split_tail(self) -> None:
        existing = section("A", "C", 10)
        fore, rear = split_section(SplitTail(existing), section("B", "C", 3))

        assert fore == section("A", "B", 7)
        assert rear == section("B", "C", 3)
        assert fore.distance + rear.distance == existing.distance

    def test_split_keeps_existing_line(self) -> None:
        """Pieces belong to the line of the section being split."""
        from subway.domain import Section

        existing = Section("line-7", "A", "C", 10)
        fore, rear = split_section(SplitHead(existing), Section("line-7", "A", "B", 4))

        assert fore.line == "line-7"
        assert rear.line == "line-7"

    @pytest.mark.parametrize("distance", [10, 11])
    def test_split_head_too_long(self, distance: int) -> None:
        """A nested section must be strictly shorter than the one it splits."""
        with pytest.raises(InvalidSplitLengthError) as exc_info:
            split_section(SplitHead(section("A", "C", 10)), section("A", "B", distance))

        assert exc_info.value.distance == distance
        assert exc_info.value.existing_distance == 10

    @pytest.mark.parametrize("distance", [10, 25])
    def test_split_tail_too_long(self, distance: int) -> None:
        with pytest.raises(InvalidSplitLengthError):
            split_section(SplitTail(section("A", "C", 10)), section("B", "C", distance))
