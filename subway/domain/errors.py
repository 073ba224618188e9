"""Exceptions raised by section chain operations."""

from collections.abc import Hashable


class SectionError(Exception):
    """Base exception for section chain errors."""

    pass


class InvalidSectionError(SectionError, ValueError):
    """Raised when a section value itself is malformed."""

    def __init__(self, up_station: Hashable, down_station: Hashable, distance: int) -> None:
        self.up_station = up_station
        self.down_station = down_station
        self.distance = distance
        if up_station == down_station:
            reason = "up and down stations must differ"
        else:
            reason = "distance must be a positive integer"
        super().__init__(f"Invalid section {up_station!r} -> {down_station!r} ({distance}): {reason}")


class NoAttachmentPointError(SectionError):
    """Raised when a new section shares no station with the existing chain."""

    def __init__(self, up_station: Hashable, down_station: Hashable) -> None:
        self.up_station = up_station
        self.down_station = down_station
        super().__init__(
            f"Neither {up_station!r} nor {down_station!r} is on the line; "
            "a new section must share one station with the existing sections."
        )


class BothEndpointsAlreadyPresentError(SectionError):
    """Raised when both stations of a new section are already on the line."""

    def __init__(self, up_station: Hashable, down_station: Hashable) -> None:
        self.up_station = up_station
        self.down_station = down_station
        super().__init__(f"Both {up_station!r} and {down_station!r} are already on the line.")


class NoInsertionPointError(SectionError):
    """Raised when a validated section matches no insertion location.

    Validation guarantees a match, so this signals a corrupted chain rather than bad input.
    """

    def __init__(self, up_station: Hashable, down_station: Hashable) -> None:
        self.up_station = up_station
        self.down_station = down_station
        super().__init__(f"No insertion point found for section {up_station!r} -> {down_station!r}.")


class InvalidSplitLengthError(SectionError):
    """Raised when a section nested in an existing one is not strictly shorter."""

    def __init__(self, distance: int, existing_distance: int) -> None:
        self.distance = distance
        self.existing_distance = existing_distance
        super().__init__(
            f"Section distance {distance} must be shorter than the section it splits ({existing_distance})."
        )


class MinimumChainLengthError(SectionError):
    """Raised when removing a station would leave the line without sections."""

    def __init__(self) -> None:
        super().__init__("A line must keep at least one section; its last section cannot be removed.")


class StationNotInChainError(SectionError):
    """Raised when the station to remove is not on the line."""

    def __init__(self, station: Hashable) -> None:
        self.station = station
        super().__init__(f"Station {station!r} is not on the line.")


class BrokenChainError(SectionError):
    """Raised when stored sections do not form a single simple path."""

    def __init__(self, section_count: int, reachable_count: int) -> None:
        self.section_count = section_count
        self.reachable_count = reachable_count
        super().__init__(
            f"Sections do not form a single path: {reachable_count} of {section_count} reachable from the head."
        )
