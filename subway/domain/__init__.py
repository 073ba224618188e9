"""Section chain domain: pure, synchronous, no I/O."""

from subway.domain.errors import (
    BothEndpointsAlreadyPresentError,
    BrokenChainError,
    InvalidSectionError,
    InvalidSplitLengthError,
    MinimumChainLengthError,
    NoAttachmentPointError,
    NoInsertionPointError,
    SectionError,
    StationNotInChainError,
)
from subway.domain.section import Section
from subway.domain.sections import Sections

__all__ = [
    "Section",
    "Sections",
    # Errors
    "SectionError",
    "InvalidSectionError",
    "NoAttachmentPointError",
    "BothEndpointsAlreadyPresentError",
    "NoInsertionPointError",
    "InvalidSplitLengthError",
    "MinimumChainLengthError",
    "StationNotInChainError",
    "BrokenChainError",
]
