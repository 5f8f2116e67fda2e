"""Selection bounded context: name fragments, filter tracking and matching."""

from SpecificTests.selection.accumulator import SelectionAccumulator, matches_fragment
from SpecificTests.selection.fragments import parse_fragments, tokenize
from SpecificTests.selection.tracker import FilterTracker

__all__ = [
    "FilterTracker",
    "SelectionAccumulator",
    "matches_fragment",
    "parse_fragments",
    "tokenize",
]
