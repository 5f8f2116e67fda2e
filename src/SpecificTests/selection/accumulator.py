"""Cumulative selection of discovered tests across discovery batches."""
from __future__ import annotations

import threading
from collections.abc import Sequence

from SpecificTests.selection.tracker import FilterTracker
from SpecificTests.shared.types import DiscoveredTestCase


def matches_fragment(fully_qualified_name: str, fragment: str) -> bool:
    """Case-insensitive substring containment."""
    return fragment.lower() in fully_qualified_name.lower()


class SelectionAccumulator:
    """Deduplicated matched test cases plus a count of everything seen.

    ``record_batch`` may be called from any thread. Each call is applied
    atomically, so the cumulative result does not depend on how the
    engine splits its batches.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._selected: list[DiscoveredTestCase] = []
        self._selected_ids: set[int] = set()
        self._discovered_count = 0

    def record_batch(
        self,
        batch: Sequence[DiscoveredTestCase],
        fragments: Sequence[str],
        tracker: FilterTracker,
    ) -> None:
        with self._lock:
            self._discovered_count += len(batch)
            for test_case in batch:
                # Every fragment is checked, including already matched ones.
                for fragment in fragments:
                    if matches_fragment(test_case.fully_qualified_name, fragment):
                        self._add(test_case)
                        tracker.mark_matched(fragment)
                        break

    def _add(self, test_case: DiscoveredTestCase) -> None:
        if id(test_case) in self._selected_ids:
            return
        self._selected_ids.add(id(test_case))
        self._selected.append(test_case)

    @property
    def selected(self) -> tuple[DiscoveredTestCase, ...]:
        with self._lock:
            return tuple(self._selected)

    @property
    def selected_count(self) -> int:
        with self._lock:
            return len(self._selected)

    @property
    def discovered_count(self) -> int:
        with self._lock:
            return self._discovered_count
