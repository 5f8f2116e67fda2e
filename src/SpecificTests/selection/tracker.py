from __future__ import annotations

from collections.abc import Iterable


class FilterTracker:
    """Fragments that no discovered test has matched yet.

    Starts with every fragment and only ever shrinks.
    """

    def __init__(self, fragments: Iterable[str]) -> None:
        self._initial: frozenset[str] = frozenset(fragments)
        self._undiscovered: set[str] = set(self._initial)

    def mark_matched(self, fragment: str) -> None:
        self._undiscovered.discard(fragment)

    def remaining(self) -> frozenset[str]:
        return frozenset(self._undiscovered)

    @property
    def initial(self) -> frozenset[str]:
        return self._initial

    def __len__(self) -> int:
        return len(self._undiscovered)
