from __future__ import annotations

import logging
from collections.abc import Sequence

from SpecificTests.selection.accumulator import SelectionAccumulator
from SpecificTests.selection.tracker import FilterTracker
from SpecificTests.shared.types import DiscoveredTestCase

logger = logging.getLogger(__name__)


class DiscoveryListener:
    """Registrar handed to the engine for a single discovery request.

    Feeds every discovered batch into the accumulator and relays engine
    warnings to the log.
    """

    def __init__(
        self,
        fragments: Sequence[str],
        tracker: FilterTracker,
        accumulator: SelectionAccumulator,
    ) -> None:
        self._fragments = tuple(fragments)
        self._tracker = tracker
        self._accumulator = accumulator

    def on_discovered_tests(self, batch: Sequence[DiscoveredTestCase]) -> None:
        self._accumulator.record_batch(batch, self._fragments, self._tracker)
        logger.debug(
            "[SPECIFIC-TESTS] stage=discover event=batch "
            "size=%d discovered=%d selected=%d undiscovered_filters=%d",
            len(batch),
            self._accumulator.discovered_count,
            self._accumulator.selected_count,
            len(self._tracker),
        )

    def log_warning(self, message: str) -> None:
        logger.warning(message)
