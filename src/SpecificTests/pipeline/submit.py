"""Decide whether, and with what, to submit a run once discovery is done."""
from __future__ import annotations

import enum
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from SpecificTests.engines.ports import ExecutionEngine
from SpecificTests.selection.tracker import FilterTracker
from SpecificTests.shared.types import (
    DEFAULT_PROTOCOL_CONFIG,
    DiscoveredTestCase,
    ProtocolConfig,
    RunRequestPayload,
    RunSettings,
)

logger = logging.getLogger(__name__)

SOME_TESTS_UNAVAILABLE = (
    "A total of {count} tests were discovered but some tests do not match "
    "the specified selection criteria({missing}). Use right value(s) and "
    "try again."
)
NO_TESTS_MATCHED = (
    "A total of {count} tests were discovered but no test matches the "
    "specified selection criteria({fragments}). Use right value(s) and "
    "try again."
)
NO_TESTS_IN_SOURCES = (
    "No test is available in {sources}. Make sure that test discoverer & "
    "executors are registered and platform & framework version settings "
    "are appropriate and try again."
)
SUGGEST_ADAPTER_PATH = (
    "Additionally, path to test adapters can be specified using "
    "--test-adapter-path. Example --test-adapter-path <pathToCustomAdapters>."
)


class SubmitAction(enum.Enum):
    RUN = "run"
    NO_MATCH = "no_match"
    NO_DISCOVERY = "no_discovery"


@dataclass(frozen=True)
class SubmissionPlan:
    action: SubmitAction
    warning: str | None = None
    payload: RunRequestPayload | None = None


class RunSubmitter:
    """Turns the accumulated selection into a run request, or a warning."""

    def decide(
        self,
        selected: Sequence[DiscoveredTestCase],
        tracker: FilterTracker,
        discovered_count: int,
        sources: Sequence[str],
        fragments: Sequence[str],
        adapter_path_configured: bool,
        run_settings: RunSettings,
        test_case_filter: str | None = None,
    ) -> SubmissionPlan:
        if selected:
            warning = None
            remaining = tracker.remaining()
            if remaining:
                # Set iteration order is arbitrary; keep the user's order.
                missing = [f for f in dict.fromkeys(fragments) if f in remaining]
                warning = SOME_TESTS_UNAVAILABLE.format(
                    count=discovered_count, missing=", ".join(missing)
                )
            payload = RunRequestPayload(
                test_cases=tuple(selected),
                run_settings=run_settings,
                keep_alive=False,
                test_case_filter=test_case_filter,
            )
            return SubmissionPlan(SubmitAction.RUN, warning, payload)

        if discovered_count > 0:
            warning = NO_TESTS_MATCHED.format(
                count=discovered_count, fragments=", ".join(fragments)
            )
            return SubmissionPlan(SubmitAction.NO_MATCH, warning)

        warning = NO_TESTS_IN_SOURCES.format(sources=", ".join(sources))
        if not adapter_path_configured:
            warning = f"{warning} {SUGGEST_ADAPTER_PATH}"
        return SubmissionPlan(SubmitAction.NO_DISCOVERY, warning)

    def submit(
        self,
        plan: SubmissionPlan,
        engine: ExecutionEngine,
        protocol_config: ProtocolConfig = DEFAULT_PROTOCOL_CONFIG,
    ) -> int | None:
        """Log the plan's warning and run its payload, if any.

        Returns the engine's return code, or None when nothing was run.
        """
        if plan.warning:
            logger.warning(plan.warning)
        if plan.action is not SubmitAction.RUN or plan.payload is None:
            return None

        logger.debug(
            "[SPECIFIC-TESTS] stage=run event=queued engine=%s tests=%d",
            engine.name,
            len(plan.payload.test_cases),
        )
        return engine.run_tests(plan.payload, protocol_config)
