"""Parse, validate, discover and submit: one name-based selection run."""
from __future__ import annotations

import enum
import logging
import threading

from SpecificTests.engines.ports import ExecutionEngine
from SpecificTests.pipeline.errors import (
    ConfigurationError,
    SelectionCancelledError,
)
from SpecificTests.pipeline.listener import DiscoveryListener
from SpecificTests.pipeline.submit import RunSubmitter, SubmissionPlan
from SpecificTests.selection.accumulator import SelectionAccumulator
from SpecificTests.selection.fragments import FRAGMENTS_REQUIRED, parse_fragments
from SpecificTests.selection.tracker import FilterTracker
from SpecificTests.shared.config import SelectionConfig, SelectionOptions
from SpecificTests.shared.types import (
    DEFAULT_PROTOCOL_CONFIG,
    DiscoveryRequestPayload,
    ProtocolConfig,
    RunSettings,
)

logger = logging.getLogger(__name__)

MISSING_SOURCES = (
    "No test source was provided. Specify at least one test file or "
    "directory to discover tests from."
)
FILTER_NOT_ALLOWED = (
    "The --testcasefilter argument cannot be combined with --tests. "
    "Use one of them to select tests."
)


class OrchestratorState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    PARSED = "parsed"
    VALIDATED = "validated"
    DISCOVERING = "discovering"
    COMPLETED = "completed"


class Orchestrator:
    """Runs only the tests whose fully-qualified names contain a fragment.

    Usage::

        orchestrator = Orchestrator(options, run_settings, engine)
        orchestrator.initialize("Login,Checkout")
        orchestrator.execute()

    Nothing is shared between instances; use one per invocation.
    """

    def __init__(
        self,
        options: SelectionOptions,
        run_settings: RunSettings,
        engine: ExecutionEngine,
        config: SelectionConfig | None = None,
        protocol_config: ProtocolConfig = DEFAULT_PROTOCOL_CONFIG,
    ) -> None:
        self._options = options
        self._run_settings_source = run_settings
        self._engine = engine
        self._config = config or SelectionConfig()
        self._protocol_config = protocol_config
        self._submitter = RunSubmitter()
        self._accumulator = SelectionAccumulator()
        self._cancelled = threading.Event()

        self._fragments: list[str] = []
        self._tracker: FilterTracker | None = None
        self._effective_run_settings: RunSettings | None = None
        self.state = OrchestratorState.UNINITIALIZED
        self.plan: SubmissionPlan | None = None
        self.run_return_code: int | None = None

    @property
    def fragments(self) -> tuple[str, ...]:
        return tuple(self._fragments)

    @property
    def tracker(self) -> FilterTracker | None:
        return self._tracker

    @property
    def accumulator(self) -> SelectionAccumulator:
        return self._accumulator

    @property
    def effective_run_settings(self) -> RunSettings | None:
        return self._effective_run_settings

    def initialize(self, argument: str | None) -> None:
        """Parse the fragment argument and start tracking every fragment."""
        self._fragments = parse_fragments(argument, self._config)
        self._tracker = FilterTracker(self._fragments)
        self.state = OrchestratorState.PARSED

    def cancel(self) -> None:
        """Cancel discovery; no run is submitted afterwards."""
        self._cancelled.set()
        self._engine.cancel()

    def execute(self) -> int:
        """Discover, select and run. Returns 0 even when no test ran."""
        if self.state is OrchestratorState.UNINITIALIZED or self._tracker is None:
            raise ConfigurationError(FRAGMENTS_REQUIRED)
        if self.state is not OrchestratorState.PARSED:
            raise ConfigurationError(
                f"Cannot execute an orchestrator in state {self.state.value!r}; "
                "create a new Orchestrator for each invocation."
            )
        self._validate()

        self._effective_run_settings = self._run_settings_source
        self._discover()
        self._raise_if_cancelled()

        self.plan = self._submitter.decide(
            selected=self._accumulator.selected,
            tracker=self._tracker,
            discovered_count=self._accumulator.discovered_count,
            sources=self._options.sources,
            fragments=self._fragments,
            adapter_path_configured=bool(self._options.test_adapter_path),
            run_settings=self._effective_run_settings,
            test_case_filter=self._options.test_case_filter,
        )
        self._raise_if_cancelled()
        self.run_return_code = self._submitter.submit(
            self.plan, self._engine, self._protocol_config
        )
        self.state = OrchestratorState.COMPLETED

        logger.info(
            "[SPECIFIC-TESTS] stage=complete action=%s discovered=%d "
            "selected=%d undiscovered_filters=%d",
            self.plan.action.value,
            self._accumulator.discovered_count,
            self._accumulator.selected_count,
            len(self._tracker),
        )
        return 0

    def _validate(self) -> None:
        if not self._options.sources:
            raise ConfigurationError(MISSING_SOURCES)
        if (self._options.test_case_filter or "").strip():
            raise ConfigurationError(FILTER_NOT_ALLOWED)
        self.state = OrchestratorState.VALIDATED

    def _discover(self) -> None:
        assert self._tracker is not None
        assert self._effective_run_settings is not None

        logger.info("Starting test discovery, please wait...")
        if self._options.diag_log_path:
            logger.info(
                "Logging diagnostics in file: %s", self._options.diag_log_path
            )

        listener = DiscoveryListener(
            self._fragments, self._tracker, self._accumulator
        )
        payload = DiscoveryRequestPayload(
            sources=tuple(self._options.sources),
            run_settings=self._effective_run_settings,
        )
        self.state = OrchestratorState.DISCOVERING
        self._engine.discover_tests(payload, listener, self._protocol_config)

    def _raise_if_cancelled(self) -> None:
        if self._cancelled.is_set():
            logger.warning(
                "[SPECIFIC-TESTS] stage=discover event=cancelled "
                "discovered=%d",
                self._accumulator.discovered_count,
            )
            raise SelectionCancelledError("Test selection was cancelled.")
