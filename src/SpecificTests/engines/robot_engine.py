"""Robot Framework discovery and execution through robot.api."""
from __future__ import annotations

import json
import logging
import threading
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from robot.api import SuiteVisitor
from robot.api import TestSuite as RobotTestSuite
from robot.errors import DataError

from SpecificTests.engines.ports import DiscoveryEventsRegistrar
from SpecificTests.pipeline.errors import DiscoveryError, RunError
from SpecificTests.shared.types import (
    DiscoveredTestCase,
    DiscoveryRequestPayload,
    ProtocolConfig,
    RunRequestPayload,
)

logger = logging.getLogger(__name__)

SELECTION_FILE_NAME = "selected_tests.json"


def robot_locator(test: Any) -> str:
    """Stable handle for a Robot test: suite file + test name.

    Independent of the generated top-level suite name, which changes with
    the set of sources given to robot.
    """
    return f"{test.source}::{test.name}"


class SelectedTestsModifier(SuiteVisitor):
    """Pre-run modifier that drops every test not named in a selection file.

    Tests are matched by ``robot_locator``. Suites left without tests are
    pruned, and locators that no longer resolve to a test are logged once
    the top-level suite has been visited.

    Usage CLI::

        robot --prerunmodifier SpecificTests.engines.robot_engine.SelectedTestsModifier:file tests/
    """

    def __init__(self, selection_file: str) -> None:
        data = json.loads(Path(selection_file).read_text(encoding="utf-8"))
        self._locators: set[str] = {t["locator"] for t in data["selected"]}
        self._found: set[str] = set()
        self._removed = 0

    def start_suite(self, suite) -> None:  # type: ignore[override]
        kept = [t for t in suite.tests if robot_locator(t) in self._locators]
        self._removed += len(suite.tests) - len(kept)
        self._found.update(robot_locator(t) for t in kept)
        suite.tests = kept

    def end_suite(self, suite) -> None:  # type: ignore[override]
        suite.suites = [s for s in suite.suites if s.test_count > 0]
        if suite.parent is None:
            self._report()

    def visit_test(self, test) -> None:  # type: ignore[override]
        pass

    @property
    def unresolved(self) -> set[str]:
        """Selected locators with no matching test in the visited suite."""
        return self._locators - self._found

    def _report(self) -> None:
        logger.info(
            "[SPECIFIC-TESTS] stage=run engine=robot event=filtered "
            "kept=%d removed=%d",
            len(self._found),
            self._removed,
        )
        for locator in sorted(self.unresolved):
            logger.warning(
                "[SPECIFIC-TESTS] stage=run engine=robot event=unresolved "
                "locator=%s",
                locator,
            )


def _suites_with_tests(suite: Any) -> Iterator[Any]:
    if suite.tests:
        yield suite
    for child in suite.suites:
        yield from _suites_with_tests(child)


def _source_for(test: Any, sources: tuple[str, ...]) -> str:
    """Return the user-supplied source that contains ``test``."""
    test_path = Path(str(test.source)).resolve()
    for source in sources:
        source_path = Path(source).resolve()
        if test_path == source_path or source_path in test_path.parents:
            return source
    return str(test.source)


class RobotEngine:
    """Robot Framework discovery and execution.

    Discovers with ``TestSuite.from_file_system`` and runs through
    ``robot.run_cli`` with a selection pre-run modifier. Every suite that directly owns tests is reported as its own batch.
    """

    name = "robot"

    def __init__(self, adapter_path: str | None = None) -> None:
        self._adapter_path = adapter_path
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        self._cancelled.set()

    def discover_tests(
        self,
        payload: DiscoveryRequestPayload,
        registrar: DiscoveryEventsRegistrar,
        protocol_config: ProtocolConfig,
    ) -> None:
        try:
            root = RobotTestSuite.from_file_system(
                *payload.sources, allow_empty_suite=True
            )
        except DataError as exc:
            raise DiscoveryError(
                f"Robot Framework could not parse {', '.join(payload.sources)}: {exc}"
            ) from exc

        for suite in _suites_with_tests(root):
            if self._cancelled.is_set():
                logger.debug(
                    "[SPECIFIC-TESTS] stage=discover engine=robot event=cancelled"
                )
                return
            batch = [
                DiscoveredTestCase(
                    fully_qualified_name=test.full_name,
                    display_name=test.name,
                    source=_source_for(test, payload.sources),
                    locator=robot_locator(test),
                    line_number=test.lineno or 0,
                )
                for test in suite.tests
            ]
            logger.debug(
                "[SPECIFIC-TESTS] stage=discover engine=robot suite=%s "
                "tests=%d protocol=%d",
                suite.full_name,
                len(batch),
                protocol_config.version,
            )
            registrar.on_discovered_tests(batch)

    def write_selection(self, payload: RunRequestPayload) -> Path:
        """Write the selection file read by SelectedTestsModifier."""
        output_dir = Path(payload.run_settings.output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        selection_file = output_dir / SELECTION_FILE_NAME
        data = {
            "selected": [
                {"name": t.fully_qualified_name, "locator": t.locator}
                for t in payload.test_cases
            ],
        }
        selection_file.write_text(json.dumps(data, indent=2), encoding="utf-8")
        return selection_file

    def build_robot_args(
        self, payload: RunRequestPayload, selection_file: Path
    ) -> list[str]:
        """Build robot CLI arguments with the selection --prerunmodifier."""
        args: list[str] = [
            "--outputdir",
            str(payload.run_settings.output_dir),
            "--prerunmodifier",
            f"{SelectedTestsModifier.__module__}.SelectedTestsModifier:{selection_file}",
        ]
        if payload.test_case_filter:
            args.extend(["--include", payload.test_case_filter])
        if self._adapter_path:
            args.extend(["--pythonpath", self._adapter_path])
        args.extend(payload.run_settings.extra_args)
        args.extend(payload.sources)
        return args

    def run_tests(
        self,
        payload: RunRequestPayload,
        protocol_config: ProtocolConfig,
    ) -> int:
        import robot

        if self._cancelled.is_set():
            raise RunError("Test run was cancelled before it started")
        selection_file = self.write_selection(payload)
        args = self.build_robot_args(payload, selection_file)

        logger.info(
            "[SPECIFIC-TESTS] stage=run engine=robot tests=%d protocol=%d",
            len(payload.test_cases),
            protocol_config.version,
        )
        return_code = robot.run_cli(args, exit=False)  # type: ignore[attr-defined]
        # 251-255 are Robot's own failures, not failing tests.
        if return_code > 250:
            raise RunError(f"Robot Framework run failed (return code {return_code})")
        return return_code
