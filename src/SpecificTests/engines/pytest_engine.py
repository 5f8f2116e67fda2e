"""Programmatic pytest discovery and execution."""
from __future__ import annotations

import logging
import threading
from pathlib import Path

import pytest

from SpecificTests.engines.ports import DiscoveryEventsRegistrar
from SpecificTests.pipeline.errors import DiscoveryError, RunError
from SpecificTests.shared.types import (
    DiscoveredTestCase,
    DiscoveryRequestPayload,
    ProtocolConfig,
    RunRequestPayload,
)

logger = logging.getLogger(__name__)

_FAILED_COLLECTION = (
    pytest.ExitCode.INTERRUPTED,
    pytest.ExitCode.INTERNAL_ERROR,
    pytest.ExitCode.USAGE_ERROR,
)
_FAILED_RUN = (
    pytest.ExitCode.INTERNAL_ERROR,
    pytest.ExitCode.USAGE_ERROR,
)


def to_discovered_test_case(item: pytest.Item, source: str) -> DiscoveredTestCase:
    """Describe a collected pytest item as a discovered test case.

    The fully-qualified name is dotted, ``module.Class.test_name[param]``.
    The locator is the node id anchored at the absolute module path, so it
    stays valid whatever the rootdir of the later run is.
    """
    module = getattr(item, "module", None)
    cls = getattr(item, "cls", None)
    parts = [module.__name__] if module is not None else []
    if cls is not None:
        parts.append(cls.__name__)
    parts.append(item.name)
    fully_qualified_name = ".".join(parts) if module is not None else item.nodeid

    _, separator, tail = item.nodeid.partition("::")
    locator = f"{item.path}{separator}{tail}" if separator else str(item.path)

    _, lineno, _ = item.reportinfo()
    return DiscoveredTestCase(
        fully_qualified_name=fully_qualified_name,
        display_name=item.name,
        source=source,
        locator=locator,
        line_number=lineno if isinstance(lineno, int) else 0,
    )


class _CollectorPlugin:
    """Internal pytest plugin that reports collected items as one batch."""

    def __init__(self, source: str, registrar: DiscoveryEventsRegistrar) -> None:
        self._source = source
        self._registrar = registrar
        self.count = 0

    @pytest.hookimpl(trylast=True)
    def pytest_collection_modifyitems(self, items: list[pytest.Item]) -> None:
        batch = [to_discovered_test_case(item, self._source) for item in items]
        self.count = len(batch)
        items[:] = []  # Deselect all -- collect only
        self._registrar.on_discovered_tests(batch)

    def pytest_collectreport(self, report: pytest.CollectReport) -> None:
        if report.failed:
            self._registrar.log_warning(
                f"Failed to collect tests from {report.nodeid or self._source}"
            )


class PytestEngine:
    """Discovers and runs tests in-process through ``pytest.main``.

    Each source is collected separately and reported as its own batch.
    """

    name = "pytest"

    def __init__(self, adapter_path: str | None = None) -> None:
        self._adapter_path = adapter_path
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        self._cancelled.set()

    def _common_args(self) -> list[str]:
        if self._adapter_path:
            return ["-o", f"pythonpath={self._adapter_path}"]
        return []

    def discover_tests(
        self,
        payload: DiscoveryRequestPayload,
        registrar: DiscoveryEventsRegistrar,
        protocol_config: ProtocolConfig,
    ) -> None:
        for source in payload.sources:
            if self._cancelled.is_set():
                logger.debug(
                    "[SPECIFIC-TESTS] stage=discover engine=pytest "
                    "event=cancelled source=%s",
                    source,
                )
                return
            collector = _CollectorPlugin(source, registrar)
            args = [
                source,
                "--collect-only",
                "-q",
                "--no-header",
                *self._common_args(),
                *payload.run_settings.extra_args,
            ]
            exit_code = pytest.main(args, plugins=[collector])
            logger.debug(
                "[SPECIFIC-TESTS] stage=discover engine=pytest source=%s "
                "exit_code=%s tests=%d protocol=%d",
                source,
                exit_code,
                collector.count,
                protocol_config.version,
            )
            if exit_code in _FAILED_COLLECTION:
                raise DiscoveryError(
                    f"pytest could not collect tests from {source} "
                    f"(exit code {int(exit_code)})"
                )

    def build_run_args(self, payload: RunRequestPayload) -> list[str]:
        """Build pytest arguments that select exactly the payload's tests."""
        output_path = Path(payload.run_settings.output_dir)
        args = [t.locator for t in payload.test_cases]
        args.append(f"--junitxml={output_path / 'results.xml'}")
        if payload.test_case_filter:
            args.extend(["-k", payload.test_case_filter])
        args.extend(self._common_args())
        args.extend(payload.run_settings.extra_args)
        return args

    def run_tests(
        self,
        payload: RunRequestPayload,
        protocol_config: ProtocolConfig,
    ) -> int:
        if self._cancelled.is_set():
            raise RunError("Test run was cancelled before it started")
        Path(payload.run_settings.output_dir).mkdir(parents=True, exist_ok=True)
        args = self.build_run_args(payload)

        logger.info(
            "[SPECIFIC-TESTS] stage=run engine=pytest tests=%d protocol=%d",
            len(payload.test_cases),
            protocol_config.version,
        )
        exit_code = pytest.main(args)
        if exit_code in _FAILED_RUN:
            raise RunError(f"pytest run failed (exit code {int(exit_code)})")
        return int(exit_code)
