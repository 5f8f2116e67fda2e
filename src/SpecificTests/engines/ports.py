"""Test engine protocols -- the ports for discovery and execution adapters."""
from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from SpecificTests.shared.types import (
    DiscoveredTestCase,
    DiscoveryRequestPayload,
    ProtocolConfig,
    RunRequestPayload,
)


@runtime_checkable
class DiscoveryEventsRegistrar(Protocol):
    """Receives discovery events from an engine.

    ``on_discovered_tests`` is called zero or more times, from whatever
    thread the engine chooses, before ``discover_tests`` returns.
    """

    def on_discovered_tests(self, batch: Sequence[DiscoveredTestCase]) -> None: ...

    def log_warning(self, message: str) -> None: ...


@runtime_checkable
class ExecutionEngine(Protocol):
    """Protocol for test discovery and execution backends.

    Decouples selection from pytest, Robot Framework or any other runner.
    ``discover_tests`` returning is the discovery-complete signal.
    """

    @property
    def name(self) -> str: ...

    def discover_tests(
        self,
        payload: DiscoveryRequestPayload,
        registrar: DiscoveryEventsRegistrar,
        protocol_config: ProtocolConfig,
    ) -> None: ...

    def run_tests(
        self,
        payload: RunRequestPayload,
        protocol_config: ProtocolConfig,
    ) -> int: ...

    def cancel(self) -> None: ...
