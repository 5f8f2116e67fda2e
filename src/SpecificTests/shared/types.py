from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, eq=False)
class DiscoveredTestCase:
    """A test case reported by a discovery engine.

    Compared by identity: two records with the same name coming from
    different batches are different test cases.
    """

    fully_qualified_name: str
    display_name: str
    source: str
    locator: str
    line_number: int = 0


@dataclass(frozen=True)
class RunSettings:
    """Effective run settings, captured once per execution."""

    output_dir: Path = Path("./results")
    extra_args: tuple[str, ...] = ()


@dataclass(frozen=True)
class ProtocolConfig:
    """Version of the request protocol spoken with an engine."""

    version: int = 1


DEFAULT_PROTOCOL_CONFIG = ProtocolConfig()


@dataclass(frozen=True)
class DiscoveryRequestPayload:
    sources: tuple[str, ...]
    run_settings: RunSettings


@dataclass(frozen=True)
class RunRequestPayload:
    """Exactly the tests to run, plus the settings to run them with."""

    test_cases: tuple[DiscoveredTestCase, ...]
    run_settings: RunSettings
    keep_alive: bool = False
    test_case_filter: str | None = None
    sources: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.sources:
            unique = dict.fromkeys(t.source for t in self.test_cases)
            object.__setattr__(self, "sources", tuple(unique))
