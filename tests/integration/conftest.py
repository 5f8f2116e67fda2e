from __future__ import annotations

from pathlib import Path

import pytest

from SpecificTests.shared.config import SelectionOptions
from SpecificTests.shared.types import RunSettings

FIXTURES = Path(__file__).resolve().parent.parent / "fixtures"


@pytest.fixture
def sample_pytest_suite() -> Path:
    return FIXTURES / "sample_pytest_suite"


@pytest.fixture
def sample_robot_suite() -> Path:
    return FIXTURES / "sample_robot_suite"


@pytest.fixture
def make_invocation(tmp_path):
    """Factory for (options, run_settings) pairs writing into tmp_path."""

    def _make(*sources: Path, framework: str = "pytest", extra_args=()):
        output_dir = tmp_path / "results"
        options = SelectionOptions(
            sources=tuple(str(s) for s in sources),
            framework=framework,
            output_dir=output_dir,
        )
        return options, RunSettings(output_dir=output_dir, extra_args=tuple(extra_args))

    return _make
