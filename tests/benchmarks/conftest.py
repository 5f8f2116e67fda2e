"""Fixtures for benchmark tests generating large synthetic discovery batches."""
from __future__ import annotations

import pytest

from SpecificTests.shared.types import DiscoveredTestCase


@pytest.fixture
def make_batches():
    """Factory fixture that splits n synthetic test cases into batches."""

    def _make(n: int, batch_size: int = 100) -> list[list[DiscoveredTestCase]]:
        cases = [
            DiscoveredTestCase(
                fully_qualified_name=f"Suite{i // 50}.Feature{i % 10}.Test{i:05d}",
                display_name=f"Test{i:05d}",
                source=f"suite_{i // 50}.robot",
                locator=f"suite_{i // 50}.robot::Test{i:05d}",
            )
            for i in range(n)
        ]
        return [cases[i:i + batch_size] for i in range(0, n, batch_size)]

    return _make
