"""Shared fixtures for unit tests."""
from __future__ import annotations

import pytest

from SpecificTests.shared.types import DiscoveredTestCase


@pytest.fixture
def make_test_case():
    """Factory fixture for discovered test cases keyed by fully-qualified name."""

    def _make(name: str, source: str = "tests/") -> DiscoveredTestCase:
        return DiscoveredTestCase(
            fully_qualified_name=name,
            display_name=name.rsplit(".", 1)[-1],
            source=source,
            locator=f"{source}::{name}",
        )

    return _make
