"""Custom exception hierarchy for name-based test selection."""
from __future__ import annotations


class SpecificTestsError(Exception):
    """Base exception for name-based test selection."""


class ConfigurationError(SpecificTestsError):
    """Raised when the invocation is misconfigured, before any discovery."""


class CollaboratorError(SpecificTestsError):
    """Raised by a test engine when discovery or execution fails."""


class DiscoveryError(CollaboratorError):
    """Raised when an engine cannot discover tests from its sources."""


class RunError(CollaboratorError):
    """Raised when an engine cannot start a test run."""


class SelectionCancelledError(SpecificTestsError):
    """Raised when the invocation was cancelled before tests were submitted."""
