"""Engine registry for discovery and execution backends."""
from __future__ import annotations

from SpecificTests.engines.ports import ExecutionEngine
from SpecificTests.engines.pytest_engine import PytestEngine
from SpecificTests.engines.robot_engine import RobotEngine


class EngineRegistry:
    """Registry mapping framework names to their engine classes."""

    def __init__(self) -> None:
        self._engines: dict[str, type] = {}

    def register(self, engine_class: type) -> None:
        """Register an engine class by its name attribute."""
        self._engines[engine_class.name] = engine_class

    def get(self, name: str, adapter_path: str | None = None) -> ExecutionEngine:
        """Instantiate and return an engine by name."""
        if name not in self._engines:
            available = ", ".join(sorted(self._engines))
            msg = (
                f"Unknown framework {name!r}. "
                f"Available: {available}"
            )
            raise KeyError(msg)
        return self._engines[name](adapter_path=adapter_path)

    def available(self) -> list[str]:
        """Return names of all registered engines."""
        return sorted(self._engines)


def _build_default_registry() -> EngineRegistry:
    registry = EngineRegistry()
    registry.register(PytestEngine)
    registry.register(RobotEngine)
    return registry


default_registry = _build_default_registry()
