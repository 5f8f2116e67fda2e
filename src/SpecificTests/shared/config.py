from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class SelectionConfig:
    """How the raw name-fragment argument is tokenized."""

    split_delimiter: str = ","
    escape_delimiter: str = "\\"
    list_file_suffix: str = ".txt"


@dataclass(frozen=True)
class SelectionOptions:
    """Command-line options consumed by a single invocation."""

    sources: tuple[str, ...] = ()
    framework: str = "pytest"
    test_case_filter: str | None = None
    test_adapter_path: str | None = None
    output_dir: Path = Path("./results")
    diag_log_path: Path | None = None
