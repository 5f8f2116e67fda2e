"""CLI entry point: run only the tests whose names contain given fragments."""
from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from SpecificTests.pipeline.errors import (
    CollaboratorError,
    ConfigurationError,
    SelectionCancelledError,
)

logger = logging.getLogger("SpecificTests")

PASSTHROUGH_SEPARATOR = "--"


def _setup_logging(verbose: bool = False, diag_log_path: Path | None = None) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    console = logging.StreamHandler()
    console.setLevel(level)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[console],
    )
    if diag_log_path is None:
        return
    diag_log_path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(diag_log_path, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    logger.addHandler(file_handler)
    logger.setLevel(logging.DEBUG)


def _split_passthrough(argv: list[str]) -> tuple[list[str], list[str]]:
    """Split argv at the first ``--`` into our args and engine args."""
    if PASSTHROUGH_SEPARATOR not in argv:
        return list(argv), []
    idx = argv.index(PASSTHROUGH_SEPARATOR)
    return list(argv[:idx]), list(argv[idx + 1:])


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    from SpecificTests.engines.registry import default_registry

    default_framework = os.environ.get("SPECIFIC_TESTS_FRAMEWORK", "pytest")
    default_output = os.environ.get("SPECIFIC_TESTS_OUTPUT", "./results")

    parser = argparse.ArgumentParser(
        prog="specific-tests",
        description=(
            "Discover tests and run only those whose fully-qualified name "
            "contains one of the given fragments. Arguments after -- are "
            "passed to the test engine."
        ),
    )
    parser.add_argument(
        "sources", nargs="*", help="Test files or directories to discover from",
    )
    parser.add_argument(
        "--tests",
        required=True,
        help=(
            "Comma separated name fragments (escape a comma with \\), "
            "or a path to a .txt file holding them"
        ),
    )
    parser.add_argument(
        "--framework",
        default=default_framework,
        choices=default_registry.available(),
        help="Test engine",
    )
    parser.add_argument(
        "--testcasefilter", default=None,
        help="Test case filter expression (cannot be combined with --tests)",
    )
    parser.add_argument(
        "--test-adapter-path", default=None,
        help="Extra search path for test plugins and libraries",
    )
    parser.add_argument(
        "--output-dir", type=Path, default=Path(default_output),
        help="Output dir",
    )
    parser.add_argument("--diag", type=Path, default=None, help="Diagnostics log file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    from SpecificTests.engines.registry import default_registry
    from SpecificTests.pipeline.orchestrator import Orchestrator
    from SpecificTests.shared.config import SelectionOptions
    from SpecificTests.shared.types import RunSettings

    our_args, passthrough = _split_passthrough(
        list(sys.argv[1:] if argv is None else argv)
    )
    parser = build_parser()
    args = parser.parse_args(our_args)
    _setup_logging(args.verbose, args.diag)

    options = SelectionOptions(
        sources=tuple(args.sources),
        framework=args.framework,
        test_case_filter=args.testcasefilter,
        test_adapter_path=args.test_adapter_path,
        output_dir=args.output_dir,
        diag_log_path=args.diag,
    )
    run_settings = RunSettings(
        output_dir=args.output_dir,
        extra_args=tuple(passthrough),
    )

    try:
        engine = default_registry.get(options.framework, options.test_adapter_path)
    except KeyError as exc:
        logger.error("%s", exc.args[0])
        return 1

    orchestrator = Orchestrator(options, run_settings, engine)
    try:
        orchestrator.initialize(args.tests)
        orchestrator.execute()
    except ConfigurationError as exc:
        logger.error("%s", exc)
        return 1
    except CollaboratorError as exc:
        logger.error("[SPECIFIC-TESTS] %s", exc)
        return 2
    except SelectionCancelledError as exc:
        logger.warning("%s", exc)
        return 130
    except KeyboardInterrupt:
        orchestrator.cancel()
        logger.warning("Test selection was cancelled.")
        return 130

    # The core succeeds even when nothing ran; the run outcome is the engine's.
    return orchestrator.run_return_code or 0


if __name__ == "__main__":
    sys.exit(main())
