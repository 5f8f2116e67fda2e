"""Tests for CLI argument parsing, passthrough and exit codes."""
from __future__ import annotations

import logging
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from SpecificTests.cli import _split_passthrough, build_parser, main
from SpecificTests.pipeline.errors import DiscoveryError


@pytest.fixture(autouse=True)
def _reset_cli_logger():
    yield
    cli_logger = logging.getLogger("SpecificTests")
    for handler in list(cli_logger.handlers):
        cli_logger.removeHandler(handler)
        handler.close()
    cli_logger.setLevel(logging.NOTSET)


class TestSplitPassthrough:
    def test_no_separator_returns_empty(self) -> None:
        our, engine = _split_passthrough(["--tests", "A", "tests/"])
        assert our == ["--tests", "A", "tests/"]
        assert engine == []

    def test_separator_splits_correctly(self) -> None:
        our, engine = _split_passthrough(
            ["--tests", "A", "tests/", "--", "-x", "--maxfail", "2"],
        )
        assert our == ["--tests", "A", "tests/"]
        assert engine == ["-x", "--maxfail", "2"]

    def test_separator_at_end(self) -> None:
        our, engine = _split_passthrough(["--tests", "A", "--"])
        assert our == ["--tests", "A"]
        assert engine == []


class TestBuildParser:
    def test_defaults(self, monkeypatch) -> None:
        monkeypatch.delenv("SPECIFIC_TESTS_FRAMEWORK", raising=False)
        monkeypatch.delenv("SPECIFIC_TESTS_OUTPUT", raising=False)
        args = build_parser().parse_args(["--tests", "A", "tests/"])
        assert args.tests == "A"
        assert args.sources == ["tests/"]
        assert args.framework == "pytest"
        assert args.output_dir == Path("./results")
        assert args.testcasefilter is None
        assert args.diag is None

    def test_environment_defaults(self, monkeypatch) -> None:
        monkeypatch.setenv("SPECIFIC_TESTS_FRAMEWORK", "robot")
        monkeypatch.setenv("SPECIFIC_TESTS_OUTPUT", "out")
        args = build_parser().parse_args(["--tests", "A", "suite/"])
        assert args.framework == "robot"
        assert args.output_dir == Path("out")

    def test_tests_is_required(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["tests/"])


def _fake_engine(return_code=0, discover=None):
    engine = MagicMock()
    engine.name = "fake"
    engine.run_tests.return_value = return_code
    if discover is not None:
        engine.discover_tests.side_effect = discover
    return engine


def _deliver(name):
    from SpecificTests.shared.types import DiscoveredTestCase

    def discover(payload, registrar, protocol_config):
        registrar.on_discovered_tests([
            DiscoveredTestCase(
                fully_qualified_name=name, display_name=name,
                source=payload.sources[0], locator=name,
            )
        ])

    return discover


class TestMain:
    def test_runs_selected_tests_and_returns_run_code(self) -> None:
        engine = _fake_engine(return_code=1, discover=_deliver("mod.test_login"))
        with patch("SpecificTests.engines.registry.default_registry.get", return_value=engine) as get:
            code = main(["--tests", "login", "tests/", "--", "-x"])

        assert code == 1
        get.assert_called_once_with("pytest", None)
        payload = engine.run_tests.call_args.args[0]
        assert payload.run_settings.extra_args == ("-x",)
        assert [t.fully_qualified_name for t in payload.test_cases] == ["mod.test_login"]

    def test_no_match_returns_success(self) -> None:
        engine = _fake_engine(discover=_deliver("mod.test_login"))
        with patch("SpecificTests.engines.registry.default_registry.get", return_value=engine):
            assert main(["--tests", "checkout", "tests/"]) == 0
        engine.run_tests.assert_not_called()

    def test_configuration_error_returns_1(self, caplog) -> None:
        engine = _fake_engine()
        with patch("SpecificTests.engines.registry.default_registry.get", return_value=engine):
            with caplog.at_level(logging.ERROR):
                assert main(["--tests", "login"]) == 1
        engine.discover_tests.assert_not_called()
        assert any("No test source" in r.getMessage() for r in caplog.records)

    def test_filter_with_tests_returns_1(self) -> None:
        engine = _fake_engine()
        with patch("SpecificTests.engines.registry.default_registry.get", return_value=engine):
            code = main(["--tests", "login", "--testcasefilter", "smoke", "tests/"])
        assert code == 1
        engine.discover_tests.assert_not_called()

    def test_discovery_error_returns_2(self) -> None:
        engine = _fake_engine(discover=DiscoveryError("cannot import"))
        with patch("SpecificTests.engines.registry.default_registry.get", return_value=engine):
            assert main(["--tests", "login", "tests/"]) == 2

    def test_keyboard_interrupt_cancels(self) -> None:
        engine = _fake_engine(discover=KeyboardInterrupt())
        with patch("SpecificTests.engines.registry.default_registry.get", return_value=engine):
            assert main(["--tests", "login", "tests/"]) == 130
        engine.cancel.assert_called_once()
        engine.run_tests.assert_not_called()

    def test_unknown_framework_is_rejected_by_parser(self) -> None:
        with pytest.raises(SystemExit):
            main(["--tests", "login", "--framework", "nunit", "tests/"])

    def test_unknown_framework_from_environment_returns_1(self, monkeypatch) -> None:
        monkeypatch.setenv("SPECIFIC_TESTS_FRAMEWORK", "nunit")
        assert main(["--tests", "login", "tests/"]) == 1

    def test_undecodable_list_file_returns_1(self, tmp_path: Path) -> None:
        names = tmp_path / "names.txt"
        names.write_bytes(b"X,\xff\xfe,Y")
        engine = _fake_engine()
        with patch("SpecificTests.engines.registry.default_registry.get", return_value=engine):
            assert main(["--tests", str(names), "tests/"]) == 1
        engine.discover_tests.assert_not_called()

    def test_diag_writes_debug_log(self, tmp_path: Path) -> None:
        diag = tmp_path / "logs" / "diag.log"
        engine = _fake_engine(discover=_deliver("mod.test_login"))
        with patch("SpecificTests.engines.registry.default_registry.get", return_value=engine):
            main(["--tests", "login", "--diag", str(diag), "tests/"])

        content = diag.read_text()
        assert "Logging diagnostics in file" in content
        assert "event=batch" in content
