"""End-to-end name selection against the sample pytest suite."""
from __future__ import annotations

import logging
import xml.etree.ElementTree as ET

import pytest

from SpecificTests.engines.pytest_engine import PytestEngine
from SpecificTests.pipeline.orchestrator import Orchestrator
from SpecificTests.pipeline.submit import SubmitAction


def _junit_tests(results_dir) -> int:
    root = ET.parse(results_dir / "results.xml").getroot()
    suite = root if root.tag == "testsuite" else root.find("testsuite")
    return int(suite.get("tests"))


@pytest.mark.integration
class TestPytestSelection:
    def test_runs_only_matching_tests(self, sample_pytest_suite, make_invocation) -> None:
        options, settings = make_invocation(sample_pytest_suite)
        orchestrator = Orchestrator(options, settings, PytestEngine())
        orchestrator.initialize("REFUND")

        assert orchestrator.execute() == 0

        assert orchestrator.plan.action is SubmitAction.RUN
        assert [t.display_name for t in orchestrator.accumulator.selected] == [
            "test_refund[EUR]",
            "test_refund[USD]",
        ]
        assert orchestrator.accumulator.discovered_count == 7
        assert orchestrator.run_return_code == 0
        assert _junit_tests(options.output_dir) == 2

    def test_class_fragment_selects_methods(self, sample_pytest_suite, make_invocation) -> None:
        options, settings = make_invocation(sample_pytest_suite)
        orchestrator = Orchestrator(options, settings, PytestEngine())
        orchestrator.initialize("OrderTotals,create_order")

        orchestrator.execute()

        assert len(orchestrator.accumulator.selected) == 3
        assert orchestrator.tracker.remaining() == frozenset()
        assert _junit_tests(options.output_dir) == 3

    def test_unmatched_fragment_warns_but_runs(
        self, sample_pytest_suite, make_invocation, caplog,
    ) -> None:
        options, settings = make_invocation(sample_pytest_suite)
        orchestrator = Orchestrator(options, settings, PytestEngine())
        orchestrator.initialize("charge_card,shipping")

        with caplog.at_level(logging.WARNING, logger="SpecificTests"):
            orchestrator.execute()

        assert orchestrator.tracker.remaining() == frozenset({"shipping"})
        assert any("criteria(shipping)" in r.getMessage() for r in caplog.records)
        assert _junit_tests(options.output_dir) == 1

    def test_no_match_does_not_run(self, sample_pytest_suite, make_invocation) -> None:
        options, settings = make_invocation(sample_pytest_suite)
        orchestrator = Orchestrator(options, settings, PytestEngine())
        orchestrator.initialize("Z")

        assert orchestrator.execute() == 0

        assert orchestrator.plan.action is SubmitAction.NO_MATCH
        assert not (options.output_dir / "results.xml").exists()

    def test_fragments_from_list_file(self, sample_pytest_suite, make_invocation, tmp_path) -> None:
        names = tmp_path / "names.txt"
        names.write_text("cancel_order,test_refund[EUR\\,]\n")
        options, settings = make_invocation(sample_pytest_suite)
        orchestrator = Orchestrator(options, settings, PytestEngine())
        orchestrator.initialize(str(names))

        orchestrator.execute()

        assert orchestrator.fragments == ("cancel_order", "test_refund[EUR,]")
        assert [t.display_name for t in orchestrator.accumulator.selected] == [
            "test_cancel_order",
        ]
        assert orchestrator.tracker.remaining() == frozenset({"test_refund[EUR,]"})
