from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path

import pytest

from bulk_import.config import OUTCOME_LOGGER_NAME
from bulk_import.domain import ImportAction, OutcomeStatus
from bulk_import.domain.import_logger import ImportLogger
from bulk_import.domain.messages import EnglishMessages
from bulk_import.domain.results import ResultAggregator, with_row
from tests.helpers.fakes import Person, person_descriptor


def _fixed_clock() -> datetime:
    return datetime(2024, 5, 1, 12, 30, tzinfo=UTC)


def _aggregator(logger: ImportLogger | None = None) -> ResultAggregator:
    return ResultAggregator(
        person_descriptor(),
        messages=EnglishMessages(),
        logger=logger or ImportLogger(enabled=False),
    )


def test_with_row_appends_only_when_known() -> None:
    assert with_row("oops", 5) == "oops (row 5)"
    assert with_row("oops", None) == "oops"


def test_summary_counts_and_pluralizes() -> None:
    aggregator = _aggregator()
    aggregator.report_success(Person(name="Ada"), ImportAction.CREATE, row=2)
    aggregator.report_success(Person(name="Bob"), ImportAction.UPDATE, row=3)
    aggregator.report_error(Person(name="Cy"), ImportAction.CREATE, "Name taken", row=4)
    aggregator.report_warning("Careful", row=5)
    aggregator.report_warning("Careful again", row=None)

    result = aggregator.finalize()

    assert result.as_dict() == {
        "success": ["Created Ada", "Updated Bob"],
        "warning": ["Careful (row 5)", "Careful again"],
        "error": ["Failed to create Cy: Name taken (row 4)"],
        "success_message": "2 People successfully imported",
        "warning_message": "2 warnings",
        "error_message": "1 Person failed to be imported",
    }
    assert [outcome.status for outcome in result.outcomes] == [
        OutcomeStatus.SUCCESS,
        OutcomeStatus.SUCCESS,
        OutcomeStatus.ERROR,
        OutcomeStatus.WARNING,
        OutcomeStatus.WARNING,
    ]
    assert result.outcomes[-1].row is None


def test_discard_successes_keeps_problems() -> None:
    aggregator = _aggregator()
    aggregator.report_success(Person(name="Ada"), ImportAction.CREATE, row=2)
    aggregator.report_general_error("disk full")

    aggregator.discard_successes()
    result = aggregator.finalize(rolled_back=True)

    assert result.success == ()
    assert result.error == ("Error during import: disk full",)
    assert result.rolled_back
    assert aggregator.has_problems


def test_outcomes_are_logged_with_timestamp(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger=OUTCOME_LOGGER_NAME)
    aggregator = _aggregator(ImportLogger(clock=_fixed_clock))

    aggregator.report_success(Person(name="Ada"), ImportAction.CREATE, row=2)

    assert [record.getMessage() for record in caplog.records] == [
        "2024-05-01T12:30:00+00:00: Created Ada"
    ]


def test_disabled_logger_stays_silent(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger=OUTCOME_LOGGER_NAME)

    ImportLogger(enabled=False).info("hidden")

    assert caplog.records == []


def test_log_file_receives_outcome_lines(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "importer.log"
    logger = ImportLogger(log_file=log_file, clock=_fixed_clock)
    ImportLogger(log_file=log_file, clock=_fixed_clock)

    logger.info("Created Ada")

    assert log_file.read_text(encoding="utf-8") == "2024-05-01T12:30:00+00:00: Created Ada\n"
