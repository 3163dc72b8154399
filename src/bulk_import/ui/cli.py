from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from bulk_import.app import import_records, load_model, load_records
from bulk_import.config import configure_logging, get_importer_config
from bulk_import.domain import ImportParams

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from bulk_import.domain import ImportResult

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import records into a SQLAlchemy model")
    parser.add_argument("model", help="Mapped class as module:ClassName")
    parser.add_argument("records", type=Path, help="JSON file holding an array of records")
    parser.add_argument(
        "--update-lookup",
        action="append",
        default=[],
        metavar="FIELD",
        help="Update existing rows matched on FIELD instead of creating (repeatable)",
    )
    parser.add_argument(
        "--association",
        action="append",
        default=[],
        metavar="FIELD=KEY",
        help="Attribute used to look up the related entity of FIELD (repeatable)",
    )
    parser.add_argument(
        "--skip-fuzzy-search",
        action="store_true",
        help="Do not warn about similarly named entities",
    )
    parser.add_argument("--database-uri", type=str, help="Override DATABASE_URI")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing tables of the model's metadata before importing",
    )
    parser.add_argument(
        "--rollback-on-error",
        action="store_true",
        default=None,
        help="Discard the whole batch if any row errors or warns",
    )
    parser.add_argument(
        "--line-item-limit",
        type=int,
        help="Maximum number of records accepted (defaults to config)",
    )
    parser.add_argument(
        "--echo-outcomes",
        action="store_true",
        help="Also print the timestamped outcome lines while importing",
    )
    return parser.parse_args(list(argv))


def _parse_associations(pairs: Sequence[str]) -> dict[str, str]:
    associations: dict[str, str] = {}
    for pair in pairs:
        field, sep, key = pair.partition("=")
        if not sep or not field.strip() or not key.strip():
            raise ValueError(f"Invalid --association {pair!r}, expected FIELD=KEY")
        associations[field.strip()] = key.strip()
    return associations


def _build_params(args: argparse.Namespace) -> ImportParams:
    lookup = tuple(field for field in args.update_lookup if field)
    return ImportParams(
        update_if_exists=bool(lookup),
        update_lookup=lookup,
        associations=_parse_associations(args.association),
        skip_fuzzy_search=args.skip_fuzzy_search,
        filename=args.records.name,
    )


def _report(result: ImportResult) -> None:
    for message in result.success:
        log.info(message)
    for message in result.warning:
        log.warning(message)
    for message in result.error:
        log.error(message)
    for summary in (result.success_message, result.warning_message, result.error_message):
        if summary:
            log.info(summary)
    if result.rolled_back:
        log.info("All changes of this import were rolled back")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(echo_outcomes=parsed_args.echo_outcomes)
    try:
        params = _build_params(parsed_args)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        config = get_importer_config()
        if parsed_args.rollback_on_error is not None:
            config = replace(config, rollback_on_error=parsed_args.rollback_on_error)
        if parsed_args.line_item_limit is not None:
            config = replace(config, line_item_limit=parsed_args.line_item_limit)
        result = import_records(
            load_model(parsed_args.model),
            load_records(parsed_args.records),
            params=params,
            config=config,
            database_uri=parsed_args.database_uri,
            create_tables=parsed_args.create_tables,
        )
    except Exception:
        log.exception("Fatal error during import")
        sys.exit(1)

    _report(result)
    if result.has_errors:
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
