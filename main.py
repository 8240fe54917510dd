import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, TextIO, Union

import structlog

from config import Settings, get_settings
from errors import RejectedTransaction
from models import IngestSummary
from output import write_snapshots
from parser import parse_record, read_lines, split_record
from services import get_ledger


def configure_logging(settings: Settings) -> None:
    """Structured logs go to stderr; stdout is reserved for the account report."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
    )

    if settings.log_format == "text":
        renderer = structlog.dev.ConsoleRenderer(colors=False)
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


# Configure structured logging
configure_logging(get_settings())

logger = structlog.get_logger()


def run(input_path: Union[str, Path], output: TextIO, settings: Optional[Settings] = None) -> IngestSummary:
    """
    Process every record of the input file and write the final balances.

    Malformed rows and rejected transactions are counted and skipped; they
    never stop the run.
    """
    settings = settings or get_settings()
    ledger = get_ledger()
    summary = IngestSummary()

    logger.info("Ledger run started", input=str(input_path))

    for line in read_lines(input_path):
        summary.records_read += 1
        try:
            transaction = parse_record(split_record(line, settings.input_encoding))
        except RejectedTransaction as e:
            logger.warning(
                "Record skipped",
                reason=e.code,
                detail=str(e),
                line=summary.records_read
            )
            summary.rejected[e.code] = summary.rejected.get(e.code, 0) + 1
            continue

        try:
            ledger.process(transaction)
        except RejectedTransaction as e:
            summary.rejected[e.code] = summary.rejected.get(e.code, 0) + 1
            continue

        summary.accepted += 1

    write_snapshots(
        ledger.snapshots(),
        output,
        places=settings.amount_decimal_places,
        include_header=settings.output_header,
    )

    summary.accounts_count = ledger.account_repo.get_accounts_count()
    summary.transactions_stored = ledger.transaction_repo.size()

    logger.info(
        "Ledger run completed",
        input=str(input_path),
        rejected_total=summary.rejected_total,
        **summary.model_dump()
    )

    return summary


def build_arg_parser(settings: Settings) -> argparse.ArgumentParser:
    arg_parser = argparse.ArgumentParser(
        prog=settings.app_name,
        description="Process deposits, withdrawals, disputes, resolves and chargebacks "
                    "from a CSV file and print the resulting client accounts.",
    )
    arg_parser.add_argument(
        "input",
        metavar="FILENAME",
        help="CSV file with the transactions to process",
    )
    arg_parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {settings.app_version}",
    )
    return arg_parser


def main(argv: Optional[List[str]] = None) -> int:
    settings = get_settings()
    arg_parser = build_arg_parser(settings)
    args = arg_parser.parse_args(argv)

    input_path = Path(args.input)
    if not input_path.is_file():
        arg_parser.error(f"cannot read input file: {args.input}")

    run(input_path, sys.stdout, settings)
    return 0


if __name__ == "__main__":
    sys.exit(main())
