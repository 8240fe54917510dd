import csv
from decimal import Decimal, ROUND_HALF_EVEN
from typing import Iterable, List, TextIO

from models import AccountSnapshot

HEADER = ["client", "available", "held", "total", "locked"]


def format_amount(value: Decimal, places: int = 4) -> str:
    """Render an amount with a fixed number of decimal places."""
    quantum = Decimal(1).scaleb(-places)
    return str(value.quantize(quantum, rounding=ROUND_HALF_EVEN))


def format_snapshot(snapshot: AccountSnapshot, places: int = 4) -> List[str]:
    return [
        str(snapshot.client_id),
        format_amount(snapshot.available, places),
        format_amount(snapshot.held, places),
        format_amount(snapshot.total, places),
        "true" if snapshot.locked else "false",
    ]


def write_snapshots(
    snapshots: Iterable[AccountSnapshot],
    stream: TextIO,
    places: int = 4,
    include_header: bool = False,
) -> int:
    """Write one line per account. Returns the number of accounts written."""
    writer = csv.writer(stream, lineterminator="\n")
    if include_header:
        writer.writerow(HEADER)

    written = 0
    for snapshot in snapshots:
        writer.writerow(format_snapshot(snapshot, places))
        written += 1
    return written
