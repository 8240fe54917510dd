"""
Reading transaction records from comma-delimited files.

Rows have the shape ``type, client, tx, amount``. There is no header
handling: a header line is just a record with an unknown type and is
rejected like any other malformed row.

Files are read as bytes and decoded one line at a time, so a line with bad
bytes only costs that line.
"""

import csv
from pathlib import Path
from typing import Iterator, List, Sequence, Union

from pydantic import ValidationError

from errors import InvalidInput, InvalidType
from models import Transaction, TransactionKind


def read_lines(path: Union[str, Path]) -> Iterator[bytes]:
    """Stream the raw lines of a file, undecoded."""
    with open(path, "rb") as handle:
        for line in handle:
            yield line


def split_record(line: bytes, encoding: str = "utf-8") -> List[str]:
    """
    Decode one line and split it into fields.

    Raises InvalidInput when the line cannot be decoded or is not valid
    delimited text. A blank line gives an empty list.
    """
    try:
        text = line.decode(encoding)
        return next(csv.reader([text]), [])
    except UnicodeDecodeError as e:
        raise InvalidInput(f"Undecodable record ({e.reason})", details={"record": repr(line[:80])}) from e
    except csv.Error as e:
        raise InvalidInput(f"Unreadable record ({e})", details={"record": repr(line[:80])}) from e


def parse_record(row: Sequence[str]) -> Transaction:
    """
    Build a Transaction from one raw row.

    Raises InvalidType when the row has no type field and InvalidInput for
    anything else that cannot be parsed. Fields are trimmed first. An amount
    given on a dispute, resolve or chargeback row is ignored.
    """
    fields = [field.strip() for field in row]
    record = list(row)

    if not fields or not fields[0]:
        raise InvalidType(details={"record": record})

    try:
        kind = TransactionKind(fields[0])
    except ValueError:
        raise InvalidInput(f"Unknown transaction type {fields[0]!r}", details={"record": record}) from None

    if len(fields) < 3:
        raise InvalidInput("Missing client or transaction id", details={"record": record})

    amount = None
    if kind.stores_history:
        if len(fields) < 4 or not fields[3]:
            raise InvalidInput(f"Missing amount for {kind.value}", details={"record": record})
        amount = fields[3]

    try:
        return Transaction(kind=kind, client_id=fields[1], id=fields[2], amount=amount)
    except ValidationError as e:
        fields_in_error = ", ".join(str(error["loc"][0]) for error in e.errors() if error["loc"])
        raise InvalidInput(
            f"Invalid {fields_in_error or 'record'}",
            details={"record": record}
        ) from e
