import pytest
from decimal import Decimal
from pydantic import ValidationError

from errors import InvalidInput, InvalidType
from models import Transaction, TransactionKind
from parser import parse_record, read_lines, split_record


class TestParseRecord:
    """Turning raw rows into transactions."""

    def test_deposit_with_whitespace(self):
        """Fields are trimmed before parsing."""
        transaction = parse_record([" deposit ", " 1", " 2 ", " 1.5 "])

        assert transaction == Transaction(
            kind=TransactionKind.deposit,
            client_id=1,
            id=2,
            amount=Decimal("1.5"),
        )

    def test_withdrawal_keeps_precision(self):
        """Amounts are exact decimals."""
        transaction = parse_record(["withdrawal", "3", "4", "0.1234"])

        assert transaction.kind == TransactionKind.withdrawal
        assert transaction.amount == Decimal("0.1234")

    @pytest.mark.parametrize("kind", ["dispute", "resolve", "chargeback"])
    def test_dispute_family_has_no_amount(self, kind):
        """Dispute-style rows reference a transaction and carry no amount."""
        assert parse_record([kind, "1", "2", ""]).amount is None
        assert parse_record([kind, "1", "2"]).amount is None
        assert parse_record([kind, "1", "2", "9.99"]).amount is None

    def test_largest_amount(self):
        """Sixteen integer digits with four decimals still fit."""
        amount = parse_record(["deposit", "1", "1", "9999999999999999.9999"]).amount
        assert amount == Decimal("9999999999999999.9999")

    def test_zero_amount(self):
        """A zero amount is kept, not treated as missing."""
        assert parse_record(["deposit", "1", "1", "0"]).amount == Decimal("0")

    @pytest.mark.parametrize("row", [[], [""], ["  ", "1", "2", "3"]])
    def test_missing_type(self, row):
        """Rows without a type are InvalidType."""
        with pytest.raises(InvalidType):
            parse_record(row)

    @pytest.mark.parametrize("row", [
        ["type", "client", "tx", "amount"],
        ["Deposit", "1", "1", "1.0"],
        ["transfer", "1", "1", "1.0"],
        ["deposit", "1"],
        ["deposit", "1", "2"],
        ["deposit", "1", "2", ""],
        ["deposit", "1", "2", "abc"],
        ["deposit", "1", "2", "-5"],
        ["deposit", "1", "2", "NaN"],
        ["deposit", "70000", "2", "1.0"],
        ["deposit", "-1", "2", "1.0"],
        ["deposit", "1", "4294967296", "1.0"],
        ["dispute", "x", "2"],
        ["deposit", "1", "2", "1000000000000000000000000"],
        ["deposit", "1", "2", "1E+1000000"],
        ["deposit", "1", "2", "0.00001"],
        ["deposit", "1", "2", "1.23456789012345678901234567890"],
    ])
    def test_malformed_rows(self, row):
        """Anything else that does not parse is InvalidInput."""
        with pytest.raises(InvalidInput):
            parse_record(row)

    def test_malformed_row_is_kept_in_details(self):
        """The rejection keeps the raw row for logging."""
        with pytest.raises(InvalidInput) as exc_info:
            parse_record(["deposit", "1", "2", "abc"])

        assert exc_info.value.details["record"] == ["deposit", "1", "2", "abc"]
        assert exc_info.value.code == "invalid_input"


class TestReadRecords:
    """Streaming rows from a file."""

    def test_reads_every_row(self, tmp_path):
        """Every line becomes a row, header included."""
        path = tmp_path / "input.csv"
        path.write_text(
            "type, client, tx, amount\n"
            "deposit, 1, 1, 1.0\n"
            "dispute, 1, 1,\n"
        )

        rows = [split_record(line) for line in read_lines(path)]

        assert len(rows) == 3
        assert rows[0][0] == "type"
        assert parse_record(rows[1]).amount == Decimal("1.0")
        assert parse_record(rows[2]).kind == TransactionKind.dispute

    def test_blank_line_is_empty_row(self):
        """A blank line splits into no fields at all."""
        assert split_record(b"\n") == []
        assert split_record(b"\r\n") == []

    def test_undecodable_line(self):
        """Bytes that are not valid text reject only that line."""
        with pytest.raises(InvalidInput) as exc_info:
            split_record(b"deposit,1,2,\xff\xfe\n")

        assert exc_info.value.code == "invalid_input"

    def test_oversized_field(self):
        """A field past the csv size limit is rejected, not fatal."""
        with pytest.raises(InvalidInput):
            split_record(b"deposit,1,2," + b"9" * 200000 + b"\n")

    def test_line_with_bad_bytes_does_not_stop_reading(self, tmp_path):
        """Lines after an undecodable one are still read."""
        path = tmp_path / "input.csv"
        path.write_bytes(b"deposit,1,1,3.0\ndeposit,1,2,\xff\xfe\ndeposit,1,3,1.0\n")

        lines = list(read_lines(path))

        assert len(lines) == 3
        assert parse_record(split_record(lines[2])).id == 3

    def test_missing_file(self, tmp_path):
        """Opening a file that does not exist fails on first read."""
        with pytest.raises(FileNotFoundError):
            list(read_lines(tmp_path / "nope.csv"))


class TestTransactionModel:
    """Transaction value object."""

    def test_is_frozen(self):
        """Transactions cannot be changed once built."""
        transaction = parse_record(["deposit", "1", "1", "1.0"])

        with pytest.raises(ValidationError):
            transaction.amount = Decimal("2.0")

    def test_kind_roles(self):
        """Only deposits and withdrawals are kept as history."""
        assert TransactionKind.deposit.stores_history
        assert TransactionKind.withdrawal.stores_history
        assert not TransactionKind.dispute.stores_history
        assert not TransactionKind.resolve.stores_history
        assert not TransactionKind.chargeback.stores_history
