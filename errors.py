"""
Ledger exception hierarchy.

Every way a single record can be refused derives from RejectedTransaction,
so a run loop can drop any of them with one except clause.
"""

from typing import Any, Dict, Optional


class RejectedTransaction(Exception):
    """Base class for a transaction the ledger refused to apply."""

    code = "rejected"
    default_message = "Transaction rejected"

    def __init__(
        self,
        message: Optional[str] = None,
        transaction: Any = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message or self.default_message
        super().__init__(self.message)
        self.transaction = transaction
        self.details = details or {}

    def __str__(self):
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class InvalidType(RejectedTransaction):
    """The source record carries no transaction type."""

    code = "invalid_type"
    default_message = "Missing transaction type"


class InvalidInput(RejectedTransaction):
    """The source record could not be turned into a transaction."""

    code = "invalid_input"
    default_message = "Malformed transaction record"


class TargetTransactionAmountMissing(RejectedTransaction):
    code = "target_transaction_amount_missing"
    default_message = "Transaction amount missing"


class InsufficientFunds(RejectedTransaction):
    code = "insufficient_funds"
    default_message = "Insufficient funds"


class IDNotFound(RejectedTransaction):
    code = "id_not_found"
    default_message = "Referenced transaction not found"


class InconsistentWithValueHeld(RejectedTransaction):
    code = "inconsistent_with_value_held"
    default_message = "Amount exceeds held funds"


class AccountLocked(RejectedTransaction):
    code = "account_locked"
    default_message = "Account is locked"


class LedgerInvariantError(RuntimeError):
    """Raised when an account's balances stop adding up. Never expected."""
