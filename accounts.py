from decimal import Decimal
from typing import TYPE_CHECKING

from errors import (
    AccountLocked,
    IDNotFound,
    InconsistentWithValueHeld,
    InsufficientFunds,
    LedgerInvariantError,
    TargetTransactionAmountMissing,
)
from models import AccountSnapshot, Transaction

if TYPE_CHECKING:
    from repositories import TransactionRepository


ZERO = Decimal("0")


class Account:
    """
    A client's funds.

    Balances only change through the five transaction operations. Each
    operation either applies completely or raises a RejectedTransaction
    without touching the balances. Once a chargeback locks the account,
    every operation raises AccountLocked.
    """

    def __init__(self, client_id: int):
        self.client_id = client_id
        self._available = ZERO
        self._held = ZERO
        self._total = ZERO
        self._locked = False

    @property
    def available(self) -> Decimal:
        return self._available

    @property
    def held(self) -> Decimal:
        return self._held

    @property
    def total(self) -> Decimal:
        return self._total

    @property
    def locked(self) -> bool:
        return self._locked

    def deposit(self, transaction: Transaction) -> Transaction:
        """Credit the account: available and total grow by the amount."""
        self._ensure_unlocked(transaction)
        amount = self._amount_of(transaction, transaction)

        self._available += amount
        self._total += amount
        self._check_invariant()
        return transaction

    def withdrawal(self, transaction: Transaction) -> Transaction:
        """Debit the account: available and total shrink by the amount."""
        self._ensure_unlocked(transaction)
        amount = self._amount_of(transaction, transaction)

        # Strictly greater: a withdrawal may not empty the account.
        if not self._available > amount:
            raise InsufficientFunds(
                transaction=transaction,
                details={"available": str(self._available), "requested": str(amount)}
            )

        self._available -= amount
        self._total -= amount
        self._check_invariant()
        return transaction

    def dispute(self, transaction: Transaction, transactions: "TransactionRepository") -> Transaction:
        """
        Hold the funds of a disputed transaction.

        Available decreases and held increases by the disputed amount, total
        stays the same. The dispute is refused when available funds do not
        strictly exceed that amount.
        """
        self._ensure_unlocked(transaction)
        amount = self._referenced_amount(transaction, transactions)

        if not self._available > amount:
            raise InsufficientFunds(
                transaction=transaction,
                details={"available": str(self._available), "disputed": str(amount)}
            )

        self._held += amount
        self._available -= amount
        self._check_invariant()
        return transaction

    def resolve(self, transaction: Transaction, transactions: "TransactionRepository") -> Transaction:
        """
        Release held funds back to available.

        Total stays the same. Refused when the referenced amount is more
        than what is currently held.
        """
        self._ensure_unlocked(transaction)
        amount = self._referenced_amount(transaction, transactions)

        if amount > self._held:
            raise InconsistentWithValueHeld(
                transaction=transaction,
                details={"held": str(self._held), "resolved": str(amount)}
            )

        self._held -= amount
        self._available += amount
        self._check_invariant()
        return transaction

    def chargeback(self, transaction: Transaction, transactions: "TransactionRepository") -> Transaction:
        """
        Reverse a disputed transaction and freeze the account.

        Held and total decrease by the referenced amount. The account is
        locked for good.
        """
        self._ensure_unlocked(transaction)
        amount = self._referenced_amount(transaction, transactions)

        if amount > self._held:
            raise InsufficientFunds(
                transaction=transaction,
                details={"held": str(self._held), "charged_back": str(amount)}
            )

        self._held -= amount
        self._total -= amount
        self._locked = True
        self._check_invariant()
        return transaction

    def snapshot(self) -> AccountSnapshot:
        return AccountSnapshot(
            client_id=self.client_id,
            available=self._available,
            held=self._held,
            total=self._total,
            locked=self._locked,
        )

    def _ensure_unlocked(self, transaction: Transaction) -> None:
        if self._locked:
            raise AccountLocked(transaction=transaction, details={"client_id": self.client_id})

    def _amount_of(self, target: Transaction, transaction: Transaction) -> Decimal:
        if target.amount is None:
            raise TargetTransactionAmountMissing(
                transaction=transaction,
                details={"transaction_id": target.id}
            )
        return target.amount

    def _referenced_amount(self, transaction: Transaction, transactions: "TransactionRepository") -> Decimal:
        target = transactions.get(transaction.id)
        if target is None:
            raise IDNotFound(transaction=transaction, details={"transaction_id": transaction.id})
        return self._amount_of(target, transaction)

    def _check_invariant(self) -> None:
        if self._available + self._held != self._total:
            raise LedgerInvariantError(
                f"Account {self.client_id} out of balance: "
                f"available={self._available} held={self._held} total={self._total}"
            )

    def __repr__(self):
        return (
            f"Account(client_id={self.client_id}, available={self._available}, "
            f"held={self._held}, total={self._total}, locked={self._locked})"
        )
