from decimal import Decimal
from typing import List, Optional
import structlog

from accounts import Account
from errors import RejectedTransaction
from models import AccountSnapshot, Transaction, TransactionKind
from repositories import (
    AccountRepository,
    InMemoryAccountRepository,
    InMemoryTransactionRepository,
    TransactionRepository,
)

# Configure structured logging
logger = structlog.get_logger()


class Ledger:
    """
    Routes transactions to client accounts.

    The ledger owns both the accounts and the history of deposits and
    withdrawals that later disputes, resolves and chargebacks refer to.
    """

    def __init__(
        self,
        account_repo: Optional[AccountRepository] = None,
        transaction_repo: Optional[TransactionRepository] = None,
    ):
        self.account_repo = account_repo if account_repo is not None else InMemoryAccountRepository()
        self.transaction_repo = transaction_repo if transaction_repo is not None else InMemoryTransactionRepository()

    def process(self, transaction: Transaction) -> Transaction:
        """Apply one transaction. Raises RejectedTransaction if the account refuses it."""

        logger.debug(
            "Processing transaction",
            transaction_id=transaction.id,
            client_id=transaction.client_id,
            kind=transaction.kind.value,
            amount=str(transaction.amount) if transaction.amount is not None else None
        )

        # History is written before the account sees the transaction,
        # so a refused withdrawal can still be disputed later.
        if transaction.kind.stores_history:
            self.transaction_repo.set(transaction)

        account = self.get_or_create_account(transaction.client_id)

        try:
            if transaction.kind == TransactionKind.deposit:
                result = account.deposit(transaction)
            elif transaction.kind == TransactionKind.withdrawal:
                result = account.withdrawal(transaction)
            elif transaction.kind == TransactionKind.dispute:
                result = account.dispute(transaction, self.transaction_repo)
            elif transaction.kind == TransactionKind.resolve:
                result = account.resolve(transaction, self.transaction_repo)
            else:
                result = account.chargeback(transaction, self.transaction_repo)
        except RejectedTransaction as e:
            logger.warning(
                "Transaction rejected",
                reason=e.code,
                detail=str(e),
                transaction_id=transaction.id,
                client_id=transaction.client_id,
                kind=transaction.kind.value
            )
            raise

        logger.debug(
            "Transaction applied",
            transaction_id=transaction.id,
            client_id=transaction.client_id,
            available=str(account.available),
            held=str(account.held),
            total=str(account.total),
            locked=account.locked
        )

        return result

    def get_or_create_account(self, client_id: int) -> Account:
        """Get the client's account. Unknown clients get a fresh empty account."""
        return self.account_repo.get_or_create(client_id)

    def available_balance(self, client_id: int) -> Decimal:
        return self.get_or_create_account(client_id).available

    def held_balance(self, client_id: int) -> Decimal:
        return self.get_or_create_account(client_id).held

    def total_balance(self, client_id: int) -> Decimal:
        return self.get_or_create_account(client_id).total

    def is_locked(self, client_id: int) -> bool:
        return self.get_or_create_account(client_id).locked

    def accounts(self) -> List[Account]:
        return self.account_repo.all()

    def snapshots(self) -> List[AccountSnapshot]:
        return [account.snapshot() for account in self.account_repo.all()]


# Factory function for dependency injection
def get_ledger(
    account_repo: Optional[AccountRepository] = None,
    transaction_repo: Optional[TransactionRepository] = None
) -> Ledger:
    return Ledger(account_repo, transaction_repo)
