from abc import ABC, abstractmethod
from typing import Dict, List, Optional
import threading
import structlog

from accounts import Account
from models import Transaction

logger = structlog.get_logger()


class TransactionRepository(ABC):
    @abstractmethod
    def set(self, transaction: Transaction) -> Optional[int]:
        """Store a transaction by id. Returns the id if it replaced an earlier entry."""
        pass

    @abstractmethod
    def get(self, transaction_id: int) -> Optional[Transaction]:
        """Get stored transaction by id. Returns None if it was never stored."""
        pass

    @abstractmethod
    def size(self) -> int:
        """Get total number of stored transactions."""
        pass

    @abstractmethod
    def reset(self) -> None:
        """Drop all stored transactions."""
        pass


class AccountRepository(ABC):
    @abstractmethod
    def get_or_create(self, client_id: int) -> Account:
        """Get a client's account, opening an empty one on first use."""
        pass

    @abstractmethod
    def all(self) -> List[Account]:
        """Get every account, ordered by client id."""
        pass

    @abstractmethod
    def get_accounts_count(self) -> int:
        """Get total number of accounts."""
        pass


class InMemoryTransactionRepository(TransactionRepository):
    def __init__(self):
        self.store: Dict[int, Transaction] = {}
        self.lock = threading.Lock()

    def set(self, transaction: Transaction) -> Optional[int]:
        with self.lock:
            replaced = transaction.id in self.store
            self.store[transaction.id] = transaction
        if replaced:
            logger.warning(
                "Transaction id reused, previous entry replaced",
                transaction_id=transaction.id,
                client_id=transaction.client_id
            )
            return transaction.id
        return None

    def get(self, transaction_id: int) -> Optional[Transaction]:
        with self.lock:
            return self.store.get(transaction_id)

    def size(self) -> int:
        with self.lock:
            return len(self.store)

    def reset(self) -> None:
        """Clear all stored transactions (for testing)."""
        with self.lock:
            self.store.clear()


class InMemoryAccountRepository(AccountRepository):
    def __init__(self):
        self.accounts: Dict[int, Account] = {}

    def get_or_create(self, client_id: int) -> Account:
        account = self.accounts.get(client_id)
        if account is None:
            account = Account(client_id)
            self.accounts[client_id] = account
            logger.debug("Account opened", client_id=client_id)
        return account

    def all(self) -> List[Account]:
        return [self.accounts[client_id] for client_id in sorted(self.accounts)]

    def get_accounts_count(self) -> int:
        return len(self.accounts)
