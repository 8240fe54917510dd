from pydantic import BaseModel, ConfigDict, Field, field_validator
from enum import Enum
from typing import Dict, Optional
from decimal import Decimal


CLIENT_ID_MAX = 2**16 - 1
TRANSACTION_ID_MAX = 2**32 - 1
AMOUNT_MAX_DIGITS = 20
AMOUNT_DECIMAL_PLACES = 4


class TransactionKind(str, Enum):
    deposit = "deposit"
    withdrawal = "withdrawal"
    dispute = "dispute"
    resolve = "resolve"
    chargeback = "chargeback"

    @property
    def stores_history(self) -> bool:
        """Deposits and withdrawals are kept so they can be disputed later."""
        return self in (TransactionKind.deposit, TransactionKind.withdrawal)


class Transaction(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: TransactionKind = Field(..., description="Transaction type")
    client_id: int = Field(
        ...,
        ge=0,
        le=CLIENT_ID_MAX,
        description="Client identifier"
    )
    id: int = Field(
        ...,
        ge=0,
        le=TRANSACTION_ID_MAX,
        description="Transaction identifier; for disputes, resolves and chargebacks the referenced transaction"
    )
    amount: Optional[Decimal] = Field(
        default=None,
        ge=0,
        max_digits=AMOUNT_MAX_DIGITS,
        decimal_places=AMOUNT_DECIMAL_PLACES,
        description="Amount for deposits and withdrawals, absent otherwise"
    )

    @field_validator('kind', 'client_id', 'id', mode='before')
    @classmethod
    def strip_whitespace(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator('amount', mode='before')
    @classmethod
    def blank_amount_is_absent(cls, v):
        if isinstance(v, str):
            v = v.strip()
            if not v:
                return None
        return v


class AccountSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    client_id: int = Field(..., description="Client identifier")
    available: Decimal = Field(..., description="Funds available for withdrawal or dispute")
    held: Decimal = Field(..., description="Funds held by open disputes")
    total: Decimal = Field(..., description="Available plus held")
    locked: bool = Field(..., description="Whether a chargeback froze the account")


class IngestSummary(BaseModel):
    records_read: int = Field(0, description="Rows read from the input")
    accepted: int = Field(0, description="Transactions applied to an account")
    rejected: Dict[str, int] = Field(default_factory=dict, description="Rejected rows by reason code")
    accounts_count: int = Field(0, description="Number of accounts in the ledger")
    transactions_stored: int = Field(0, description="Deposits and withdrawals kept for disputes")

    @property
    def rejected_total(self) -> int:
        return sum(self.rejected.values())
