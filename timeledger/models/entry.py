"""Ledger entry models - the four kinds of record the ledger stores.

This module provides the EntryType and EntryStatus enums and one pydantic
model per entry kind. Every entry knows how to evaluate its own status as
of an arbitrary query timestamp; nothing about that status is cached.
"""

from enum import Enum
from typing import Annotated, Literal, Union
from pydantic import BaseModel, Field


class EntryType(str, Enum):
    """Kinds of ledger entries.

    The value doubles as the label used when an entry is rendered into an
    account's transaction history (``"deposit 100 1000"``).

    Attributes:
        DEPOSIT (str): Funds entering an account from outside the ledger.
        WITHDRAWAL (str): Funds leaving an account to outside the ledger.
        TRANSFER (str): A two-party movement that holds the sender's funds
            until the recipient accepts it or it expires.
        SCHEDULED (str): A deferred transfer that materializes a real
            TRANSFER when processed at or after its scheduled time.
    """
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    TRANSFER = "transfer"
    SCHEDULED = "scheduled"


class EntryStatus(str, Enum):
    """Evaluated state of an entry at a query timestamp.

    Status Flow:
        DEPOSIT / WITHDRAWAL: always ACCEPTED
        TRANSFER:   PENDING → ACCEPTED (accept within ttl)
                    PENDING → EXPIRED  (query time past expiration)
        SCHEDULED:  PENDING → ACCEPTED (materialized)
                    PENDING → REJECTED (materialization failed)
    """
    PENDING = "pending"
    ACCEPTED = "accepted"
    EXPIRED = "expired"
    REJECTED = "rejected"


class BaseEntry(BaseModel):
    """Fields shared by every ledger entry.

    Attributes:
        entry_id (str): Identifier assigned by the account store. Unique
            for the lifetime of the store and never reused.
        timestamp (int): Logical creation time. Entries with a timestamp
            later than a query time are invisible to that query.
        amount (int): Strictly positive amount in the smallest unit.
    """

    entry_id: str = Field(frozen=True, description="Store-assigned identifier")
    timestamp: int = Field(frozen=True, description="Logical creation time")
    amount: int = Field(gt=0, frozen=True, description="Amount in smallest unit")

    def is_visible(self, at: int) -> bool:
        """Check whether this entry exists as of query time ``at``."""
        return self.timestamp <= at


class Deposit(BaseEntry):
    """Funds deposited into a single account."""

    entry_type: Literal[EntryType.DEPOSIT] = EntryType.DEPOSIT
    account_id: str = Field(frozen=True, description="Account credited")

    def status(self, at: int) -> EntryStatus:
        return EntryStatus.ACCEPTED


class Withdrawal(BaseEntry):
    """Funds withdrawn from a single account."""

    entry_type: Literal[EntryType.WITHDRAWAL] = EntryType.WITHDRAWAL
    account_id: str = Field(frozen=True, description="Account debited")

    def status(self, at: int) -> EntryStatus:
        return EntryStatus.ACCEPTED


class Transfer(BaseEntry):
    """A transfer from one account to another awaiting acceptance.

    A Transfer is referenced from both the sender's and the recipient's
    account, but exists once. While PENDING it holds the sender's funds
    (their balance already excludes the amount) without crediting the
    recipient. Accepting it credits the recipient. If nobody accepts it
    before ``expiration`` it becomes EXPIRED and stops affecting either
    balance, which is how the sender gets the funds back.

    There is no rejected state: ``reject`` always refuses.

    Usage Example:
        ```python
        transfer = Transfer(
            entry_id="transfer0",
            timestamp=2000,
            amount=50,
            from_account_id="alice",
            to_account_id="bob",
            ttl=1000,
        )
        transfer.status(2500)   # EntryStatus.PENDING
        transfer.status(3001)   # EntryStatus.EXPIRED
        transfer.accept(2500)   # True
        transfer.status(9999)   # EntryStatus.ACCEPTED
        ```

    Attributes:
        from_account_id (str): Sender account.
        to_account_id (str): Recipient account.
        ttl (int): Time-to-live after ``timestamp``. Must be > 0.
        accepted (bool): Set once by ``accept``; never unset.
    """

    entry_type: Literal[EntryType.TRANSFER] = EntryType.TRANSFER
    from_account_id: str = Field(frozen=True, description="Sender account")
    to_account_id: str = Field(frozen=True, description="Recipient account")
    ttl: int = Field(gt=0, frozen=True, description="Time-to-live")
    accepted: bool = Field(default=False, description="Accepted flag")

    @property
    def expiration(self) -> int:
        """Last query time at which the transfer can still be accepted."""
        return self.timestamp + self.ttl

    def status(self, at: int) -> EntryStatus:
        if self.accepted:
            return EntryStatus.ACCEPTED
        if at > self.expiration:
            return EntryStatus.EXPIRED
        return EntryStatus.PENDING

    def accept(self, at: int) -> bool:
        """Accept the transfer if it is still pending at ``at``.

        Returns:
            bool: True if the flag was set by this call, False if the
                transfer was already accepted or has expired.
        """
        if self.status(at) != EntryStatus.PENDING:
            return False
        self.accepted = True
        return True

    def reject(self, at: int) -> bool:
        return False


class ScheduledTransfer(BaseEntry):
    """A transfer to be created later, when processing reaches ``scheduled_for``.

    A ScheduledTransfer never moves funds itself. Processing turns it into a
    real Transfer (created at processing time, with the same ``ttl``) and
    marks it ACCEPTED, or marks it REJECTED if that Transfer could not be
    created. Both outcomes are terminal.

    Attributes:
        from_account_id (str): Sender account.
        to_account_id (str): Recipient account.
        scheduled_for (int): Earliest processing time. Never before ``timestamp``.
        ttl (int): Time-to-live handed to the materialized Transfer.
        accepted (bool): Set when the Transfer was created.
        rejected (bool): Set when creating the Transfer failed.
    """

    entry_type: Literal[EntryType.SCHEDULED] = EntryType.SCHEDULED
    from_account_id: str = Field(frozen=True, description="Sender account")
    to_account_id: str = Field(frozen=True, description="Recipient account")
    scheduled_for: int = Field(frozen=True, description="Earliest processing time")
    ttl: int = Field(gt=0, frozen=True, description="Time-to-live of the materialized transfer")
    accepted: bool = Field(default=False, description="Materialized flag")
    rejected: bool = Field(default=False, description="Rejected flag")

    def status(self, at: int) -> EntryStatus:
        if self.accepted:
            return EntryStatus.ACCEPTED
        if self.rejected:
            return EntryStatus.REJECTED
        return EntryStatus.PENDING

    def is_due(self, at: int) -> bool:
        """Check whether processing at ``at`` should attempt this entry."""
        return self.status(at) == EntryStatus.PENDING and self.scheduled_for <= at

    def accept(self, at: int) -> bool:
        if self.status(at) != EntryStatus.PENDING:
            return False
        self.accepted = True
        return True

    def reject(self, at: int) -> bool:
        if self.status(at) != EntryStatus.PENDING:
            return False
        self.rejected = True
        return True


LedgerEntry = Annotated[
    Union[Deposit, Withdrawal, Transfer, ScheduledTransfer],
    Field(discriminator="entry_type"),
]


def is_whole_number(value: object) -> bool:
    """Check that a value can be stored as an entry amount or time.

    Only real ints pass. Floats (even ``2.0``), numeric strings and bools
    are refused rather than coerced.
    """
    return isinstance(value, int) and not isinstance(value, bool)
