"""Core data models for timeledger."""

from timeledger.models.account import Account
from timeledger.models.entry import (
    BaseEntry,
    Deposit,
    Withdrawal,
    Transfer,
    ScheduledTransfer,
    LedgerEntry,
    EntryType,
    EntryStatus,
    is_whole_number,
)

__all__ = [
    "Account",
    "BaseEntry",
    "Deposit",
    "Withdrawal",
    "Transfer",
    "ScheduledTransfer",
    "LedgerEntry",
    "EntryType",
    "EntryStatus",
    "is_whole_number",
]
