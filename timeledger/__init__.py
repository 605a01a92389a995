"""timeledger - point-in-time account ledger with transfers and scheduled transfers."""

__version__ = "0.1.0"

# Main SDK interface
from timeledger.sdk import LedgerSDK

# Core models (for advanced usage)
from timeledger.models import (
    Account,
    Deposit,
    Withdrawal,
    Transfer,
    ScheduledTransfer,
    LedgerEntry,
    EntryType,
    EntryStatus,
)

# Components (for advanced usage)
from timeledger.config import Settings
from timeledger.errors import ErrorCode
from timeledger.account_store import AccountStore
from timeledger.query_engine import TemporalQueryEngine
from timeledger.ledger_manager import LedgerManager, LedgerResult
from timeledger.transfer_manager import TransferManager, TransferResult
from timeledger.scheduler import ScheduledTransferProcessor, ScheduleResult

__all__ = [
    # Main SDK
    "LedgerSDK",
    # Models
    "Account",
    "Deposit",
    "Withdrawal",
    "Transfer",
    "ScheduledTransfer",
    "LedgerEntry",
    "EntryType",
    "EntryStatus",
    # Components
    "Settings",
    "ErrorCode",
    "AccountStore",
    "TemporalQueryEngine",
    "LedgerManager",
    "LedgerResult",
    "TransferManager",
    "TransferResult",
    "ScheduledTransferProcessor",
    "ScheduleResult",
]
