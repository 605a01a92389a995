"""timeledger SDK - High-level API for the temporal ledger.

This module provides the main SDK interface that wraps all internal
components into one object whose methods return plain values: booleans,
ids, integers, strings, or None when a request is refused.
"""

from typing import Any, Dict, List, Optional

from timeledger.account_store import AccountStore
from timeledger.config import Settings
from timeledger.models import Account
from timeledger.ledger_manager import LedgerManager
from timeledger.query_engine import TemporalQueryEngine
from timeledger.scheduler import ScheduledTransferProcessor
from timeledger.transfer_manager import TransferManager


class LedgerSDK:
    """High-level SDK for the temporal ledger.

    Every timestamp argument is a logical time supplied by the caller.
    Queries answer "as of that time": entries recorded later are ignored
    and time-dependent statuses (transfer expiry) are evaluated at it.

    Key Features:
    - **Accounts**: Create accounts and check they exist
    - **Deposits / Withdrawals**: Move funds in and out of the ledger
    - **Queries**: Balance, volume, top accounts and history at any time
    - **Transfers**: Hold funds until the recipient accepts, or until expiry
    - **Scheduled Transfers**: Deferred transfers processed on demand

    Refusals are never raised. Use the managers directly (``ledger``,
    ``transfers``, ``scheduler``) to get result objects with error codes.

    Usage Example:
        ```python
        sdk = LedgerSDK()

        sdk.create_account("alice")
        sdk.create_account("bob")
        sdk.deposit("alice", 100, 1000)

        transfer_id = sdk.create_transfer("alice", "bob", 50, 2000, 1000)
        sdk.get_balance("alice", 2000)               # 50, funds on hold
        sdk.get_transfer_status(transfer_id, 4000)   # "expired"
        sdk.get_balance("alice", 4000)               # 100, hold released

        scheduled_id = sdk.schedule_transfer(1000, "alice", "bob", 20, 3000, 2000)
        sdk.process_scheduled_transfers(3000)        # ["transfer1"]
        ```

    Attributes:
        store (AccountStore): Accounts, entries and the store lock
        query_engine (TemporalQueryEngine): Point-in-time queries
        ledger (LedgerManager): Deposits and withdrawals
        transfers (TransferManager): Transfer lifecycle
        scheduler (ScheduledTransferProcessor): Scheduled transfer lifecycle
    """

    def __init__(self, settings: Optional[Settings] = None):
        """Initialize an empty ledger.

        Args:
            settings (Optional[Settings]): Ledger settings. Defaults to the
                settings read from the environment.
        """
        self.store = AccountStore(settings)
        self.query_engine = TemporalQueryEngine(self.store)
        self.ledger = LedgerManager(self.store, self.query_engine)
        self.transfers = TransferManager(self.store, self.query_engine)
        self.scheduler = ScheduledTransferProcessor(self.store, self.transfers)

    # ========== Accounts ==========

    def create_account(self, account_id: str, metadata: Optional[Dict[str, Any]] = None) -> bool:
        """Create an account. Returns False if the id already exists.

        Args:
            account_id (str): Unique id for the account
            metadata (Optional[Dict]): Free-form data kept on the account
        """
        return self.store.create_account(account_id, metadata)

    def get_account(self, account_id: str) -> Optional[Account]:
        """Get an account by id, or None if it does not exist.

        Example:
            ```python
            sdk.create_account("alice", metadata={"name": "Alice"})
            sdk.get_account("alice").metadata["name"]  # "Alice"
            ```
        """
        return self.store.get_account(account_id)

    def account_exists(self, account_id: str) -> bool:
        return self.store.account_exists(account_id)

    def list_accounts(self) -> List[str]:
        return self.store.list_account_ids()

    # ========== Deposits / Withdrawals ==========

    def deposit(self, account_id: str, amount: int, timestamp: int) -> bool:
        """Deposit funds into an account.

        Args:
            account_id (str): Account to credit
            amount (int): Amount, must be positive
            timestamp (int): Time of the deposit

        Returns:
            bool: True if recorded, False for an unknown account or a
                non-positive amount
        """
        return self.ledger.record_deposit(account_id, amount, timestamp).success

    def withdraw(self, account_id: str, amount: int, timestamp: int) -> bool:
        """Withdraw funds from an account.

        Returns:
            bool: True if recorded, False for an unknown account, a
                non-positive amount, or a balance at ``timestamp`` below
                ``amount``
        """
        return self.ledger.record_withdrawal(account_id, amount, timestamp).success

    # ========== Queries ==========

    def get_balance(self, account_id: str, timestamp: int) -> Optional[int]:
        """Get an account's balance as of ``timestamp``, or None if unknown.

        Example:
            ```python
            sdk.deposit("alice", 100, 1000)
            sdk.get_balance("alice", 999)    # 0
            sdk.get_balance("alice", 1000)   # 100
            sdk.get_balance("ghost", 1000)   # None
            ```
        """
        return self.query_engine.get_balance(account_id, timestamp)

    def get_transaction_volume(self, account_id: str, timestamp: int) -> Optional[int]:
        return self.query_engine.get_transaction_volume(account_id, timestamp)

    def get_top_accounts(self, n: int, timestamp: int) -> List[str]:
        """Get up to ``n`` account ids ranked by transaction volume.

        Equal volumes are ordered by ascending account id.
        """
        return self.query_engine.get_top_accounts(n, timestamp)

    def get_transaction_history(self, account_id: str, timestamp: int) -> Optional[List[str]]:
        """Get an account's accepted activity as ``"<type> <amount> <time>"`` lines.

        Returns:
            Optional[List[str]]: Oldest first, or None if the account is unknown

        Example:
            ```python
            sdk.get_transaction_history("alice", 3000)
            # ["deposit 100 1000", "transfer 50 2000"]
            ```
        """
        return self.query_engine.get_transaction_history(account_id, timestamp)

    # ========== Transfers ==========

    def create_transfer(self, from_account_id: str, to_account_id: str, amount: int,
                        timestamp: int, ttl: int) -> Optional[str]:
        """Create a transfer that holds the sender's funds until accepted.

        Args:
            from_account_id (str): Sender
            to_account_id (str): Recipient, must differ from the sender
            amount (int): Amount, must be positive and covered by the
                sender's balance at ``timestamp``
            timestamp (int): Creation time
            ttl (int): Time-to-live, must be positive

        Returns:
            Optional[str]: The transfer id, or None if refused
        """
        result = self.transfers.create_transfer(from_account_id, to_account_id, amount, timestamp, ttl)
        return result.transfer_id if result.success else None

    def accept_transfer(self, transfer_id: str, timestamp: int) -> bool:
        """Accept a transfer that is pending at ``timestamp``."""
        return self.transfers.accept_transfer(transfer_id, timestamp).success

    def reject_transfer(self, transfer_id: str, timestamp: int) -> bool:
        """Transfers cannot be rejected; always returns False."""
        return self.transfers.reject_transfer(transfer_id, timestamp).success

    def get_transfer_status(self, transfer_id: str, timestamp: int) -> Optional[str]:
        """Get ``"pending"``, ``"accepted"`` or ``"expired"``, or None if not found."""
        status = self.transfers.get_transfer_status(transfer_id, timestamp)
        return status.value if status is not None else None

    # ========== Scheduled Transfers ==========

    def schedule_transfer(self, timestamp: int, from_account_id: str, to_account_id: str,
                          amount: int, scheduled_for: int, ttl: int) -> Optional[str]:
        """Schedule a transfer for processing at or after ``scheduled_for``.

        Returns:
            Optional[str]: The scheduled transfer id, or None if refused
        """
        result = self.scheduler.schedule_transfer(
            timestamp, from_account_id, to_account_id, amount, scheduled_for, ttl
        )
        return result.scheduled_id if result.success else None

    def process_scheduled_transfers(self, timestamp: int) -> List[str]:
        """Materialize due scheduled transfers; returns the new transfer ids."""
        return self.scheduler.process_scheduled_transfers(timestamp)

    def get_scheduled_transfer_ids(self, timestamp: int, account_id: str) -> Optional[List[str]]:
        """Get an account's still-pending scheduled transfer ids, or None if unknown."""
        return self.scheduler.list_scheduled(account_id, timestamp)

    def get_scheduled_transfer_status(self, scheduled_id: str, timestamp: int) -> Optional[str]:
        """Get ``"pending"``, ``"accepted"`` or ``"rejected"``, or None if not found."""
        status = self.scheduler.get_scheduled_transfer_status(scheduled_id, timestamp)
        return status.value if status is not None else None
