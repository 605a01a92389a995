"""Ledger Manager - deposits and withdrawals.

The LedgerManager is responsible for:
- Validating and recording deposits (funds entering an account)
- Validating and recording withdrawals against the balance at that time
- Reporting refusals as results with error codes rather than exceptions

Balances are never stored; a withdrawal is checked against the balance the
TemporalQueryEngine computes at the withdrawal's own timestamp.
"""

import logging
from typing import Optional

from timeledger.account_store import AccountStore
from timeledger.errors import ErrorCode, get_error_message
from timeledger.models import Deposit, EntryType, Withdrawal, is_whole_number
from timeledger.query_engine import TemporalQueryEngine

logger = logging.getLogger(__name__)


class LedgerResult:
    """Result of a deposit or withdrawal.

    Attributes:
        success (bool): True if the entry was recorded
        entry_id (Optional[str]): Id of the recorded entry
        error_code (Optional[ErrorCode]): Why the operation was refused
        error_message (Optional[str]): Human-readable error
    """

    def __init__(self, success: bool, entry_id: Optional[str] = None,
                 error_code: Optional[ErrorCode] = None, error_message: Optional[str] = None):
        self.success = success
        self.entry_id = entry_id
        self.error_code = error_code
        self.error_message = error_message

    def __repr__(self) -> str:
        if self.success:
            return f"LedgerResult(success=True, entry_id={self.entry_id})"
        return f"LedgerResult(success=False, error={self.error_code})"


class LedgerManager:
    """Manager for single-account entries.

    Usage Example:
        ```python
        store = AccountStore()
        engine = TemporalQueryEngine(store)
        ledger = LedgerManager(store, engine)

        store.create_account("alice")

        result = ledger.record_deposit("alice", amount=100, at=1000)
        result.success    # True
        result.entry_id   # "transaction0"

        result = ledger.record_withdrawal("alice", amount=500, at=1500)
        result.error_code # ErrorCode.INSUFFICIENT_FUNDS
        ```
    """

    def __init__(self, store: AccountStore, query_engine: TemporalQueryEngine):
        """Initialize the ledger manager.

        Args:
            store (AccountStore): Where entries are recorded
            query_engine (TemporalQueryEngine): Used for balance checks
        """
        self.store = store
        self.query_engine = query_engine

    def record_deposit(self, account_id: str, amount: int, at: int) -> LedgerResult:
        """Record funds entering an account.

        Args:
            account_id (str): Account receiving the funds
            amount (int): Amount to add (must be > 0)
            at (int): Timestamp of the deposit

        Returns:
            LedgerResult: Result with the new entry id on success
        """
        with self.store.lock:
            if not self.store.account_exists(account_id):
                return self._failed_result("deposit", ErrorCode.ACCOUNT_NOT_FOUND)
            if not is_whole_number(amount) or amount <= 0:
                return self._failed_result("deposit", ErrorCode.INVALID_AMOUNT)
            if not is_whole_number(at):
                return self._failed_result("deposit", ErrorCode.INVALID_TIMESTAMP)

            entry = Deposit(
                entry_id=self.store.next_entry_id(EntryType.DEPOSIT),
                timestamp=at,
                amount=amount,
                account_id=account_id,
            )
            self.store.add_entry(entry, [account_id])

        logger.info(f"Deposit recorded: {amount} to {account_id} at {at} ({entry.entry_id})")
        return LedgerResult(success=True, entry_id=entry.entry_id)

    def record_withdrawal(self, account_id: str, amount: int, at: int) -> LedgerResult:
        """Record funds leaving an account.

        The account's balance at ``at`` must cover the amount. Funds held by
        pending transfers are already excluded from that balance.

        Args:
            account_id (str): Account losing the funds
            amount (int): Amount to remove (must be > 0)
            at (int): Timestamp of the withdrawal

        Returns:
            LedgerResult: Result with the new entry id on success
        """
        with self.store.lock:
            if not self.store.account_exists(account_id):
                return self._failed_result("withdrawal", ErrorCode.ACCOUNT_NOT_FOUND)
            if not is_whole_number(amount) or amount <= 0:
                return self._failed_result("withdrawal", ErrorCode.INVALID_AMOUNT)
            if not is_whole_number(at):
                return self._failed_result("withdrawal", ErrorCode.INVALID_TIMESTAMP)
            if self.query_engine.get_balance(account_id, at) < amount:
                return self._failed_result("withdrawal", ErrorCode.INSUFFICIENT_FUNDS)

            entry = Withdrawal(
                entry_id=self.store.next_entry_id(EntryType.WITHDRAWAL),
                timestamp=at,
                amount=amount,
                account_id=account_id,
            )
            self.store.add_entry(entry, [account_id])

        logger.info(f"Withdrawal recorded: {amount} from {account_id} at {at} ({entry.entry_id})")
        return LedgerResult(success=True, entry_id=entry.entry_id)

    def _failed_result(self, operation: str, error_code: ErrorCode) -> LedgerResult:
        logger.warning(f"{operation.capitalize()} refused: {error_code.value}")
        return LedgerResult(
            success=False,
            error_code=error_code,
            error_message=f"{operation} failed: {get_error_message(error_code)}"
        )
