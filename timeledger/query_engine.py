"""Temporal Query Engine - balances, volumes, rankings and history at time T.

Nothing here is stored incrementally. Every answer is a fold over the
entries visible at the query time, with each entry's status re-evaluated
at that same time. Querying the past and "refunding" expired transfers
both fall out of this: an expired transfer simply stops contributing.
"""

import logging
from typing import List, Optional

from timeledger.account_store import AccountStore
from timeledger.models import BaseEntry, EntryStatus, EntryType

logger = logging.getLogger(__name__)


class TemporalQueryEngine:
    """Read-only queries over an AccountStore as of a query timestamp.

    Balance semantics for a transfer, seen from one account:

    =========  ==========  =========
    status     sender      recipient
    =========  ==========  =========
    pending    -amount     0
    accepted   -amount     +amount
    expired    0           0
    =========  ==========  =========

    Scheduled transfers never contribute directly; their effect shows up
    through the Transfer they materialize.

    Usage Example:
        ```python
        engine = TemporalQueryEngine(store)
        engine.get_balance("alice", at=2000)         # 50
        engine.get_transaction_history("alice", 2000)
        # ["deposit 100 1000"]
        engine.get_top_accounts(2, at=2000)           # ["alice", "bob"]
        ```
    """

    def __init__(self, store: AccountStore):
        self.store = store

    @staticmethod
    def balance_delta(entry: BaseEntry, account_id: str, at: int) -> int:
        """Effect of one entry on ``account_id``'s balance at ``at``."""
        if entry.entry_type == EntryType.DEPOSIT:
            return entry.amount
        if entry.entry_type == EntryType.WITHDRAWAL:
            return -entry.amount
        if entry.entry_type == EntryType.TRANSFER:
            status = entry.status(at)
            if status == EntryStatus.ACCEPTED and entry.to_account_id == account_id:
                return entry.amount
            if status in (EntryStatus.ACCEPTED, EntryStatus.PENDING) and entry.from_account_id == account_id:
                return -entry.amount
            return 0
        return 0

    @staticmethod
    def counts_as_activity(entry: BaseEntry, at: int) -> bool:
        """Whether an entry counts toward volume and history at ``at``."""
        return entry.entry_type != EntryType.SCHEDULED and entry.status(at) == EntryStatus.ACCEPTED

    def get_balance(self, account_id: str, at: int) -> Optional[int]:
        """Compute an account's balance as of ``at``.

        Args:
            account_id (str): The account to query
            at (int): Query time

        Returns:
            Optional[int]: The balance, or None if the account does not exist
        """
        with self.store.lock:
            entries = self.store.account_entries(account_id, at)
            if entries is None:
                logger.debug(f"Balance lookup for unknown account: {account_id}")
                return None
            return sum(self.balance_delta(e, account_id, at) for e in entries)

    def get_transaction_volume(self, account_id: str, at: int) -> Optional[int]:
        """Sum the amounts of an account's accepted activity as of ``at``.

        Deposits and withdrawals always count once visible. Transfers count
        only once accepted, for both parties. Scheduled transfers never count.

        Returns:
            Optional[int]: The volume, or None if the account does not exist
        """
        with self.store.lock:
            entries = self.store.account_entries(account_id, at)
            if entries is None:
                return None
            return sum(e.amount for e in entries if self.counts_as_activity(e, at))

    def get_top_accounts(self, n: int, at: int) -> List[str]:
        """Rank accounts by transaction volume as of ``at``.

        Ties are broken by ascending account id.

        Args:
            n (int): How many ids to return. Zero or negative returns [].
            at (int): Query time

        Returns:
            List[str]: Up to ``n`` account ids, highest volume first
        """
        if n <= 0:
            return []

        with self.store.lock:
            volumes = {
                account_id: self.get_transaction_volume(account_id, at) or 0
                for account_id in self.store.list_account_ids()
            }
        ranked = sorted(volumes, key=lambda account_id: (-volumes[account_id], account_id))
        return ranked[:n]

    def get_transaction_history(self, account_id: str, at: int) -> Optional[List[str]]:
        """Render an account's accepted activity as of ``at``.

        Each line reads ``"<type> <amount> <timestamp>"``, oldest first.
        Entries with equal timestamps appear in the order they were recorded.

        Returns:
            Optional[List[str]]: The history lines, or None if the account
                does not exist
        """
        with self.store.lock:
            entries = self.store.account_entries(account_id, at)
            if entries is None:
                return None
            return [
                f"{e.entry_type.value} {e.amount} {e.timestamp}"
                for e in entries
                if self.counts_as_activity(e, at)
            ]

    def get_total_balance(self, at: int) -> int:
        """Sum every account's balance as of ``at``.

        Accepted transfers net to zero across the two parties and expired
        ones contribute nothing, but a pending transfer has left the sender
        without reaching the recipient. So this equals deposits minus
        withdrawals up to ``at`` minus ``get_total_held(at)``.
        """
        with self.store.lock:
            return sum(self.get_balance(a, at) or 0 for a in self.store.list_account_ids())

    def get_total_held(self, at: int) -> int:
        """Sum the amounts of transfers pending at ``at`` (funds on hold)."""
        with self.store.lock:
            return sum(
                e.amount for e in self.store.all_entries(at)
                if e.entry_type == EntryType.TRANSFER and e.status(at) == EntryStatus.PENDING
            )
