"""Account Store - accounts, the shared entry arena, and id allocation.

The AccountStore is responsible for:
- Storing accounts and guaranteeing unique account ids
- Owning every ledger entry, keyed by entry id (the arena)
- Linking an entry to the one or two accounts it touches
- Allocating entry ids from per-store counters
- Providing the lock that makes each ledger operation atomic

This implementation uses in-memory storage (dictionaries) and lives only
as long as the process.
"""

import logging
import threading
from typing import Dict, Iterable, List, Optional, Type

from timeledger.config import Settings, settings as default_settings
from timeledger.models import Account, BaseEntry, EntryType, LedgerEntry

logger = logging.getLogger(__name__)


class AccountStore:
    """Central storage for accounts and their entries.

    Entries touching two accounts (transfers and scheduled transfers) are
    stored once in the arena and referenced by id from both accounts, so an
    accept or reject is visible identically from either side. Nothing is
    ever removed from the store.

    Thread Safety:
        ``lock`` is a re-entrant lock owned by the store. Managers hold it
        for the whole of every read or read-modify-write so that a balance
        check and the append it guards cannot interleave with another
        mutation. Processing scheduled transfers re-enters it when it
        creates transfers.

    Usage Example:
        ```python
        store = AccountStore()
        store.create_account("alice")

        entry_id = store.next_entry_id(EntryType.DEPOSIT)
        store.add_entry(
            Deposit(entry_id=entry_id, timestamp=1000, amount=100, account_id="alice"),
            ["alice"],
        )

        store.account_entries("alice", at=1000)  # [Deposit(...)]
        store.account_entries("alice", at=999)   # []
        ```
    """

    def __init__(self, settings: Optional[Settings] = None):
        """Initialize an empty store.

        Args:
            settings (Optional[Settings]): Id prefixes to use. Defaults to the
                module-level settings read from the environment.
        """
        self.settings = settings or default_settings
        self.lock = threading.RLock()
        self._accounts: Dict[str, Account] = {}
        self._entries: Dict[str, LedgerEntry] = {}
        self._counters: Dict[str, int] = {}

    # ========== Accounts ==========

    def create_account(self, account_id: str, metadata: Optional[dict] = None) -> bool:
        """Create a new, empty account.

        Args:
            account_id (str): The unique id for the account
            metadata (Optional[dict]): Additional account metadata

        Returns:
            bool: True if created, False if the id is already taken
        """
        with self.lock:
            if account_id in self._accounts:
                logger.warning(f"Account creation refused, id already exists: {account_id}")
                return False

            self._accounts[account_id] = Account(account_id=account_id, metadata=metadata or {})
            logger.info(f"Created account: {account_id}")
            return True

    def get_account(self, account_id: str) -> Optional[Account]:
        return self._accounts.get(account_id)

    def account_exists(self, account_id: str) -> bool:
        return account_id in self._accounts

    def list_account_ids(self) -> List[str]:
        """Get every account id, in creation order."""
        return list(self._accounts)

    # ========== Entries ==========

    def next_entry_id(self, entry_type: EntryType) -> str:
        """Allocate the next id for an entry of the given kind.

        Deposits and withdrawals draw from the same counter. Counters belong
        to this store, so two stores issue independent id sequences.

        Args:
            entry_type (EntryType): Kind of entry the id is for

        Returns:
            str: A new id such as ``"transfer3"``
        """
        prefixes = {
            EntryType.DEPOSIT: self.settings.transaction_id_prefix,
            EntryType.WITHDRAWAL: self.settings.transaction_id_prefix,
            EntryType.TRANSFER: self.settings.transfer_id_prefix,
            EntryType.SCHEDULED: self.settings.scheduled_id_prefix,
        }
        prefix = prefixes[entry_type]
        with self.lock:
            ordinal = self._counters.get(prefix, 0)
            self._counters[prefix] = ordinal + 1
        return f"{prefix}{ordinal}"

    def add_entry(self, entry: BaseEntry, account_ids: Iterable[str]) -> BaseEntry:
        """Store an entry and link it to the accounts it touches.

        Args:
            entry (BaseEntry): The entry to store
            account_ids (Iterable[str]): Accounts that reference the entry

        Returns:
            BaseEntry: The stored entry (same instance)

        Raises:
            ValueError: If the entry id is already used or an account is
                unknown. Managers validate first, so this signals a bug.
        """
        with self.lock:
            account_ids = list(account_ids)
            if entry.entry_id in self._entries:
                raise ValueError(f"Entry with ID {entry.entry_id} already exists")
            missing = [a for a in account_ids if a not in self._accounts]
            if missing:
                raise ValueError(f"Accounts {missing} do not exist")

            self._entries[entry.entry_id] = entry
            for account_id in account_ids:
                self._accounts[account_id].entry_ids.append(entry.entry_id)
            return entry

    def get_entry(self, entry_id: str) -> Optional[BaseEntry]:
        """Get an entry by id regardless of its timestamp."""
        return self._entries.get(entry_id)

    def find_entry(self, entry_id: str, at: int,
                   entry_class: Type[BaseEntry] = BaseEntry) -> Optional[BaseEntry]:
        """Get an entry by id as seen at query time ``at``.

        Args:
            entry_id (str): The entry id
            at (int): Query time; entries created later are not found
            entry_class (Type[BaseEntry]): Only return entries of this kind

        Returns:
            Optional[BaseEntry]: The entry, or None if it does not exist,
                is not yet visible at ``at``, or is of another kind
        """
        entry = self._entries.get(entry_id)
        if entry is None or not entry.is_visible(at) or not isinstance(entry, entry_class):
            return None
        return entry

    def account_entries(self, account_id: str, at: int) -> Optional[List[BaseEntry]]:
        """Get an account's entries visible at ``at``, ordered by timestamp.

        Entries sharing a timestamp keep the order they were recorded in.

        Returns:
            Optional[List[BaseEntry]]: The entries, or None if the account
                does not exist
        """
        account = self._accounts.get(account_id)
        if account is None:
            return None

        visible = [self._entries[i] for i in account.entry_ids if self._entries[i].timestamp <= at]
        return sorted(visible, key=lambda e: e.timestamp)

    def all_entries(self, at: int) -> List[BaseEntry]:
        """Get every entry visible at ``at``, in the order it was recorded."""
        return [e for e in self._entries.values() if e.is_visible(at)]

    def get_entry_count(self) -> int:
        return len(self._entries)
