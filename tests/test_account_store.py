"""Tests for the AccountStore."""

import pytest

from timeledger.account_store import AccountStore
from timeledger.config import Settings
from timeledger.models import Deposit, EntryType, Transfer


@pytest.fixture
def store():
    """Create a fresh store with two accounts."""
    store = AccountStore(Settings())
    store.create_account("alice")
    store.create_account("bob")
    return store


def add_deposit(store, account_id, amount, at):
    entry = Deposit(
        entry_id=store.next_entry_id(EntryType.DEPOSIT),
        timestamp=at,
        amount=amount,
        account_id=account_id,
    )
    return store.add_entry(entry, [account_id])


class TestAccounts:
    """Tests for account creation and lookup."""

    def test_create_account(self, store):
        """Test a new account is registered."""
        assert store.create_account("carol") is True
        assert store.account_exists("carol") is True
        assert store.get_account("carol").entry_ids == []

    def test_duplicate_account_refused(self, store):
        """Test creating an existing account returns False."""
        assert store.create_account("alice") is False

    def test_list_account_ids_in_creation_order(self, store):
        """Test accounts are listed in the order they were created."""
        store.create_account("aaron")
        assert store.list_account_ids() == ["alice", "bob", "aaron"]

    def test_unknown_account(self, store):
        """Test lookups for missing accounts."""
        assert store.get_account("ghost") is None
        assert store.account_exists("ghost") is False
        assert store.account_entries("ghost", 1000) is None


class TestEntryIds:
    """Tests for id allocation."""

    def test_deposits_and_withdrawals_share_counter(self, store):
        """Test single-account entries draw from one sequence."""
        assert store.next_entry_id(EntryType.DEPOSIT) == "transaction0"
        assert store.next_entry_id(EntryType.WITHDRAWAL) == "transaction1"
        assert store.next_entry_id(EntryType.DEPOSIT) == "transaction2"

    def test_counters_per_kind(self, store):
        """Test transfers and scheduled transfers have their own sequences."""
        assert store.next_entry_id(EntryType.TRANSFER) == "transfer0"
        assert store.next_entry_id(EntryType.SCHEDULED) == "scheduled0"
        assert store.next_entry_id(EntryType.TRANSFER) == "transfer1"

    def test_counters_scoped_to_store(self, store):
        """Test two stores issue independent id sequences."""
        store.next_entry_id(EntryType.TRANSFER)
        other = AccountStore(Settings())
        assert other.next_entry_id(EntryType.TRANSFER) == "transfer0"

    def test_custom_prefixes(self):
        """Test prefixes come from settings."""
        store = AccountStore(Settings(transfer_id_prefix="xfer-"))
        assert store.next_entry_id(EntryType.TRANSFER) == "xfer-0"


class TestEntries:
    """Tests for the shared entry arena."""

    def test_transfer_shared_between_accounts(self, store):
        """Test a two-party entry is one object referenced by both accounts."""
        transfer = Transfer(
            entry_id=store.next_entry_id(EntryType.TRANSFER),
            timestamp=2000,
            amount=50,
            from_account_id="alice",
            to_account_id="bob",
            ttl=1000,
        )
        store.add_entry(transfer, ["alice", "bob"])

        from_alice = store.account_entries("alice", 2000)[0]
        from_bob = store.account_entries("bob", 2000)[0]
        assert from_alice is from_bob

        from_alice.accept(2500)
        assert from_bob.accepted is True
        assert store.get_entry_count() == 1

    def test_account_entries_filtered_and_sorted(self, store):
        """Test entries are filtered by time and ordered by timestamp."""
        add_deposit(store, "alice", 10, 3000)
        add_deposit(store, "alice", 20, 1000)
        add_deposit(store, "alice", 30, 2000)

        amounts = [e.amount for e in store.account_entries("alice", 2500)]
        assert amounts == [20, 30]

    def test_equal_timestamps_keep_insertion_order(self, store):
        """Test the sort is stable for equal timestamps."""
        add_deposit(store, "alice", 1, 1000)
        add_deposit(store, "alice", 2, 1000)
        add_deposit(store, "alice", 3, 1000)

        amounts = [e.amount for e in store.account_entries("alice", 1000)]
        assert amounts == [1, 2, 3]

    def test_find_entry_respects_time_and_kind(self, store):
        """Test find_entry hides future entries and other kinds."""
        deposit = add_deposit(store, "alice", 100, 1000)

        assert store.find_entry(deposit.entry_id, 1000) is deposit
        assert store.find_entry(deposit.entry_id, 999) is None
        assert store.find_entry(deposit.entry_id, 1000, Transfer) is None
        assert store.find_entry("missing", 1000) is None

    def test_duplicate_entry_id_raises(self, store):
        """Test the arena refuses to overwrite an entry."""
        deposit = add_deposit(store, "alice", 100, 1000)
        with pytest.raises(ValueError, match="already exists"):
            store.add_entry(deposit, ["alice"])

    def test_unknown_account_raises(self, store):
        """Test linking to a missing account is a programming error."""
        entry = Deposit(entry_id="transaction99", timestamp=1, amount=1, account_id="ghost")
        with pytest.raises(ValueError, match="do not exist"):
            store.add_entry(entry, ["ghost"])
        assert store.get_entry("transaction99") is None
