"""Tests for scheduled transfers and their processing."""

import threading

import pytest

from timeledger import LedgerSDK
from timeledger.errors import ErrorCode
from timeledger.models import EntryStatus


@pytest.fixture
def sdk():
    """Create an SDK with alice (funded with 1000 at t=1000) and bob."""
    sdk = LedgerSDK()
    sdk.create_account("alice")
    sdk.create_account("bob")
    sdk.deposit("alice", 1000, 1000)
    return sdk


@pytest.fixture
def scheduler(sdk):
    """The SDK's scheduled transfer processor."""
    return sdk.scheduler


class TestScheduleTransfer:
    """Tests for schedule_transfer validation."""

    def test_schedule_success(self, scheduler):
        """Test a valid request returns a scheduled id."""
        result = scheduler.schedule_transfer(1000, "alice", "bob", 500, 5000, 1000)
        assert result.success is True
        assert result.scheduled_id == "scheduled0"

    @pytest.mark.parametrize("sender,recipient,amount,scheduled_for,ttl,error_code", [
        ("ghost", "bob", 100, 5000, 1000, ErrorCode.SENDER_NOT_FOUND),
        ("alice", "ghost", 100, 5000, 1000, ErrorCode.RECIPIENT_NOT_FOUND),
        ("alice", "alice", 100, 5000, 1000, ErrorCode.SAME_ACCOUNT),
        ("alice", "bob", 0, 5000, 1000, ErrorCode.INVALID_AMOUNT),
        ("alice", "bob", 100, 5000, -1, ErrorCode.INVALID_TTL),
        ("alice", "bob", 100, 0, 1000, ErrorCode.INVALID_SCHEDULE_TIME),
        ("alice", "bob", 100, 999, 1000, ErrorCode.INVALID_SCHEDULE_TIME),
        ("alice", "bob", 10, 1500.5, 100, ErrorCode.INVALID_SCHEDULE_TIME),
        ("alice", "bob", 10, "1500", 100, ErrorCode.INVALID_SCHEDULE_TIME),
        ("alice", "bob", 1.5, 1500, 100, ErrorCode.INVALID_AMOUNT),
        ("alice", "bob", 10, 1500, 0.5, ErrorCode.INVALID_TTL),
    ])
    def test_schedule_refused(self, scheduler, sdk, sender, recipient, amount,
                              scheduled_for, ttl, error_code):
        """Test invalid requests are refused and nothing is recorded."""
        result = scheduler.schedule_transfer(1000, sender, recipient, amount, scheduled_for, ttl)
        assert result.success is False
        assert result.error_code == error_code
        assert sdk.store.get_entry_count() == 1

    def test_fractional_request_time_refused(self, scheduler, sdk):
        """Test a non-integer request time is refused and uses up no id."""
        result = scheduler.schedule_transfer(1000.5, "alice", "bob", 10, 1500, 100)

        assert result.error_code == ErrorCode.INVALID_TIMESTAMP
        assert sdk.store.get_entry_count() == 1
        assert scheduler.schedule_transfer(1000, "alice", "bob", 10, 1500, 100).scheduled_id == "scheduled0"

    def test_schedule_for_request_time(self, scheduler):
        """Test scheduled_for equal to the request time is allowed."""
        assert scheduler.schedule_transfer(1000, "alice", "bob", 100, 1000, 1000).success is True

    def test_schedule_does_not_check_balance(self, scheduler):
        """Test the balance is only checked when processing."""
        assert scheduler.schedule_transfer(1000, "alice", "bob", 99999, 2000, 1000).success is True


class TestProcessScheduledTransfers:
    """Tests for process_scheduled_transfers."""

    def test_due_transfer_materialized(self, sdk, scheduler):
        """Test a due scheduled transfer becomes a pending transfer created at processing time."""
        scheduled_id = scheduler.schedule_transfer(1000, "alice", "bob", 200, 3000, 2000).scheduled_id

        created = scheduler.process_scheduled_transfers(3000)
        assert created == ["transfer0"]
        assert sdk.get_transfer_status("transfer0", 4000) == "pending"
        assert sdk.get_transfer_status("transfer0", 5000) == "pending"
        assert sdk.get_transfer_status("transfer0", 5001) == "expired"
        assert scheduler.get_scheduled_transfer_status(scheduled_id, 3000) == EntryStatus.ACCEPTED
        assert sdk.get_balance("alice", 3000) == 800

    def test_future_transfer_ignored(self, scheduler):
        """Test transfers scheduled later are left pending."""
        scheduled_id = scheduler.schedule_transfer(1000, "alice", "bob", 100, 6000, 1000).scheduled_id

        assert scheduler.process_scheduled_transfers(5000) == []
        assert scheduler.get_scheduled_transfer_status(scheduled_id, 5000) == EntryStatus.PENDING

    def test_insufficient_funds_rejects(self, sdk, scheduler):
        """Test a transfer the sender cannot cover at processing time is rejected."""
        scheduled_id = scheduler.schedule_transfer(1000, "alice", "bob", 200, 3000, 2000).scheduled_id
        sdk.withdraw("alice", 1000, 2500)

        assert scheduler.process_scheduled_transfers(3000) == []
        assert scheduler.get_scheduled_transfer_status(scheduled_id, 3000) == EntryStatus.REJECTED
        assert scheduler.list_scheduled("alice", 4000) == []
        assert sdk.get_transfer_status(scheduled_id, 4000) is None

    def test_not_reprocessed(self, scheduler):
        """Test resolved scheduled transfers are skipped on later calls."""
        scheduler.schedule_transfer(1000, "alice", "bob", 100, 3000, 1000)

        assert scheduler.process_scheduled_transfers(3000) == ["transfer0"]
        assert scheduler.process_scheduled_transfers(3500) == []
        assert scheduler.process_scheduled_transfers(3000) == []

    def test_rejected_not_retried_after_funding(self, sdk, scheduler):
        """Test a rejection is final even if funds arrive later."""
        scheduler.schedule_transfer(1000, "alice", "bob", 5000, 2000, 1000)
        assert scheduler.process_scheduled_transfers(2000) == []

        sdk.deposit("alice", 10000, 2500)
        assert scheduler.process_scheduled_transfers(3000) == []

    def test_batch_in_recording_order(self, scheduler):
        """Test several due transfers are all materialized, in order."""
        scheduler.schedule_transfer(1000, "alice", "bob", 100, 3000, 1000)
        scheduler.schedule_transfer(1000, "alice", "bob", 100, 2000, 1000)

        assert scheduler.process_scheduled_transfers(3000) == ["transfer0", "transfer1"]

    def test_batch_shares_sender_balance(self, sdk, scheduler):
        """Test earlier materializations hold funds that later ones need."""
        first = scheduler.schedule_transfer(1000, "alice", "bob", 700, 2000, 1000).scheduled_id
        second = scheduler.schedule_transfer(1000, "alice", "bob", 700, 2000, 1000).scheduled_id

        assert scheduler.process_scheduled_transfers(2000) == ["transfer0"]
        assert scheduler.get_scheduled_transfer_status(first, 2000) == EntryStatus.ACCEPTED
        assert scheduler.get_scheduled_transfer_status(second, 2000) == EntryStatus.REJECTED

    def test_not_visible_before_its_timestamp(self, scheduler):
        """Test processing before the scheduling time does not see the entry."""
        scheduled_id = scheduler.schedule_transfer(2000, "alice", "bob", 100, 2000, 1000).scheduled_id

        assert scheduler.process_scheduled_transfers(1500) == []
        assert scheduler.get_scheduled_transfer_status(scheduled_id, 1500) is None
        assert scheduler.process_scheduled_transfers(2000) == ["transfer0"]

    def test_materialized_transfer_can_be_accepted(self, sdk, scheduler):
        """Test the created transfer follows the normal lifecycle."""
        scheduler.schedule_transfer(1000, "alice", "bob", 150, 2000, 1000)
        transfer_id = scheduler.process_scheduled_transfers(2000)[0]

        assert sdk.accept_transfer(transfer_id, 2500) is True
        assert sdk.get_balance("bob", 2500) == 150
        assert sdk.get_transaction_history("bob", 2500) == ["transfer 150 2000"]

    def test_fractional_processing_time_ignored(self, scheduler):
        """Test processing at a non-integer time resolves nothing."""
        scheduled_id = scheduler.schedule_transfer(1000, "alice", "bob", 100, 2000, 1000).scheduled_id

        assert scheduler.process_scheduled_transfers(2500.5) == []
        assert scheduler.get_scheduled_transfer_status(scheduled_id, 3000) == EntryStatus.PENDING
        assert scheduler.process_scheduled_transfers(3000) == ["transfer0"]

    def test_competing_transfers_resolved_in_recording_order(self, sdk, scheduler):
        """Test the earliest recorded scheduled transfer wins shared funds.

        Order is by recording across the whole ledger, not grouped by
        account: carol's transfer to bob was recorded before her transfer to
        alice, so it wins even though alice's account was created first.
        """
        sdk.create_account("carol")
        sdk.deposit("carol", 100, 1000)
        to_bob = scheduler.schedule_transfer(1000, "carol", "bob", 100, 2000, 1000).scheduled_id
        to_alice = scheduler.schedule_transfer(1000, "carol", "alice", 100, 2000, 1000).scheduled_id
        alice_to_bob = scheduler.schedule_transfer(1000, "alice", "bob", 300, 2000, 1000).scheduled_id

        assert scheduler.process_scheduled_transfers(2000) == ["transfer0", "transfer1"]
        assert scheduler.get_scheduled_transfer_status(to_bob, 2000) == EntryStatus.ACCEPTED
        assert scheduler.get_scheduled_transfer_status(to_alice, 2000) == EntryStatus.REJECTED
        assert scheduler.get_scheduled_transfer_status(alice_to_bob, 2000) == EntryStatus.ACCEPTED
        assert sdk.get_balance("carol", 2000) == 0
        assert sdk.get_balance("alice", 2000) == 700

    def test_concurrent_processing_materializes_once(self, sdk, scheduler):
        """Test racing processors never materialize an entry twice."""
        for _ in range(20):
            scheduler.schedule_transfer(1000, "alice", "bob", 10, 2000, 1000)

        results = []
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            results.append(scheduler.process_scheduled_transfers(2000))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        created = [transfer_id for batch in results for transfer_id in batch]
        assert len(created) == 20
        assert len(set(created)) == 20
        assert sdk.get_balance("alice", 2000) == 800


class TestListScheduled:
    """Tests for list_scheduled."""

    def test_lists_pending_for_both_parties(self, scheduler):
        """Test a pending scheduled transfer is listed for sender and recipient."""
        scheduled_id = scheduler.schedule_transfer(1000, "alice", "bob", 100, 5000, 1000).scheduled_id

        assert scheduler.list_scheduled("alice", 4000) == [scheduled_id]
        assert scheduler.list_scheduled("bob", 4000) == [scheduled_id]

    def test_unknown_account(self, scheduler):
        """Test listing for a missing account is None."""
        assert scheduler.list_scheduled("ghost", 4000) is None

    def test_excludes_accepted_and_rejected(self, scheduler):
        """Test resolved scheduled transfers are not listed."""
        id1 = scheduler.schedule_transfer(1000, "alice", "bob", 100, 2000, 1000).scheduled_id
        scheduler.process_scheduled_transfers(2000)
        id2 = scheduler.schedule_transfer(3000, "alice", "bob", 2000, 3500, 1000).scheduled_id
        scheduler.process_scheduled_transfers(3500)
        id3 = scheduler.schedule_transfer(3500, "alice", "bob", 10, 9000, 1000).scheduled_id

        listed = scheduler.list_scheduled("alice", 4000)
        assert id1 not in listed
        assert id2 not in listed
        assert listed == [id3]

    def test_excludes_future_entries(self, scheduler):
        """Test entries scheduled after the query time are not listed."""
        scheduler.schedule_transfer(3000, "alice", "bob", 100, 5000, 1000)
        assert scheduler.list_scheduled("alice", 2000) == []
