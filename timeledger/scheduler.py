"""Scheduled Transfer Processor - deferred transfers, materialized on demand.

A scheduled transfer is a promise to create a Transfer later. Nothing runs
on a clock: the caller invokes ``process_scheduled_transfers(at)`` and every
scheduled transfer that is due at ``at`` is attempted exactly once. It ends
ACCEPTED (a Transfer now exists) or REJECTED (creating it failed), and
either way is never looked at again.
"""

import logging
from typing import List, Optional

from timeledger.account_store import AccountStore
from timeledger.errors import ErrorCode, get_error_message
from timeledger.models import EntryStatus, EntryType, ScheduledTransfer, is_whole_number
from timeledger.transfer_manager import TransferManager

logger = logging.getLogger(__name__)


class ScheduleResult:
    """Result of scheduling a transfer.

    Attributes:
        success (bool): True if the scheduled transfer was recorded
        scheduled_id (Optional[str]): Id of the scheduled transfer
        error_code (Optional[ErrorCode]): Error code if failed
        error_message (Optional[str]): Human-readable error
    """

    def __init__(self, success: bool, scheduled_id: Optional[str] = None,
                 error_code: Optional[ErrorCode] = None, error_message: Optional[str] = None):
        self.success = success
        self.scheduled_id = scheduled_id
        self.error_code = error_code
        self.error_message = error_message

    def __repr__(self) -> str:
        if self.success:
            return f"ScheduleResult(success=True, scheduled_id={self.scheduled_id})"
        return f"ScheduleResult(success=False, error={self.error_code})"


class ScheduledTransferProcessor:
    """Schedules deferred transfers and materializes them when due.

    Processing uses the processing time, not the scheduled time, as the new
    transfer's creation time, so its balance check and its expiry both count
    from when it was actually processed.

    Idempotency:
        Only PENDING scheduled transfers are attempted, and every attempt
        moves the entry out of PENDING while the store lock is held.
        Overlapping or repeated calls, including concurrent ones, can never
        materialize the same scheduled transfer twice.

    Usage Example:
        ```python
        processor = ScheduledTransferProcessor(store, transfer_manager)

        result = processor.schedule_transfer(
            at=1000,
            from_account_id="alice",
            to_account_id="bob",
            amount=200,
            scheduled_for=3000,
            ttl=2000,
        )

        processor.process_scheduled_transfers(2999)  # [] - not due yet
        processor.process_scheduled_transfers(3000)  # ["transfer0"]
        processor.process_scheduled_transfers(3500)  # [] - already resolved
        ```
    """

    def __init__(self, store: AccountStore, transfer_manager: TransferManager):
        """Initialize the processor.

        Args:
            store (AccountStore): Store owning accounts and entries
            transfer_manager (TransferManager): Creates the materialized transfers
        """
        self.store = store
        self.transfer_manager = transfer_manager

    def schedule_transfer(self, at: int, from_account_id: str, to_account_id: str,
                          amount: int, scheduled_for: int, ttl: int) -> ScheduleResult:
        """Record a transfer to be created at or after ``scheduled_for``.

        The request is validated like a transfer, except that the sender's
        balance is not checked until processing. Scheduling has no effect on
        any balance.

        Args:
            at (int): Time the request is made
            from_account_id (str): Sender
            to_account_id (str): Recipient
            amount (int): Amount to transfer (must be > 0)
            scheduled_for (int): Earliest processing time (must be >= ``at``)
            ttl (int): Time-to-live of the transfer once created (must be > 0)

        Returns:
            ScheduleResult: Result with the scheduled transfer id on success
        """
        with self.store.lock:
            error_code = self.transfer_manager.validate_request(
                from_account_id, to_account_id, amount, ttl
            )
            if error_code is None and not is_whole_number(at):
                error_code = ErrorCode.INVALID_TIMESTAMP
            if error_code is None and (not is_whole_number(scheduled_for) or scheduled_for < at):
                error_code = ErrorCode.INVALID_SCHEDULE_TIME
            if error_code is not None:
                logger.warning(f"Scheduling refused: {error_code.value}")
                return ScheduleResult(
                    success=False,
                    error_code=error_code,
                    error_message=f"Scheduling failed: {get_error_message(error_code)}"
                )

            scheduled = ScheduledTransfer(
                entry_id=self.store.next_entry_id(EntryType.SCHEDULED),
                timestamp=at,
                amount=amount,
                from_account_id=from_account_id,
                to_account_id=to_account_id,
                scheduled_for=scheduled_for,
                ttl=ttl,
            )
            self.store.add_entry(scheduled, [from_account_id, to_account_id])

        logger.info(
            f"Transfer scheduled: {amount} from {from_account_id} to {to_account_id} "
            f"for {scheduled_for} ({scheduled.entry_id})"
        )
        return ScheduleResult(success=True, scheduled_id=scheduled.entry_id)

    def process_scheduled_transfers(self, at: int) -> List[str]:
        """Materialize every scheduled transfer due at ``at``.

        Scheduled transfers are attempted in the order they were recorded.
        Each one that is PENDING with ``scheduled_for <= at`` becomes a
        Transfer created at ``at``; on success it is marked ACCEPTED, on
        failure (for example the sender no longer has the funds) REJECTED.

        Args:
            at (int): Processing time

        Returns:
            List[str]: Ids of the transfers created by this call, in order
        """
        if not is_whole_number(at):
            logger.warning(f"Scheduled transfer processing refused: {ErrorCode.INVALID_TIMESTAMP.value}")
            return []

        created: List[str] = []
        with self.store.lock:
            for entry in self.store.all_entries(at):
                if not isinstance(entry, ScheduledTransfer) or not entry.is_due(at):
                    continue

                result = self.transfer_manager.create_transfer(
                    entry.from_account_id, entry.to_account_id, entry.amount, at, entry.ttl
                )
                if result.success:
                    entry.accept(at)
                    created.append(result.transfer_id)
                    logger.info(f"Scheduled transfer {entry.entry_id} materialized as {result.transfer_id}")
                else:
                    entry.reject(at)
                    logger.warning(f"Scheduled transfer {entry.entry_id} rejected: {result.error_code.value}")

        logger.debug(f"Processed scheduled transfers at {at}: {len(created)} created")
        return created

    def list_scheduled(self, account_id: str, at: int) -> Optional[List[str]]:
        """List an account's scheduled transfers still pending at ``at``.

        Accepted and rejected ones are excluded, as are those recorded after
        ``at``.

        Returns:
            Optional[List[str]]: Scheduled transfer ids, or None if the
                account does not exist
        """
        with self.store.lock:
            entries = self.store.account_entries(account_id, at)
            if entries is None:
                return None
            return [
                e.entry_id for e in entries
                if isinstance(e, ScheduledTransfer) and e.status(at) == EntryStatus.PENDING
            ]

    def get_scheduled_transfer_status(self, scheduled_id: str, at: int) -> Optional[EntryStatus]:
        """Get a scheduled transfer's status at ``at``, or None if not found."""
        with self.store.lock:
            scheduled = self.store.find_entry(scheduled_id, at, ScheduledTransfer)
            return scheduled.status(at) if scheduled is not None else None
