"""Transfer Manager - the two-party hold/release lifecycle.

The TransferManager provides transfer operations:
- Creating transfers (holding the sender's funds)
- Accepting transfers (crediting the recipient)
- Refusing rejection (transfers can only be accepted or left to expire)
- Reporting a transfer's status at any query time

A transfer is a single entry whose status is evaluated at query time, so
neither acceptance nor expiry writes anything besides the accepted flag.
Once past its expiration an unaccepted transfer simply stops debiting the
sender.
"""

import logging
from typing import Optional

from timeledger.account_store import AccountStore
from timeledger.errors import ErrorCode, get_error_message
from timeledger.models import EntryStatus, EntryType, Transfer, is_whole_number
from timeledger.query_engine import TemporalQueryEngine

logger = logging.getLogger(__name__)


class TransferResult:
    """Result of a transfer operation.

    Attributes:
        success (bool): True if operation succeeded
        transfer_id (Optional[str]): The transfer concerned, if known
        status (Optional[EntryStatus]): Transfer status after the operation
        error_code (Optional[ErrorCode]): Error code if failed
        error_message (Optional[str]): Human-readable error
    """

    def __init__(self, success: bool, transfer_id: Optional[str] = None,
                 status: Optional[EntryStatus] = None,
                 error_code: Optional[ErrorCode] = None, error_message: Optional[str] = None):
        self.success = success
        self.transfer_id = transfer_id
        self.status = status
        self.error_code = error_code
        self.error_message = error_message

    def __repr__(self) -> str:
        if self.success:
            return f"TransferResult(success=True, transfer_id={self.transfer_id})"
        return f"TransferResult(success=False, error={self.error_code})"


class TransferManager:
    """Manager for transfer creation and acceptance.

    Lifecycle:
    1. Create: entry appended to both accounts, sender's balance drops (PENDING)
    2a. Accept before expiration: recipient's balance rises (ACCEPTED)
    2b. No accept before expiration: sender's balance recovers (EXPIRED)

    Usage Example:
        ```python
        store = AccountStore()
        engine = TemporalQueryEngine(store)
        transfers = TransferManager(store, engine)

        result = transfers.create_transfer(
            from_account_id="alice",
            to_account_id="bob",
            amount=50,
            at=2000,
            ttl=1000,
        )

        if result.success:
            accept = transfers.accept_transfer(result.transfer_id, at=2500)
            print(accept.status)  # EntryStatus.ACCEPTED
        ```
    """

    def __init__(self, store: AccountStore, query_engine: TemporalQueryEngine):
        """Initialize the transfer manager.

        Args:
            store (AccountStore): Store owning accounts and entries
            query_engine (TemporalQueryEngine): Used for the sender's balance check
        """
        self.store = store
        self.query_engine = query_engine

    def create_transfer(self, from_account_id: str, to_account_id: str, amount: int,
                        at: int, ttl: int) -> TransferResult:
        """Create a pending transfer, holding the sender's funds.

        Args:
            from_account_id (str): Sender
            to_account_id (str): Recipient
            amount (int): Amount to transfer (must be > 0)
            at (int): Creation time
            ttl (int): Time-to-live (must be > 0); the transfer expires
                once queried after ``at + ttl``

        Returns:
            TransferResult: Result with the new transfer id on success

        Example:
            ```python
            result = transfers.create_transfer("alice", "bob", 50, at=2000, ttl=1000)
            engine.get_balance("alice", 2000)  # reduced by 50 immediately
            engine.get_balance("bob", 2000)    # unchanged until accepted
            ```
        """
        with self.store.lock:
            error_code = self.validate_request(from_account_id, to_account_id, amount, ttl)
            if error_code is None and not is_whole_number(at):
                error_code = ErrorCode.INVALID_TIMESTAMP
            if error_code is None and self.query_engine.get_balance(from_account_id, at) < amount:
                error_code = ErrorCode.INSUFFICIENT_FUNDS
            if error_code is not None:
                return self._failed_result("create", error_code)

            transfer = Transfer(
                entry_id=self.store.next_entry_id(EntryType.TRANSFER),
                timestamp=at,
                amount=amount,
                from_account_id=from_account_id,
                to_account_id=to_account_id,
                ttl=ttl,
            )
            self.store.add_entry(transfer, [from_account_id, to_account_id])

        logger.info(
            f"Transfer created: {amount} from {from_account_id} to {to_account_id} "
            f"at {at}, expires after {transfer.expiration} ({transfer.entry_id})"
        )
        return TransferResult(success=True, transfer_id=transfer.entry_id, status=EntryStatus.PENDING)

    def accept_transfer(self, transfer_id: str, at: int) -> TransferResult:
        """Accept a transfer, crediting the recipient.

        Only a transfer that is PENDING at ``at`` can be accepted. That single
        check refuses an already-accepted transfer, an expired one, and one
        created after ``at``.

        Args:
            transfer_id (str): The transfer to accept
            at (int): Acceptance time

        Returns:
            TransferResult: Result with the transfer's status
        """
        with self.store.lock:
            transfer = self.store.find_entry(transfer_id, at, Transfer)
            if transfer is None:
                return self._failed_result("accept", ErrorCode.TRANSFER_NOT_FOUND, transfer_id)

            if not transfer.accept(at):
                return self._failed_result(
                    "accept", ErrorCode.TRANSFER_NOT_PENDING, transfer_id, transfer.status(at)
                )

        logger.info(f"Transfer accepted: {transfer_id} at {at}")
        return TransferResult(success=True, transfer_id=transfer_id, status=EntryStatus.ACCEPTED)

    def reject_transfer(self, transfer_id: str, at: int) -> TransferResult:
        """Reject a transfer. Always refused.

        Transfers have no manual cancellation path; an unwanted transfer is
        left to expire. The store is never modified.
        """
        with self.store.lock:
            transfer = self.store.find_entry(transfer_id, at, Transfer)
            if transfer is None:
                return self._failed_result("reject", ErrorCode.TRANSFER_NOT_FOUND, transfer_id)
            return self._failed_result(
                "reject", ErrorCode.TRANSFER_NOT_REJECTABLE, transfer_id, transfer.status(at)
            )

    def get_transfer_status(self, transfer_id: str, at: int) -> Optional[EntryStatus]:
        """Get a transfer's status at ``at``.

        Returns:
            Optional[EntryStatus]: PENDING, ACCEPTED or EXPIRED, or None if no
                transfer with this id exists at ``at``
        """
        with self.store.lock:
            transfer = self.store.find_entry(transfer_id, at, Transfer)
            return transfer.status(at) if transfer is not None else None

    def validate_request(self, from_account_id: str, to_account_id: str, amount: int,
                         ttl: int) -> Optional[ErrorCode]:
        """Check the parts of a transfer request that do not depend on time.

        Shared with the scheduled transfer processor.
        """
        if not self.store.account_exists(from_account_id):
            return ErrorCode.SENDER_NOT_FOUND
        if not self.store.account_exists(to_account_id):
            return ErrorCode.RECIPIENT_NOT_FOUND
        if from_account_id == to_account_id:
            return ErrorCode.SAME_ACCOUNT
        if not is_whole_number(amount) or amount <= 0:
            return ErrorCode.INVALID_AMOUNT
        if not is_whole_number(ttl) or ttl <= 0:
            return ErrorCode.INVALID_TTL
        return None

    def _failed_result(self, operation: str, error_code: ErrorCode,
                       transfer_id: Optional[str] = None,
                       status: Optional[EntryStatus] = None) -> TransferResult:
        logger.warning(f"Transfer {operation} refused ({transfer_id}): {error_code.value}")
        return TransferResult(
            success=False,
            transfer_id=transfer_id,
            status=status,
            error_code=error_code,
            error_message=f"Transfer {operation} failed: {get_error_message(error_code)}"
        )
