"""Error codes returned by ledger operations.

Operations never raise for a refused request. They return a result object
whose ``error_code`` is one of these values, and the public facade turns
that into ``False`` / ``None``.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Why an operation was refused."""
    # Validation failures
    ACCOUNT_NOT_FOUND = "ACCOUNT_NOT_FOUND"
    SENDER_NOT_FOUND = "SENDER_NOT_FOUND"
    RECIPIENT_NOT_FOUND = "RECIPIENT_NOT_FOUND"
    SAME_ACCOUNT = "SAME_ACCOUNT"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INVALID_TTL = "INVALID_TTL"
    INVALID_TIMESTAMP = "INVALID_TIMESTAMP"
    INVALID_SCHEDULE_TIME = "INVALID_SCHEDULE_TIME"
    # State conflicts
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    TRANSFER_NOT_FOUND = "TRANSFER_NOT_FOUND"
    TRANSFER_NOT_PENDING = "TRANSFER_NOT_PENDING"
    TRANSFER_NOT_REJECTABLE = "TRANSFER_NOT_REJECTABLE"


_MESSAGES = {
    ErrorCode.ACCOUNT_NOT_FOUND: "account does not exist",
    ErrorCode.SENDER_NOT_FOUND: "sender account does not exist",
    ErrorCode.RECIPIENT_NOT_FOUND: "recipient account does not exist",
    ErrorCode.SAME_ACCOUNT: "sender and recipient must differ",
    ErrorCode.INVALID_AMOUNT: "amount must be a positive integer",
    ErrorCode.INVALID_TTL: "time-to-live must be a positive integer",
    ErrorCode.INVALID_TIMESTAMP: "timestamp must be an integer",
    ErrorCode.INVALID_SCHEDULE_TIME: "scheduled time must be an integer no earlier than the request time",
    ErrorCode.INSUFFICIENT_FUNDS: "insufficient balance",
    ErrorCode.TRANSFER_NOT_FOUND: "no such transfer at this time",
    ErrorCode.TRANSFER_NOT_PENDING: "transfer is not pending",
    ErrorCode.TRANSFER_NOT_REJECTABLE: "transfers cannot be rejected",
}


def get_error_message(error_code: ErrorCode) -> str:
    """Get the human-readable message for an error code."""
    return _MESSAGES.get(error_code, f"operation failed: {error_code.value}")
