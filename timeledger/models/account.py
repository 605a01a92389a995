"""Account model - an identifier plus the entries that touch it."""

from typing import Any, Dict, List
from pydantic import BaseModel, Field


class Account(BaseModel):
    """An account in the ledger.

    An Account carries no balance of its own. It only remembers, in
    insertion order, the ids of the entries that involve it; the entries
    themselves live in the account store. A transfer appears in both the
    sender's and the recipient's ``entry_ids``.

    Attributes:
        account_id (str): Unique identifier. Never renamed.
        entry_ids (List[str]): Ids of entries touching this account, in
            the order they were recorded (not necessarily timestamp order).
        metadata (Dict[str, Any]): Free-form application data.
    """

    account_id: str = Field(frozen=True, description="Unique account identifier")
    entry_ids: List[str] = Field(
        default_factory=list,
        description="Entries touching this account, insertion order"
    )
    metadata: Dict[str, Any] = Field(
        default_factory=dict,
        description="Additional metadata"
    )
