"""Settings for the ledger, read from the environment or a .env file."""

from itertools import permutations

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Ledger settings.

    Every field can be overridden with a ``TIMELEDGER_``-prefixed
    environment variable, e.g. ``TIMELEDGER_TRANSFER_ID_PREFIX=xfer``.

    Ids are the prefix followed by a per-prefix counter, so two distinct
    prefixes must never differ only by trailing digits (``t`` and ``t1``
    would both issue ``t10``). Such pairs are refused. Kinds may share a
    prefix; they then share its counter.
    """

    model_config = SettingsConfigDict(
        env_prefix="TIMELEDGER_",
        env_file=".env",
        extra="ignore",
    )

    # Deposits and withdrawals share one counter
    transaction_id_prefix: str = "transaction"
    transfer_id_prefix: str = "transfer"
    scheduled_id_prefix: str = "scheduled"

    @model_validator(mode="after")
    def prefixes_must_not_collide(self):
        prefixes = {self.transaction_id_prefix, self.transfer_id_prefix, self.scheduled_id_prefix}
        for shorter, longer in permutations(prefixes, 2):
            suffix = longer[len(shorter):]
            if longer.startswith(shorter) and suffix.isdigit():
                raise ValueError(f"Id prefixes {shorter!r} and {longer!r} can issue the same id")
        return self


settings = Settings()
