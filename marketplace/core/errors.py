from __future__ import annotations

from typing import Optional


class LedgerError(Exception):
    """Base class for failures talking to the marketplace ledger."""


class LedgerRejectedError(LedgerError):
    """A transaction was reverted by contract logic."""


class LedgerTransportError(LedgerError):
    """The ledger could not be reached or did not confirm the transaction."""


class LedgerDecodeError(LedgerError):
    """A read returned a record the core cannot interpret."""


class ReconciliationError(LedgerError):
    """The write went through but the follow-up read failed.

    The ledger state already changed; the local entity was not brought up to
    date (and, for reject/delete, was not reset). The failing read is chained
    as ``__cause__``.
    """

    def __init__(self, match_id: int, operation: str, cause: Optional[BaseException] = None) -> None:
        self.match_id = match_id
        self.operation = operation
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(
            f"{operation} on match {match_id} was confirmed but reconciliation failed{detail}"
        )
