from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    OWNER = "OWNER"
    BUYER = "BUYER"
    AGGREGATOR = "AGGREGATOR"


class MatchState(str, Enum):
    EMPTY = "EMPTY"  # no terms on the ledger (never proposed, or removed)
    PROPOSED = "PROPOSED"
    ACCEPTED = "ACCEPTED"
