"""Off-chain mirrors of the marketplace offers, demands and matches."""

from .enums import MatchState, Role
from .errors import (
    LedgerDecodeError,
    LedgerError,
    LedgerRejectedError,
    LedgerTransportError,
    ReconciliationError,
)
from .records import ZERO_ADDRESS, DemandRecord, MatchRecord, OfferRecord, parse_uint
from .gateway import LedgerGateway
from .asset import Asset
from .demand import Demand
from .match import Match, MatchBinding
from .config import MarketplaceConfig

__all__ = [
    "MatchState",
    "Role",
    "LedgerError",
    "LedgerRejectedError",
    "LedgerTransportError",
    "LedgerDecodeError",
    "ReconciliationError",
    "ZERO_ADDRESS",
    "OfferRecord",
    "DemandRecord",
    "MatchRecord",
    "parse_uint",
    "LedgerGateway",
    "Asset",
    "Demand",
    "Match",
    "MatchBinding",
    "MarketplaceConfig",
]
