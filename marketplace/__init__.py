"""Public API for the marketplace package."""

from .core import (
    Asset,
    Demand,
    Match,
    MatchState,
    Role,
    LedgerGateway,
    LedgerError,
    LedgerRejectedError,
    LedgerTransportError,
    ReconciliationError,
    MarketplaceConfig,
)

__all__ = [
    "Asset",
    "Demand",
    "Match",
    "MatchState",
    "Role",
    "LedgerGateway",
    "LedgerError",
    "LedgerRejectedError",
    "LedgerTransportError",
    "ReconciliationError",
    "MarketplaceConfig",
]
