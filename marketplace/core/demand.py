from __future__ import annotations

import logging
from dataclasses import dataclass

from .gateway import LedgerGateway
from .records import DemandRecord, require_positive_terms


logger = logging.getLogger(__name__)


@dataclass
class Demand:
    """Local mirror of a buyer's demand. The buyer signs its own transactions."""

    buyer: str
    volume: int = 0
    price: int = 0
    matched: bool = False

    def __post_init__(self) -> None:
        if not self.buyer:
            raise ValueError("Buyer id must be a non-empty string")

    @property
    def demand_exists(self) -> bool:
        return self.volume > 0 and self.price > 0

    async def fetch_marketplace_demand(self, gateway: LedgerGateway) -> "Demand":
        demand = DemandRecord.from_raw(await gateway.demands(self.buyer))
        self.matched = demand.is_matched
        self.volume = demand.volume
        self.price = demand.price
        return self

    async def create_demand(self, gateway: LedgerGateway, volume: int, price: int) -> "Demand":
        require_positive_terms(volume, price)
        logger.debug("createDemand volume=%d price=%d from=%s", volume, price, self.buyer)
        await gateway.create_demand(volume, price, sender=self.buyer)

        self.matched = False
        self.volume = volume
        self.price = price
        return self

    async def cancel_demand(self, gateway: LedgerGateway) -> "Demand":
        logger.debug("cancelDemand from=%s", self.buyer)
        await gateway.cancel_demand(sender=self.buyer)

        self.matched = False
        self.volume = 0
        self.price = 0
        return self
