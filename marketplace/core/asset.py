from __future__ import annotations

import logging
from dataclasses import dataclass

from .gateway import LedgerGateway
from .records import ZERO_ADDRESS, OfferRecord, require_positive_terms


logger = logging.getLogger(__name__)


@dataclass
class Asset:
    """Local mirror of the marketplace offer posted for one asset."""

    asset: str
    owner: str = ZERO_ADDRESS
    volume: int = 0
    price: int = 0
    remaining_volume: int = 0
    matches_count: int = 0

    def __post_init__(self) -> None:
        if not self.asset:
            raise ValueError("Asset id must be a non-empty string")

    @property
    def offer_exists(self) -> bool:
        return self.volume > 0 and self.price > 0

    @property
    def matched(self) -> bool:
        return self.matches_count > 0

    async def fetch_owner(self, gateway: LedgerGateway) -> str:
        self.owner = await gateway.identity_owner(self.asset)
        return self.owner

    async def fetch_marketplace_offer(self, gateway: LedgerGateway) -> "Asset":
        # decode fully before touching any field
        offer = OfferRecord.from_raw(await gateway.offers(self.asset))
        self.volume = offer.volume
        self.price = offer.price
        self.remaining_volume = offer.remaining_volume
        self.matches_count = offer.matches
        return self

    async def create_offer(self, gateway: LedgerGateway, owner: str, volume: int, price: int) -> "Asset":
        require_positive_terms(volume, price)
        logger.debug("createOffer asset=%s volume=%d price=%d from=%s", self.asset, volume, price, owner)
        await gateway.create_offer(self.asset, volume, price, sender=owner)

        self.volume = volume
        self.remaining_volume = volume
        self.price = price
        return self

    async def cancel_offer(self, gateway: LedgerGateway, owner: str) -> "Asset":
        logger.debug("cancelOffer asset=%s from=%s", self.asset, owner)
        await gateway.cancel_offer(self.asset, sender=owner)

        self.volume = 0
        self.remaining_volume = 0
        self.price = 0
        return self
