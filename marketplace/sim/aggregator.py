from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List

from marketplace.core import Asset, Demand, LedgerGateway, Match


logger = logging.getLogger(__name__)


@dataclass
class Aggregator:
    """Pairs open demands with offers and proposes the pairs as matches.

    Each unmatched demand is given to the cheapest offer whose price does not
    exceed the demand price and which still has enough remaining volume (ties
    go to the offer with more remaining volume). Matches are proposed at the
    offer price for the full demanded volume.
    """

    gateway: LedgerGateway
    address: str

    async def _load(self, asset_ids: Iterable[str], buyer_ids: Iterable[str]):
        offers: List[Asset] = []
        for asset_id in asset_ids:
            asset = await Asset(asset_id).fetch_marketplace_offer(self.gateway)
            if asset.offer_exists and asset.remaining_volume > 0:
                offers.append(asset)
        demands: List[Demand] = []
        for buyer in buyer_ids:
            demand = await Demand(buyer).fetch_marketplace_demand(self.gateway)
            if demand.demand_exists and not demand.matched:
                demands.append(demand)
        return offers, demands

    async def run(self, asset_ids: Iterable[str], buyer_ids: Iterable[str]) -> List[Match]:
        offers, demands = await self._load(asset_ids, buyer_ids)
        # volume reserved by proposals made in this round
        reserved = {asset.asset: 0 for asset in offers}
        proposals: List[Match] = []
        for demand in sorted(demands, key=lambda d: (-d.price, d.buyer)):
            candidates = [
                a for a in offers
                if a.price <= demand.price and a.remaining_volume - reserved[a.asset] >= demand.volume
            ]
            if not candidates:
                logger.debug("No offer fits demand of %s (volume=%d price=%d)", demand.buyer, demand.volume, demand.price)
                continue
            best = min(candidates, key=lambda a: (a.price, -(a.remaining_volume - reserved[a.asset]), a.asset))
            match = await Match(0).propose_match(
                self.gateway, self.address, best, demand, demand.volume, best.price
            )
            reserved[best.asset] += demand.volume
            proposals.append(match)
            logger.info(
                "Proposed match %d: asset=%s buyer=%s volume=%d price=%d",
                match.match_id, best.asset, demand.buyer, match.volume, match.price,
            )
        return proposals
