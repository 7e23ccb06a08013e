from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .asset import Asset
from .demand import Demand
from .enums import MatchState
from .errors import LedgerError, ReconciliationError
from .gateway import LedgerGateway
from .records import MatchRecord, parse_uint, require_positive_terms


logger = logging.getLogger(__name__)


@dataclass
class MatchBinding:
    """Terms of a populated match. A match without a binding is Empty."""

    asset: Asset
    demand: Demand
    volume: int
    price: int
    accepted: bool = False


@dataclass
class Match:
    """Local mirror of one marketplace match.

    State is derived from ``binding``: ``None`` is EMPTY, otherwise PROPOSED or
    ACCEPTED depending on ``binding.accepted``. The attached Asset and Demand
    are held by reference; reject and delete refresh them in place before the
    binding is dropped, so callers holding those references still observe the
    post-transaction ledger state.
    """

    match_id: int
    binding: Optional[MatchBinding] = None

    def __post_init__(self) -> None:
        if self.match_id is None or self.match_id < 0:
            raise ValueError("Match id must be a non-negative integer")

    # --- derived views ---
    @property
    def state(self) -> MatchState:
        if self.binding is None:
            return MatchState.EMPTY
        return MatchState.ACCEPTED if self.binding.accepted else MatchState.PROPOSED

    @property
    def match_exists(self) -> bool:
        return self.volume > 0 and self.price > 0

    @property
    def asset(self) -> Optional[Asset]:
        return self.binding.asset if self.binding is not None else None

    @property
    def demand(self) -> Optional[Demand]:
        return self.binding.demand if self.binding is not None else None

    @property
    def volume(self) -> int:
        return self.binding.volume if self.binding is not None else 0

    @property
    def price(self) -> int:
        return self.binding.price if self.binding is not None else 0

    @property
    def accepted(self) -> bool:
        return self.binding.accepted if self.binding is not None else False

    # --- reads ---
    async def fetch_marketplace_match(self, gateway: LedgerGateway, auto_fetch: bool = True) -> "Match":
        record = MatchRecord.from_raw(await gateway.matches(self.match_id))
        if not record.exists:
            self._reset()
            return self

        asset = Asset(record.asset)
        demand = Demand(record.buyer)
        if auto_fetch:
            await asset.fetch_marketplace_offer(gateway)
            await demand.fetch_marketplace_demand(gateway)

        self.binding = MatchBinding(
            asset=asset,
            demand=demand,
            volume=record.volume,
            price=record.price,
            accepted=record.is_accepted,
        )
        return self

    # --- aggregator ---
    async def propose_match(
        self,
        gateway: LedgerGateway,
        aggregator: str,
        asset: Asset,
        demand: Demand,
        volume: int,
        price: int,
    ) -> "Match":
        require_positive_terms(volume, price)
        logger.debug(
            "proposeMatch match=%d asset=%s buyer=%s volume=%d price=%d from=%s",
            self.match_id, asset.asset, demand.buyer, volume, price, aggregator,
        )
        receipt = await gateway.propose_match(asset.asset, demand.buyer, volume, price, sender=aggregator)

        self.binding = MatchBinding(asset=asset, demand=demand, volume=volume, price=price, accepted=False)

        # the ledger assigns ids; adopt it when the receipt reports one
        assigned = receipt.get("matchId") if receipt else None
        if assigned is not None:
            try:
                self.match_id = parse_uint(assigned, "matchId")
            except LedgerError as exc:
                logger.warning("Unreadable matchId in proposeMatch receipt: %s", exc)
                raise ReconciliationError(self.match_id, "proposeMatch", exc) from exc
        return self

    async def cancel_proposed_match(self, gateway: LedgerGateway, aggregator: str) -> "Match":
        logger.debug("cancelProposedMatch match=%d from=%s", self.match_id, aggregator)
        await gateway.cancel_proposed_match(self.match_id, sender=aggregator)

        self._reset()
        return self

    # --- buyer / owner ---
    async def accept_match(self, gateway: LedgerGateway, buyer: str, auto_fetch: bool = True) -> "Match":
        logger.debug("acceptMatch match=%d from=%s", self.match_id, buyer)
        await gateway.accept_match(self.match_id, sender=buyer)

        if self.binding is not None:
            self.binding.accepted = True
        if auto_fetch:
            try:
                await self.fetch_marketplace_match(gateway, True)
            except Exception as exc:
                logger.warning("Refresh after acceptMatch failed for match %d: %s", self.match_id, exc)
                raise ReconciliationError(self.match_id, "acceptMatch", exc) from exc
        return self

    async def reject_match(self, gateway: LedgerGateway, buyer: str, auto_fetch: bool = True) -> "Match":
        logger.debug("rejectMatch match=%d from=%s", self.match_id, buyer)
        await gateway.reject_match(self.match_id, sender=buyer)

        if auto_fetch:
            await self._reconcile_attached(gateway, "rejectMatch")
        self._reset()
        return self

    async def delete_match(self, gateway: LedgerGateway, buyer_or_owner: str, auto_fetch: bool = True) -> "Match":
        logger.debug("deleteMatch match=%d from=%s", self.match_id, buyer_or_owner)
        await gateway.delete_match(self.match_id, sender=buyer_or_owner)

        if auto_fetch:
            await self._reconcile_attached(gateway, "deleteMatch")
        self._reset()
        return self

    # --- helpers ---
    async def _reconcile_attached(self, gateway: LedgerGateway, operation: str) -> None:
        # must run before _reset: afterwards the ledger record is gone and the
        # references held here are the only way back to the offer and demand
        if self.binding is None:
            return
        try:
            await self.binding.asset.fetch_marketplace_offer(gateway)
            await self.binding.demand.fetch_marketplace_demand(gateway)
        except Exception as exc:
            logger.warning("Refresh after %s failed for match %d: %s", operation, self.match_id, exc)
            raise ReconciliationError(self.match_id, operation, exc) from exc

    def _reset(self) -> None:
        self.binding = None
