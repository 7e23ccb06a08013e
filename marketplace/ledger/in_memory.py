from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Set

from ..core.config import MarketplaceConfig
from ..core.enums import Role
from ..core.errors import LedgerRejectedError
from ..core.records import ZERO_ADDRESS


logger = logging.getLogger(__name__)

Subscriber = Callable[[str, "Transaction"], None]


@dataclass
class _Offer:
    volume: int = 0
    price: int = 0
    remaining_volume: int = 0
    matches: int = 0


@dataclass
class _Demand:
    volume: int = 0
    price: int = 0
    is_matched: bool = False


@dataclass
class _Match:
    asset: str
    buyer: str
    volume: int
    price: int
    is_accepted: bool = False


@dataclass
class Transaction:
    number: int
    method: str
    sender: str
    args: Dict[str, Any]


def _require(condition: bool, reason: str) -> None:
    if not condition:
        raise LedgerRejectedError(reason)


@dataclass
class InMemoryLedger:
    """Simulated identity registry and marketplace contract.

    Implements the ``LedgerGateway`` protocol. Reads return web3-shaped
    records with integer-string numbers; unknown keys read as zeroed records.
    A failed ``require`` raises ``LedgerRejectedError`` and leaves state as is.
    """

    config: MarketplaceConfig = field(default_factory=MarketplaceConfig)
    transactions: List[Transaction] = field(default_factory=list)
    _owners: Dict[str, str] = field(default_factory=dict)
    _offers: Dict[str, _Offer] = field(default_factory=dict)
    _demands: Dict[str, _Demand] = field(default_factory=dict)
    _matches: Dict[int, _Match] = field(default_factory=dict)
    _next_match_id: int = 1
    _subscribers: Dict[str, List[Subscriber]] = field(default_factory=dict)

    @property
    def aggregator(self) -> str:
        return self.config.aggregator_address

    # --- Pub/Sub for external listeners ---
    def subscribe(self, event: str, handler: Subscriber) -> None:
        if event not in self._subscribers:
            self._subscribers[event] = []
        self._subscribers[event].append(handler)

    def unsubscribe(self, event: str, handler: Subscriber) -> None:
        handlers = self._subscribers.get(event)
        if not handlers:
            return
        try:
            handlers.remove(handler)
        except ValueError:
            pass

    def _notify(self, event: str, payload: Transaction) -> None:
        for handler in self._subscribers.get(event, []):
            handler(event, payload)

    def _confirm(self, method: str, sender: str, **args: Any) -> Dict[str, Any]:
        tx = Transaction(number=len(self.transactions) + 1, method=method, sender=sender, args=args)
        self.transactions.append(tx)
        logger.info("Confirmed %s #%d from %s %s", method, tx.number, sender, args)
        self._notify("transaction_confirmed", tx)
        receipt: Dict[str, Any] = {"transactionIndex": tx.number, "from": sender, "status": True, "method": method}
        receipt.update(args)
        return receipt

    # --- identity registry ---
    def register_identity(self, asset: str, owner: str) -> None:
        if not asset or not owner:
            raise ValueError("Asset and owner must be non-empty strings")
        self._owners[asset] = owner

    async def identity_owner(self, asset: str) -> str:
        return self._owners.get(asset, ZERO_ADDRESS)

    # --- reads ---
    async def offers(self, asset: str) -> Dict[str, Any]:
        offer = self._offers.get(asset, _Offer())
        return {
            "volume": str(offer.volume),
            "price": str(offer.price),
            "remainingVolume": str(offer.remaining_volume),
            "matches": str(offer.matches),
        }

    async def demands(self, buyer: str) -> Dict[str, Any]:
        demand = self._demands.get(buyer, _Demand())
        return {
            "volume": str(demand.volume),
            "price": str(demand.price),
            "isMatched": demand.is_matched,
        }

    async def matches(self, match_id: int) -> Dict[str, Any]:
        match = self._matches.get(match_id)
        if match is None:
            return {"asset": ZERO_ADDRESS, "buyer": ZERO_ADDRESS, "volume": "0", "price": "0", "isAccepted": False}
        return {
            "asset": match.asset,
            "buyer": match.buyer,
            "volume": str(match.volume),
            "price": str(match.price),
            "isAccepted": match.is_accepted,
        }

    def match_ids(self) -> List[int]:
        return sorted(self._matches)

    def roles_of(self, address: str) -> Set[Role]:
        roles: Set[Role] = set()
        if address == self.aggregator:
            roles.add(Role.AGGREGATOR)
        if address in self._owners.values():
            roles.add(Role.OWNER)
        if address in self._demands:
            roles.add(Role.BUYER)
        return roles

    # --- offers ---
    async def create_offer(self, asset: str, volume: int, price: int, *, sender: str) -> Dict[str, Any]:
        _require(self._owners.get(asset) == sender, "Only the asset owner can create an offer")
        _require(volume > 0, "Volume must be positive")
        _require(price > 0, "Price must be positive")
        current = self._offers.get(asset)
        _require(current is None or current.matches == 0, "Offer has active matches")
        self._offers[asset] = _Offer(volume=volume, price=price, remaining_volume=volume, matches=0)
        return self._confirm("createOffer", sender, asset=asset, volume=volume, price=price)

    async def cancel_offer(self, asset: str, *, sender: str) -> Dict[str, Any]:
        _require(self._owners.get(asset) == sender, "Only the asset owner can cancel an offer")
        offer = self._offers.get(asset)
        _require(offer is not None, "Offer does not exist")
        _require(offer.matches == 0, "Offer has active matches")
        del self._offers[asset]
        return self._confirm("cancelOffer", sender, asset=asset)

    # --- demands ---
    async def create_demand(self, volume: int, price: int, *, sender: str) -> Dict[str, Any]:
        _require(volume > 0, "Volume must be positive")
        _require(price > 0, "Price must be positive")
        current = self._demands.get(sender)
        _require(current is None or not current.is_matched, "Demand is already matched")
        self._demands[sender] = _Demand(volume=volume, price=price, is_matched=False)
        return self._confirm("createDemand", sender, volume=volume, price=price)

    async def cancel_demand(self, *, sender: str) -> Dict[str, Any]:
        demand = self._demands.get(sender)
        _require(demand is not None, "Demand does not exist")
        _require(not demand.is_matched, "Demand is already matched")
        del self._demands[sender]
        return self._confirm("cancelDemand", sender)

    # --- matches ---
    def _get_match(self, match_id: int) -> _Match:
        match = self._matches.get(match_id)
        _require(match is not None, f"Match {match_id} does not exist")
        return match

    async def propose_match(self, asset: str, buyer: str, volume: int, price: int, *, sender: str) -> Dict[str, Any]:
        _require(sender == self.aggregator, "Only the aggregator can propose matches")
        offer = self._offers.get(asset)
        demand = self._demands.get(buyer)
        _require(offer is not None, "Offer does not exist")
        _require(demand is not None, "Demand does not exist")
        _require(not demand.is_matched, "Demand is already matched")
        _require(0 < volume <= offer.remaining_volume, "Volume exceeds remaining offer volume")
        _require(price > 0, "Price must be positive")
        match_id = self._next_match_id
        self._next_match_id += 1
        self._matches[match_id] = _Match(asset=asset, buyer=buyer, volume=volume, price=price)
        return self._confirm(
            "proposeMatch", sender, matchId=match_id, asset=asset, buyer=buyer, volume=volume, price=price
        )

    async def cancel_proposed_match(self, match_id: int, *, sender: str) -> Dict[str, Any]:
        _require(sender == self.aggregator, "Only the aggregator can cancel a proposed match")
        match = self._get_match(match_id)
        _require(not match.is_accepted, "Match was already accepted")
        del self._matches[match_id]
        return self._confirm("cancelProposedMatch", sender, matchId=match_id)

    async def accept_match(self, match_id: int, *, sender: str) -> Dict[str, Any]:
        match = self._get_match(match_id)
        _require(sender == match.buyer, "Only the buyer can accept a match")
        _require(not match.is_accepted, "Match was already accepted")
        offer = self._offers.get(match.asset)
        demand = self._demands.get(match.buyer)
        _require(offer is not None and offer.remaining_volume >= match.volume, "Not enough remaining offer volume")
        _require(demand is not None and not demand.is_matched, "Demand is already matched")
        offer.remaining_volume -= match.volume
        offer.matches += 1
        demand.is_matched = True
        match.is_accepted = True
        return self._confirm("acceptMatch", sender, matchId=match_id)

    async def reject_match(self, match_id: int, *, sender: str) -> Dict[str, Any]:
        match = self._get_match(match_id)
        _require(sender == match.buyer, "Only the buyer can reject a match")
        self._remove_match(match_id, match)
        return self._confirm("rejectMatch", sender, matchId=match_id)

    async def delete_match(self, match_id: int, *, sender: str) -> Dict[str, Any]:
        match = self._get_match(match_id)
        _require(
            sender in (match.buyer, self._owners.get(match.asset)),
            "Only the buyer or the asset owner can delete a match",
        )
        self._remove_match(match_id, match)
        return self._confirm("deleteMatch", sender, matchId=match_id)

    def _remove_match(self, match_id: int, match: _Match) -> None:
        if match.is_accepted:
            # release what acceptance reserved
            offer: Optional[_Offer] = self._offers.get(match.asset)
            if offer is not None:
                offer.remaining_volume += match.volume
                offer.matches -= 1
            demand: Optional[_Demand] = self._demands.get(match.buyer)
            if demand is not None:
                demand.is_matched = False
        del self._matches[match_id]
