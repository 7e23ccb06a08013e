from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from marketplace.core import (
    Asset,
    Demand,
    LedgerDecodeError,
    LedgerError,
    LedgerRejectedError,
    LedgerTransportError,
    MarketplaceConfig,
    Match,
    ReconciliationError,
)
from marketplace.ledger import InMemoryLedger
from marketplace.sim.aggregator import Aggregator


logger = logging.getLogger(__name__)


# --- request bodies ---
class IdentityIn(BaseModel):
    asset: str = Field(..., min_length=1)
    owner: str = Field(..., min_length=1)


class OfferIn(BaseModel):
    owner: str = Field(..., min_length=1)
    volume: int
    price: int


class DemandIn(BaseModel):
    volume: int
    price: int


class ProposeIn(BaseModel):
    aggregator: str = Field(..., min_length=1)
    asset: str = Field(..., min_length=1)
    buyer: str = Field(..., min_length=1)
    volume: int
    price: int


class SenderIn(BaseModel):
    sender: str = Field(..., min_length=1)
    auto_fetch: bool = True


class AggregatorRunIn(BaseModel):
    asset_ids: List[str] = Field(default_factory=list)
    buyer_ids: List[str] = Field(default_factory=list)


# --- serializers ---
def asset_to_dict(asset: Asset) -> Dict[str, Any]:
    return {
        "asset": asset.asset,
        "owner": asset.owner,
        "volume": asset.volume,
        "price": asset.price,
        "remaining_volume": asset.remaining_volume,
        "matches_count": asset.matches_count,
        "offer_exists": asset.offer_exists,
        "matched": asset.matched,
    }


def demand_to_dict(demand: Demand) -> Dict[str, Any]:
    return {
        "buyer": demand.buyer,
        "volume": demand.volume,
        "price": demand.price,
        "matched": demand.matched,
        "demand_exists": demand.demand_exists,
    }


def match_to_dict(match: Match) -> Dict[str, Any]:
    return {
        "match_id": match.match_id,
        "state": match.state.value,
        "volume": match.volume,
        "price": match.price,
        "accepted": match.accepted,
        "match_exists": match.match_exists,
        "asset": asset_to_dict(match.asset) if match.asset is not None else None,
        "demand": demand_to_dict(match.demand) if match.demand is not None else None,
    }


def _error(status_code: int, kind: str, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": kind, "detail": str(exc)})


def create_app(config: MarketplaceConfig, ledger: Optional[InMemoryLedger] = None) -> FastAPI:
    """Build the HTTP service over a simulated ledger configured by ``config``."""
    ledger = ledger if ledger is not None else InMemoryLedger(config=config)

    app = FastAPI(title="Energy Marketplace")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.config = config
    app.state.ledger = ledger

    @app.exception_handler(ValueError)
    async def _on_value_error(request: Request, exc: ValueError):
        return _error(400, "invalid_request", exc)

    @app.exception_handler(LedgerRejectedError)
    async def _on_rejected(request: Request, exc: LedgerRejectedError):
        return _error(409, "ledger_rejected", exc)

    @app.exception_handler(LedgerTransportError)
    async def _on_transport(request: Request, exc: LedgerTransportError):
        return _error(503, "ledger_unavailable", exc)

    @app.exception_handler(ReconciliationError)
    async def _on_reconciliation(request: Request, exc: ReconciliationError):
        # the transaction itself went through
        logger.error("Reconciliation failed: %s", exc)
        return _error(502, "reconciliation_failed", exc)

    @app.exception_handler(LedgerDecodeError)
    async def _on_decode(request: Request, exc: LedgerDecodeError):
        logger.error("Malformed ledger record: %s", exc)
        return _error(502, "ledger_decode_failed", exc)

    @app.exception_handler(LedgerError)
    async def _on_ledger_error(request: Request, exc: LedgerError):
        return _error(502, "ledger_error", exc)

    # --- identities ---
    @app.post("/api/identities")
    async def api_register_identity(body: IdentityIn):
        ledger.register_identity(body.asset, body.owner)
        asset = Asset(body.asset)
        await asset.fetch_owner(ledger)
        return asset_to_dict(asset)

    # --- offers ---
    @app.get("/api/offers/{asset_id}")
    async def api_get_offer(asset_id: str):
        asset = Asset(asset_id)
        await asset.fetch_owner(ledger)
        await asset.fetch_marketplace_offer(ledger)
        return asset_to_dict(asset)

    @app.post("/api/offers/{asset_id}")
    async def api_create_offer(asset_id: str, body: OfferIn):
        asset = Asset(asset_id, owner=body.owner)
        await asset.create_offer(ledger, body.owner, body.volume, body.price)
        return asset_to_dict(asset)

    @app.delete("/api/offers/{asset_id}")
    async def api_cancel_offer(asset_id: str, owner: str):
        asset = await Asset(asset_id, owner=owner).fetch_marketplace_offer(ledger)
        await asset.cancel_offer(ledger, owner)
        return asset_to_dict(asset)

    # --- demands ---
    @app.get("/api/demands/{buyer}")
    async def api_get_demand(buyer: str):
        demand = await Demand(buyer).fetch_marketplace_demand(ledger)
        return demand_to_dict(demand)

    @app.post("/api/demands/{buyer}")
    async def api_create_demand(buyer: str, body: DemandIn):
        demand = await Demand(buyer).create_demand(ledger, body.volume, body.price)
        return demand_to_dict(demand)

    @app.delete("/api/demands/{buyer}")
    async def api_cancel_demand(buyer: str):
        demand = await Demand(buyer).fetch_marketplace_demand(ledger)
        await demand.cancel_demand(ledger)
        return demand_to_dict(demand)

    # --- matches ---
    @app.get("/api/matches")
    async def api_list_matches(auto_fetch: bool = False):
        result = []
        for match_id in ledger.match_ids():
            match = await Match(match_id).fetch_marketplace_match(ledger, auto_fetch)
            result.append(match_to_dict(match))
        return result

    @app.get("/api/matches/{match_id}")
    async def api_get_match(match_id: int, auto_fetch: bool = True):
        match = await Match(match_id).fetch_marketplace_match(ledger, auto_fetch)
        return match_to_dict(match)

    @app.post("/api/matches")
    async def api_propose_match(body: ProposeIn):
        asset = await Asset(body.asset).fetch_marketplace_offer(ledger)
        demand = await Demand(body.buyer).fetch_marketplace_demand(ledger)
        match = await Match(0).propose_match(ledger, body.aggregator, asset, demand, body.volume, body.price)
        return match_to_dict(match)

    @app.post("/api/matches/{match_id}/cancel")
    async def api_cancel_proposed_match(match_id: int, body: SenderIn):
        match = await Match(match_id).fetch_marketplace_match(ledger, False)
        await match.cancel_proposed_match(ledger, body.sender)
        return match_to_dict(match)

    @app.post("/api/matches/{match_id}/accept")
    async def api_accept_match(match_id: int, body: SenderIn):
        match = await Match(match_id).fetch_marketplace_match(ledger, False)
        await match.accept_match(ledger, body.sender, body.auto_fetch)
        return match_to_dict(match)

    @app.post("/api/matches/{match_id}/reject")
    async def api_reject_match(match_id: int, body: SenderIn):
        match = await Match(match_id).fetch_marketplace_match(ledger, True)
        asset, demand = match.asset, match.demand
        await match.reject_match(ledger, body.sender, body.auto_fetch)
        return {
            "match": match_to_dict(match),
            "asset": asset_to_dict(asset) if asset is not None else None,
            "demand": demand_to_dict(demand) if demand is not None else None,
        }

    @app.post("/api/matches/{match_id}/delete")
    async def api_delete_match(match_id: int, body: SenderIn):
        match = await Match(match_id).fetch_marketplace_match(ledger, True)
        asset, demand = match.asset, match.demand
        await match.delete_match(ledger, body.sender, body.auto_fetch)
        return {
            "match": match_to_dict(match),
            "asset": asset_to_dict(asset) if asset is not None else None,
            "demand": demand_to_dict(demand) if demand is not None else None,
        }

    # --- aggregator ---
    @app.post("/api/aggregator/run")
    async def api_run_aggregator(body: AggregatorRunIn):
        aggregator = Aggregator(gateway=ledger, address=config.aggregator_address)
        proposals = await aggregator.run(body.asset_ids, body.buyer_ids)
        return [match_to_dict(m) for m in proposals]

    @app.get("/api/roles/{address}")
    async def api_roles(address: str):
        return sorted(role.value for role in ledger.roles_of(address))

    @app.get("/api/transactions")
    async def api_transactions():
        return [
            {"number": tx.number, "method": tx.method, "sender": tx.sender, "args": tx.args}
            for tx in ledger.transactions[-200:]
        ]

    return app


_config = MarketplaceConfig()
logging.basicConfig(level=_config.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
app = create_app(_config)
