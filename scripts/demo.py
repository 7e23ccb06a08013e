from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Allow running without installation by adding repo root to sys.path
sys.path.append(str(Path(__file__).resolve().parents[1]))

from marketplace.core import Asset, Demand, MarketplaceConfig, Match
from marketplace.ledger import InMemoryLedger
from marketplace.sim.aggregator import Aggregator


OWNER = "0x1111111111111111111111111111111111111111"
ASSET = "0xa5a5a5a5a5a5a5a5a5a5a5a5a5a5a5a5a5a5a5a5"
BUYER = "0xb0b0b0b0b0b0b0b0b0b0b0b0b0b0b0b0b0b0b0b0"
AGGREGATOR = "0xa66a66a66a66a66a66a66a66a66a66a66a66a66a"


def _show(label: str, asset: Asset, demand: Demand, match: Match) -> None:
    print(f"--- {label}")
    print(
        f"  offer  volume={asset.volume} remaining={asset.remaining_volume} "
        f"price={asset.price} matches={asset.matches_count}"
    )
    print(f"  demand volume={demand.volume} price={demand.price} matched={demand.matched}")
    print(f"  match  id={match.match_id} state={match.state.value} volume={match.volume} price={match.price}")


async def run_demo(volume: int, price: int, reject: bool) -> None:
    config = MarketplaceConfig(aggregator_address=AGGREGATOR)
    ledger = InMemoryLedger(config=config)
    ledger.register_identity(ASSET, OWNER)

    asset = Asset(ASSET)
    await asset.fetch_owner(ledger)
    await asset.create_offer(ledger, asset.owner, volume, price)
    # half the offer, but never zero for a one-unit offer
    demand = await Demand(BUYER).create_demand(ledger, max(volume // 2, 1), price + 1)

    proposals = await Aggregator(gateway=ledger, address=AGGREGATOR).run([ASSET], [BUYER])
    if not proposals:
        print("aggregator found nothing to propose")
        return
    match = proposals[0]
    _show("proposed", asset, demand, match)

    await match.accept_match(ledger, BUYER)
    # accept re-reads into fresh objects
    _show("accepted", match.asset, match.demand, match)

    asset, demand = match.asset, match.demand
    if reject:
        await match.reject_match(ledger, BUYER)
    else:
        await match.delete_match(ledger, OWNER)
    _show("rejected" if reject else "deleted", asset, demand, match)


def _positive_int(text: str) -> int:
    value = int(text)
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {text}")
    return value


def main() -> None:
    parser = argparse.ArgumentParser(description="Owner / buyer / aggregator walkthrough on the simulated ledger")
    parser.add_argument("--volume", type=_positive_int, default=100)
    parser.add_argument("--price", type=_positive_int, default=10)
    parser.add_argument("--reject", action="store_true", help="buyer rejects instead of the owner deleting")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    asyncio.run(run_demo(args.volume, args.price, args.reject))


if __name__ == "__main__":
    main()
