from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import pytest

from marketplace.core import ZERO_ADDRESS


class RecordingGateway:
    """Scriptable gateway that records every call in order."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, Tuple[Any, ...], Optional[str]]] = []
        self.owners: Dict[str, str] = {}
        self.offer_records: Dict[str, Dict[str, Any]] = {}
        self.demand_records: Dict[str, Dict[str, Any]] = {}
        self.match_records: Dict[int, Dict[str, Any]] = {}
        self.failures: Dict[str, Exception] = {}
        self.receipts: Dict[str, Dict[str, Any]] = {}

    def fail(self, method: str, exc: Exception) -> None:
        self.failures[method] = exc

    def names(self) -> List[str]:
        return [name for name, _, _ in self.calls]

    def _record(self, name: str, *args: Any, sender: Optional[str] = None) -> None:
        self.calls.append((name, args, sender))
        exc = self.failures.get(name)
        if exc is not None:
            raise exc

    def _receipt(self, name: str) -> Dict[str, Any]:
        return dict(self.receipts.get(name, {"status": True}))

    async def identity_owner(self, asset):
        self._record("identity_owner", asset)
        return self.owners.get(asset, ZERO_ADDRESS)

    async def offers(self, asset):
        self._record("offers", asset)
        return self.offer_records.get(asset, {"volume": "0", "price": "0", "remainingVolume": "0", "matches": "0"})

    async def demands(self, buyer):
        self._record("demands", buyer)
        return self.demand_records.get(buyer, {"volume": "0", "price": "0", "isMatched": False})

    async def matches(self, match_id):
        self._record("matches", match_id)
        return self.match_records.get(
            match_id,
            {"asset": ZERO_ADDRESS, "buyer": ZERO_ADDRESS, "volume": "0", "price": "0", "isAccepted": False},
        )

    async def create_offer(self, asset, volume, price, *, sender):
        self._record("create_offer", asset, volume, price, sender=sender)
        return self._receipt("create_offer")

    async def cancel_offer(self, asset, *, sender):
        self._record("cancel_offer", asset, sender=sender)
        return self._receipt("cancel_offer")

    async def create_demand(self, volume, price, *, sender):
        self._record("create_demand", volume, price, sender=sender)
        return self._receipt("create_demand")

    async def cancel_demand(self, *, sender):
        self._record("cancel_demand", sender=sender)
        return self._receipt("cancel_demand")

    async def propose_match(self, asset, buyer, volume, price, *, sender):
        self._record("propose_match", asset, buyer, volume, price, sender=sender)
        return self._receipt("propose_match")

    async def cancel_proposed_match(self, match_id, *, sender):
        self._record("cancel_proposed_match", match_id, sender=sender)
        return self._receipt("cancel_proposed_match")

    async def accept_match(self, match_id, *, sender):
        self._record("accept_match", match_id, sender=sender)
        return self._receipt("accept_match")

    async def reject_match(self, match_id, *, sender):
        self._record("reject_match", match_id, sender=sender)
        return self._receipt("reject_match")

    async def delete_match(self, match_id, *, sender):
        self._record("delete_match", match_id, sender=sender)
        return self._receipt("delete_match")


@pytest.fixture
def gateway() -> RecordingGateway:
    return RecordingGateway()
