from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable


Receipt = Mapping[str, Any]


@runtime_checkable
class LedgerGateway(Protocol):
    """Async access to the identity registry and the marketplace contract.

    Reads return web3-shaped mappings whose numeric fields may be integer
    strings. Writes are executed from ``sender`` and resolve only once the
    ledger confirms them; a revert raises ``LedgerRejectedError`` and a
    connectivity problem raises ``LedgerTransportError``.
    """

    # --- reads ---
    async def identity_owner(self, asset: str) -> str: ...

    async def offers(self, asset: str) -> Mapping[str, Any]: ...

    async def demands(self, buyer: str) -> Mapping[str, Any]: ...

    async def matches(self, match_id: int) -> Mapping[str, Any]: ...

    # --- writes ---
    async def create_offer(self, asset: str, volume: int, price: int, *, sender: str) -> Receipt: ...

    async def cancel_offer(self, asset: str, *, sender: str) -> Receipt: ...

    async def create_demand(self, volume: int, price: int, *, sender: str) -> Receipt: ...

    async def cancel_demand(self, *, sender: str) -> Receipt: ...

    async def propose_match(self, asset: str, buyer: str, volume: int, price: int, *, sender: str) -> Receipt: ...

    async def cancel_proposed_match(self, match_id: int, *, sender: str) -> Receipt: ...

    async def accept_match(self, match_id: int, *, sender: str) -> Receipt: ...

    async def reject_match(self, match_id: int, *, sender: str) -> Receipt: ...

    async def delete_match(self, match_id: int, *, sender: str) -> Receipt: ...
