from __future__ import annotations

import pytest

from marketplace.core import (
    ZERO_ADDRESS,
    Asset,
    LedgerDecodeError,
    LedgerRejectedError,
    LedgerTransportError,
)


OWNER = "0x1111111111111111111111111111111111111111"


def _snapshot(asset: Asset):
    return (asset.owner, asset.volume, asset.price, asset.remaining_volume, asset.matches_count)


def test_fresh_asset_has_no_offer():
    a = Asset("A1")
    assert a.owner == ZERO_ADDRESS
    assert (a.volume, a.price, a.remaining_volume, a.matches_count) == (0, 0, 0, 0)
    assert a.offer_exists is False
    assert a.matched is False


def test_asset_requires_id():
    with pytest.raises(ValueError):
        Asset("")


@pytest.mark.asyncio
async def test_fetch_owner(gateway):
    gateway.owners["A1"] = OWNER
    a = Asset("A1")
    assert await a.fetch_owner(gateway) == OWNER
    assert a.owner == OWNER
    assert gateway.names() == ["identity_owner"]


@pytest.mark.asyncio
async def test_fetch_offer_parses_integer_strings_without_precision_loss(gateway):
    big = 10**30 + 7
    gateway.offer_records["A1"] = {
        "volume": str(big),
        "price": "12",
        "remainingVolume": str(big - 1),
        "matches": "2",
    }
    a = await Asset("A1").fetch_marketplace_offer(gateway)
    assert a.volume == big
    assert a.remaining_volume == big - 1
    assert a.price == 12
    assert a.matches_count == 2
    assert a.offer_exists and a.matched


@pytest.mark.asyncio
async def test_fetch_offer_discards_local_values_and_is_idempotent(gateway):
    gateway.offer_records["A1"] = {"volume": "40", "price": "3", "remainingVolume": "40", "matches": "0"}
    a = Asset("A1", volume=999, price=999, remaining_volume=999, matches_count=9)
    await a.fetch_marketplace_offer(gateway)
    first = _snapshot(a)
    await a.fetch_marketplace_offer(gateway)
    assert _snapshot(a) == first == (ZERO_ADDRESS, 40, 3, 40, 0)


@pytest.mark.asyncio
async def test_malformed_offer_record_leaves_fields_unchanged(gateway):
    gateway.offer_records["A1"] = {"volume": "ten", "price": "3", "remainingVolume": "1", "matches": "0"}
    a = Asset("A1", volume=5, price=5, remaining_volume=5)
    before = _snapshot(a)
    with pytest.raises(LedgerDecodeError):
        await a.fetch_marketplace_offer(gateway)
    assert _snapshot(a) == before


@pytest.mark.asyncio
async def test_create_then_cancel_offer(gateway):
    a = Asset("A1")
    await a.create_offer(gateway, OWNER, 100, 10)
    assert (a.volume, a.price, a.remaining_volume) == (100, 10, 100)
    assert a.offer_exists
    assert gateway.calls[-1] == ("create_offer", ("A1", 100, 10), OWNER)

    a.matches_count = 3
    await a.cancel_offer(gateway, OWNER)
    assert (a.volume, a.price, a.remaining_volume) == (0, 0, 0)
    assert a.offer_exists is False
    assert gateway.calls[-1] == ("cancel_offer", ("A1",), OWNER)


@pytest.mark.asyncio
async def test_create_offer_is_not_reread(gateway):
    a = Asset("A1")
    await a.create_offer(gateway, OWNER, 100, 10)
    assert gateway.names() == ["create_offer"]


@pytest.mark.asyncio
@pytest.mark.parametrize("volume,price", [(0, 10), (100, 0), (-1, 10)])
async def test_create_offer_rejects_non_positive_terms_before_sending(gateway, volume, price):
    a = Asset("A1")
    with pytest.raises(ValueError):
        await a.create_offer(gateway, OWNER, volume, price)
    assert gateway.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("exc", [LedgerRejectedError("not owner"), LedgerTransportError("offline")])
async def test_failed_create_offer_leaves_fields_unchanged(gateway, exc):
    gateway.fail("create_offer", exc)
    a = Asset("A1", owner=OWNER, volume=7, price=2, remaining_volume=5, matches_count=1)
    before = _snapshot(a)
    with pytest.raises(type(exc)):
        await a.create_offer(gateway, OWNER, 100, 10)
    assert _snapshot(a) == before


@pytest.mark.asyncio
async def test_failed_cancel_offer_leaves_fields_unchanged(gateway):
    gateway.fail("cancel_offer", LedgerRejectedError("has matches"))
    a = Asset("A1", volume=7, price=2, remaining_volume=5, matches_count=1)
    before = _snapshot(a)
    with pytest.raises(LedgerRejectedError):
        await a.cancel_offer(gateway, OWNER)
    assert _snapshot(a) == before
