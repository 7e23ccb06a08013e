from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Union

from .errors import LedgerDecodeError


ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def parse_uint(value: Union[str, int], field_name: str = "value") -> int:
    """Parse a ledger uint (usually an integer string) into a Python int.

    Never goes through float, so large volumes and prices keep every digit.
    """
    if isinstance(value, bool):
        raise LedgerDecodeError(f"{field_name} must be an unsigned integer, got bool")
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        try:
            parsed = int(text, 16) if text.lower().startswith("0x") else int(text, 10)
        except ValueError as exc:
            raise LedgerDecodeError(f"{field_name} is not an integer: {value!r}") from exc
    else:
        raise LedgerDecodeError(f"{field_name} has unsupported type {type(value).__name__}")
    if parsed < 0:
        raise LedgerDecodeError(f"{field_name} must be non-negative, got {parsed}")
    return parsed


def require_positive_terms(volume: int, price: int) -> None:
    if volume is None or volume <= 0:
        raise ValueError("Volume must be a positive integer")
    if price is None or price <= 0:
        raise ValueError("Price must be a positive integer")


def _parse_bool(value: Any, field_name: str) -> bool:
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in ("true", "1"):
        return True
    if normalized in ("false", "0", ""):
        return False
    raise LedgerDecodeError(f"{field_name} is not a boolean: {value!r}")


def _require(values: Mapping[str, Any], key: str) -> Any:
    try:
        return values[key]
    except KeyError as exc:
        raise LedgerDecodeError(f"ledger record is missing {key!r}") from exc


@dataclass(frozen=True)
class OfferRecord:
    volume: int
    price: int
    remaining_volume: int
    matches: int

    @staticmethod
    def from_raw(values: Mapping[str, Any]) -> "OfferRecord":
        return OfferRecord(
            volume=parse_uint(_require(values, "volume"), "volume"),
            price=parse_uint(_require(values, "price"), "price"),
            remaining_volume=parse_uint(_require(values, "remainingVolume"), "remainingVolume"),
            matches=parse_uint(_require(values, "matches"), "matches"),
        )


@dataclass(frozen=True)
class DemandRecord:
    volume: int
    price: int
    is_matched: bool

    @staticmethod
    def from_raw(values: Mapping[str, Any]) -> "DemandRecord":
        return DemandRecord(
            volume=parse_uint(_require(values, "volume"), "volume"),
            price=parse_uint(_require(values, "price"), "price"),
            is_matched=_parse_bool(_require(values, "isMatched"), "isMatched"),
        )


@dataclass(frozen=True)
class MatchRecord:
    asset: str
    buyer: str
    volume: int
    price: int
    is_accepted: bool

    @property
    def exists(self) -> bool:
        return self.volume > 0 and self.price > 0

    @staticmethod
    def from_raw(values: Mapping[str, Any]) -> "MatchRecord":
        return MatchRecord(
            asset=str(_require(values, "asset")),
            buyer=str(_require(values, "buyer")),
            volume=parse_uint(_require(values, "volume"), "volume"),
            price=parse_uint(_require(values, "price"), "price"),
            is_accepted=_parse_bool(_require(values, "isAccepted"), "isAccepted"),
        )
