"""Ledger gateways usable by the marketplace entities."""

from .in_memory import InMemoryLedger, Transaction

__all__ = ["InMemoryLedger", "Transaction"]
