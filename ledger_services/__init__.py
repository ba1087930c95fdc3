"""Outer services layer: the LedgerEngine facade."""

from ledger_services.ledger_engine import LedgerEngine

__all__ = ["LedgerEngine"]
