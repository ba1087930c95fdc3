"""
Module: ledger_kernel.selectors.base
Responsibility: Abstract base class for all read-only query selectors.
Architecture position: Kernel > Selectors.  May import from db/, models/ and
    domain/.  MUST NOT import from services/ or outer layers.

Invariants enforced:
    - Read-only access: selectors MUST NOT call session.add(), delete(),
      commit() or flush().
    - DTO return convention: selectors return frozen dataclasses or plain
      values, never ORM instances.
    - Soft-deleted journals are excluded from every query (not_deleted()).
    - The caller owns the session and its transaction scope.  Aggregation
      reads run at the session's isolation level; stale reads relative to
      an in-flight write are acceptable.
"""

from abc import ABC
from decimal import Decimal
from typing import Any

from sqlalchemy import ColumnElement, false
from sqlalchemy.orm import Session

from ledger_kernel.models.journal import Journal


def not_deleted() -> ColumnElement[bool]:
    """WHERE clause excluding soft-deleted journals."""
    return Journal.deleted == false()


def to_decimal(value: Any) -> Decimal:
    """Coerce an aggregate result (None, int, float, Decimal) to Decimal."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


class BaseSelector(ABC):
    """
    Abstract base class for all selectors.

    Contract:
        Selectors accept a Session from the caller, perform read-only
        queries, and return DTOs or computed results.
    """

    def __init__(self, session: Session):
        self.session = session
