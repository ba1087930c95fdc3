"""
DTOs -- immutable data crossing the selector/service boundary.

Responsibility:
    Frozen dataclasses returned by selectors and services, plus the explicit
    filter types that replace magic sentinel strings ("all") on the read path.

Architecture position:
    Kernel > Domain -- pure, zero I/O.  ``from_model()`` converters exist at
    the persistence boundary and are only called from selectors/services.

Invariants enforced:
    - Domain logic accepts/returns DTOs, never ORM entities.
    - Monetary figures are Decimal.
    - unchecked_count and all_checked are derived, never stored.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any

from ledger_kernel.exceptions import InvalidCheckedValueError, InvalidReportRequestError

if TYPE_CHECKING:
    from ledger_kernel.models.journal import Journal as JournalModel

# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------

MONTH_FILTER_ALL = "all"


@dataclass(frozen=True)
class MonthFilter:
    """
    Optional month restriction.

    ``month is None`` selects the whole fiscal year.  The transport-level
    sentinel "all" is parsed here and goes no further.
    """

    month: int | None = None

    @classmethod
    def all_months(cls) -> MonthFilter:
        return cls(None)

    @classmethod
    def parse(cls, value: object) -> MonthFilter:
        """Parse None, "all", "4", "04" or 4."""
        if value is None or value == MONTH_FILTER_ALL:
            return cls(None)
        if isinstance(value, int) and not isinstance(value, bool):
            month = value
        elif isinstance(value, str) and value.isdigit() and 1 <= len(value) <= 2:
            month = int(value)
        else:
            raise InvalidReportRequestError("month", value, ["all", "1-12"])
        if not 1 <= month <= 12:
            raise InvalidReportRequestError("month", value, ["all", "1-12"])
        return cls(month)

    @property
    def is_all(self) -> bool:
        return self.month is None


class CheckedFilter(str, Enum):
    """Optional review-state restriction."""

    ALL = "all"
    CHECKED = "1"
    UNCHECKED = "0"

    @classmethod
    def parse(cls, value: object) -> CheckedFilter:
        if value is None or value == "" or value == "all":
            return cls.ALL
        if value in ("0", "1"):
            return cls(value)
        raise InvalidCheckedValueError(value)


def parse_checked_flag(value: object) -> bool:
    """Transport checked flag ("0" / "1") to bool."""
    if value == "1":
        return True
    if value == "0":
        return False
    raise InvalidCheckedValueError(value)


# ---------------------------------------------------------------------------
# Fiscal years and journals
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FiscalYearInfo:
    fiscal_year: str
    label: str
    start_date: str  # ISO yyyy-mm-dd
    end_date: str
    is_current: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "nendo": self.fiscal_year,
            "label": self.label,
            "startDate": self.start_date,
            "endDate": self.end_date,
            "isCurrent": self.is_current,
        }


@dataclass(frozen=True)
class JournalInfo:
    """Read-only view of one journal row."""

    id: int
    fiscal_year: str
    date: str
    debit_account_code: str
    debit_amount: Decimal
    credit_account_code: str
    credit_amount: Decimal
    note: str | None
    checked: bool
    deleted: bool
    version: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, model: JournalModel) -> JournalInfo:
        return cls(
            id=model.id,
            fiscal_year=model.fiscal_year,
            date=model.date,
            debit_account_code=model.debit_account_code,
            debit_amount=Decimal(model.debit_amount),
            credit_account_code=model.credit_account_code,
            credit_amount=Decimal(model.credit_amount),
            note=model.note,
            checked=model.checked,
            deleted=model.deleted,
            version=model.version,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    @property
    def checked_flag(self) -> str:
        return "1" if self.checked else "0"


@dataclass(frozen=True)
class MonthlyCheckStatus:
    """Review progress of one calendar month."""

    month: int
    total_count: int
    checked_count: int

    @property
    def unchecked_count(self) -> int:
        return self.total_count - self.checked_count

    @property
    def all_checked(self) -> bool:
        return self.unchecked_count == 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "month": self.month,
            "totalCount": self.total_count,
            "checkedCount": self.checked_count,
            "uncheckedCount": self.unchecked_count,
            "allChecked": self.all_checked,
        }


@dataclass(frozen=True)
class AccountUsageCount:
    """One row of the per-account usage count."""

    account_code: str
    full_name: str
    short_name: str | None
    kana_name: str | None
    category_code: str
    category_name: str
    bucket_code: str
    bucket_name: str
    count: int
    checked_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "saimoku_cd": self.account_code,
            "saimoku_full_name": self.full_name,
            "saimoku_ryaku_name": self.short_name,
            "saimoku_kana_name": self.kana_name,
            "kamoku_cd": self.category_code,
            "kamoku_full_name": self.category_name,
            "kamoku_bunrui_cd": self.bucket_code,
            "kamoku_bunrui_name": self.bucket_name,
            "count": self.count,
            "checked_count": self.checked_count,
        }


@dataclass(frozen=True)
class AccountMovement:
    """
    Summed journal amounts for one account code.

    debit_total is the sum of amounts where the account is on the debit
    side, credit_total where it is on the credit side.  month is None for
    whole-year rows.
    """

    account_code: str
    month: int | None
    debit_total: Decimal
    credit_total: Decimal


# ---------------------------------------------------------------------------
# Payroll
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PaymentStatusCheck:
    """Gate answer for one date."""

    date: str
    fiscal_year: str
    month: int
    is_paid: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "isPaid": self.is_paid,
            "nendo": self.fiscal_year,
            "month": self.month,
        }


@dataclass(frozen=True)
class PaymentStatus:
    month: int
    is_paid: bool
    created_at: datetime | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "month": self.month,
            "isPaid": self.is_paid,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class MarkAsPaidResult:
    fiscal_year: str
    month: int
    is_paid: bool
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "nendo": self.fiscal_year,
            "month": self.month,
            "isPaid": self.is_paid,
            "createdAt": self.created_at.isoformat(),
        }
