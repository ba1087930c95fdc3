"""
Report Domain Models (``ledger_reports.models``).

Responsibility
--------------
Frozen dataclasses for report requests and report outputs: fixed
breakdowns (asset / expense / income, by month or by year), the generic
breakdown, cash balance, and payroll summary.

Architecture position
---------------------
**Reports layer** -- pure data definitions with ZERO I/O.

Invariants enforced
-------------------
* Report requests form a closed set of variants (``ReportRequest``).  A
  transport mapping is turned into a variant by ``parse_report_request``
  -- the single place where an unknown tag becomes
  ``UnknownReportTypeError``.
* All models are ``frozen=True``; all monetary fields are ``Decimal``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Union

from ledger_kernel.exceptions import InvalidReportRequestError, UnknownReportTypeError
from ledger_kernel.models.account import BucketKind


# =========================================================================
# Enums
# =========================================================================


class BreakdownKind(str, Enum):
    """Fixed breakdown variants and the bucket kind each one covers."""

    ASSET = "asset"
    EXPENSE = "expense"
    INCOME = "income"

    @property
    def bucket_kind(self) -> BucketKind:
        return {
            BreakdownKind.ASSET: BucketKind.ASSET,
            BreakdownKind.EXPENSE: BucketKind.EXPENSE,
            BreakdownKind.INCOME: BucketKind.REVENUE,
        }[self]


class TimeUnit(str, Enum):
    MONTH = "month"
    ANNUAL = "annual"


class BreakdownLevel(str, Enum):
    """Aggregation level of the generic breakdown."""

    ACCOUNT = "saimoku"
    CATEGORY = "kamoku"
    BUCKET = "kamoku_bunrui"


class BreakdownMode(str, Enum):
    """Which amounts the generic breakdown sums."""

    NET = "net"
    DEBIT = "karikata"
    CREDIT = "kasikata"


# =========================================================================
# Requests
# =========================================================================


@dataclass(frozen=True)
class FixedBreakdownRequest:
    """asset/expense/income breakdown per account, by month or by year."""

    kind: BreakdownKind
    time_unit: TimeUnit
    fiscal_year: str | None = None

    @property
    def report_type(self) -> str:
        suffix = "by-month" if self.time_unit is TimeUnit.MONTH else "by-year"
        return f"{self.kind.value}-{suffix}"


@dataclass(frozen=True)
class CustomBreakdownRequest:
    """Generic breakdown: one bucket x level x mode x time unit."""

    bucket_code: str
    level: BreakdownLevel
    mode: BreakdownMode
    time_unit: TimeUnit
    fiscal_year: str | None = None

    report_type = "breakdown"


@dataclass(frozen=True)
class CashBalanceRequest:
    fiscal_year: str | None = None

    report_type = "cash-balance"


ReportRequest = Union[FixedBreakdownRequest, CustomBreakdownRequest, CashBalanceRequest]


def with_fiscal_year(request: ReportRequest, fiscal_year: str) -> ReportRequest:
    """Stamp the fiscal year onto a request."""
    return replace(request, fiscal_year=fiscal_year)


_FIXED_TAGS: dict[str, FixedBreakdownRequest] = {
    f"{kind.value}-{suffix}": FixedBreakdownRequest(kind, unit)
    for kind in BreakdownKind
    for suffix, unit in (("by-month", TimeUnit.MONTH), ("by-year", TimeUnit.ANNUAL))
}

REPORT_TYPES: tuple[str, ...] = (*_FIXED_TAGS, "breakdown", "cash-balance")


def _enum_field(enum_cls, data: Mapping[str, Any], *names: str):
    value = next((data[n] for n in names if n in data), None)
    try:
        return enum_cls(value)
    except ValueError:
        raise InvalidReportRequestError(
            names[0], value, [m.value for m in enum_cls]
        ) from None


def parse_report_request(data: Mapping[str, Any], index: int | None = None) -> ReportRequest:
    """
    Turn a transport mapping into a request variant.

    The tag is ``data["type"]``.  Generic breakdown fields accept both the
    snake_case names and the camelCase names callers send
    (``bucketCode``/``kamokuBunruiCd``, ``breakdownLevel``,
    ``breakdownType``, ``timeUnit``).

    Raises:
        UnknownReportTypeError: missing or unknown tag.
        InvalidReportRequestError: a field value outside its allowed set.
    """
    report_type = data.get("type")
    if not isinstance(report_type, str):
        raise UnknownReportTypeError(report_type, index)
    if report_type in _FIXED_TAGS:
        return _FIXED_TAGS[report_type]
    if report_type == "cash-balance":
        return CashBalanceRequest()
    if report_type == "breakdown":
        bucket_code = next(
            (data[n] for n in ("bucket_code", "bucketCode", "kamokuBunruiCd") if n in data),
            None,
        )
        if not isinstance(bucket_code, str) or not bucket_code:
            raise InvalidReportRequestError("bucket_code", bucket_code)
        return CustomBreakdownRequest(
            bucket_code=bucket_code,
            level=_enum_field(BreakdownLevel, data, "level", "breakdownLevel"),
            mode=_enum_field(BreakdownMode, data, "mode", "breakdownType"),
            time_unit=_enum_field(TimeUnit, data, "time_unit", "timeUnit"),
        )
    raise UnknownReportTypeError(report_type, index)


# =========================================================================
# Results
# =========================================================================


@dataclass(frozen=True)
class MonthlyValue:
    month: int
    value: Decimal


@dataclass(frozen=True)
class MonthlyBreakdownItem:
    """One row of a monthly breakdown; values are in fiscal month order."""

    code: str
    name: str
    short_name: str | None
    values: tuple[MonthlyValue, ...]
    custom_fields: Mapping[str, Any] = field(default_factory=dict)

    @property
    def total(self) -> Decimal:
        return sum((v.value for v in self.values), Decimal("0"))


@dataclass(frozen=True)
class AnnualBreakdownItem:
    code: str
    name: str
    short_name: str | None
    value: Decimal
    custom_fields: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class BreakdownReport:
    """Result of a fixed or generic breakdown request."""

    fiscal_year: str
    request: FixedBreakdownRequest | CustomBreakdownRequest
    monthly: tuple[MonthlyBreakdownItem, ...] = ()
    annual: tuple[AnnualBreakdownItem, ...] = ()


@dataclass(frozen=True)
class CashBalanceEntry:
    category_code: str
    label: str
    amount: Decimal
    percentage: Decimal  # share of the total, 0..100, 1 decimal place


@dataclass(frozen=True)
class CashBalanceReport:
    fiscal_year: str
    entries: tuple[CashBalanceEntry, ...]
    total: Decimal


ReportResult = Union[BreakdownReport, CashBalanceReport]


@dataclass(frozen=True)
class PayrollLineItem:
    code: str
    name: str
    amount: Decimal


@dataclass(frozen=True)
class PayrollMonthSummary:
    """Payroll figures of one calendar year-month (YYYYMM)."""

    year_month: str
    base_pay: Decimal
    deductions: tuple[PayrollLineItem, ...]
    additions: tuple[PayrollLineItem, ...]

    @property
    def total_deductions(self) -> Decimal:
        return sum((d.amount for d in self.deductions), Decimal("0"))

    @property
    def total_additions(self) -> Decimal:
        return sum((a.amount for a in self.additions), Decimal("0"))

    @property
    def net_payment(self) -> Decimal:
        return self.base_pay - self.total_deductions + self.total_additions


@dataclass(frozen=True)
class PayrollSummaryReport:
    fiscal_year: str
    months: tuple[PayrollMonthSummary, ...]
