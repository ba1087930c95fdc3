"""
Pure report builders (``ledger_reports.breakdowns``).

Responsibility
--------------
Roll per-account movements up into breakdowns, the cash balance and the
payroll summary.  Every function here is pure: inputs are DTOs from the
kernel selectors plus the ClassificationTable; outputs are frozen report
models.

Invariants enforced
-------------------
* Net figures follow the bucket side: L (debit-normal) is
  debit - credit, R (credit-normal) is credit - debit.  The caller never
  picks the sign.
* Monthly values are listed in fiscal order (April .. March).  For the
  same movements, summing a monthly breakdown's values gives exactly the
  annual breakdown's value for each row.
* Movements of account codes the table cannot classify are ignored.
"""

from __future__ import annotations

import dataclasses
from collections import defaultdict
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Iterable, Mapping

from ledger_kernel.domain.classification import AccountClassification, ClassificationTable
from ledger_kernel.domain.dtos import AccountMovement, JournalInfo
from ledger_kernel.domain.fiscal_calendar import FISCAL_MONTHS, fiscal_sort_key
from ledger_kernel.models.account import BalanceSide, BucketKind
from ledger_reports.config import (
    FISCAL_CARRYOVER,
    PAYROLL_ADDITION,
    PAYROLL_BASE,
    PAYROLL_DEDUCTION,
    ReportingConfig,
)
from ledger_reports.models import (
    AnnualBreakdownItem,
    BreakdownLevel,
    BreakdownMode,
    BreakdownReport,
    CashBalanceEntry,
    CashBalanceReport,
    CustomBreakdownRequest,
    FixedBreakdownRequest,
    MonthlyBreakdownItem,
    MonthlyValue,
    PayrollLineItem,
    PayrollMonthSummary,
    PayrollSummaryReport,
    TimeUnit,
)

ZERO = Decimal("0")
_PERCENT_STEP = Decimal("0.1")


def net_amount(side: BalanceSide, debit: Decimal, credit: Decimal) -> Decimal:
    """Signed balance of debit/credit totals for an account of the given side."""
    if BalanceSide(side) is BalanceSide.LEFT:
        return debit - credit
    return credit - debit


def _mode_amount(
    mode: BreakdownMode, side: BalanceSide, movement: AccountMovement
) -> Decimal:
    if mode is BreakdownMode.DEBIT:
        return movement.debit_total
    if mode is BreakdownMode.CREDIT:
        return movement.credit_total
    return net_amount(side, movement.debit_total, movement.credit_total)


# =========================================================================
# Fixed breakdowns (asset / expense / income)
# =========================================================================


def build_fixed_breakdown(
    request: FixedBreakdownRequest,
    fiscal_year: str,
    movements: Iterable[AccountMovement],
    table: ClassificationTable,
    zero_fill_months: bool = True,
) -> BreakdownReport:
    """
    Per-account net amounts for every bucket of the request's kind.

    Monthly rows list all twelve fiscal months when zero_fill_months is set,
    otherwise only months with movement.  Accounts without any movement in
    the fiscal year are omitted.
    """
    kind: BucketKind = request.kind.bucket_kind
    per_account: dict[str, dict[int | None, Decimal]] = defaultdict(
        lambda: defaultdict(lambda: ZERO)
    )
    entries: dict[str, AccountClassification] = {}

    for movement in movements:
        entry = table.get(movement.account_code)
        if entry is None or entry.bucket_kind != kind:
            continue
        entries[entry.account_code] = entry
        per_account[entry.account_code][movement.month] += net_amount(
            entry.side, movement.debit_total, movement.credit_total
        )

    codes = sorted(per_account)
    if request.time_unit is TimeUnit.ANNUAL:
        annual = tuple(
            AnnualBreakdownItem(
                code=code,
                name=entries[code].full_name,
                short_name=entries[code].short_name,
                value=sum(per_account[code].values(), ZERO),
                custom_fields=entries[code].account_custom_fields,
            )
            for code in codes
        )
        return BreakdownReport(fiscal_year=fiscal_year, request=request, annual=annual)

    monthly = tuple(
        MonthlyBreakdownItem(
            code=code,
            name=entries[code].full_name,
            short_name=entries[code].short_name,
            values=_month_values(per_account[code], zero_fill_months),
            custom_fields=entries[code].account_custom_fields,
        )
        for code in codes
    )
    return BreakdownReport(fiscal_year=fiscal_year, request=request, monthly=monthly)


def _month_values(
    by_month: Mapping[int | None, Decimal], zero_fill: bool
) -> tuple[MonthlyValue, ...]:
    if zero_fill:
        months: Iterable[int] = FISCAL_MONTHS
    else:
        months = sorted((m for m in by_month if m is not None), key=fiscal_sort_key)
    return tuple(MonthlyValue(month=m, value=by_month.get(m, ZERO)) for m in months)


# =========================================================================
# Generic breakdown
# =========================================================================


def build_custom_breakdown(
    request: CustomBreakdownRequest,
    fiscal_year: str,
    movements: Iterable[AccountMovement],
    table: ClassificationTable,
) -> BreakdownReport:
    """
    Generic breakdown over one bucket.

    Rows are grouped at the requested level (account, category or the
    bucket itself).  Monthly results are sparse: only months with movement
    appear.

    Raises:
        UnknownBucketError: request.bucket_code does not exist.
    """
    bucket = table.bucket(request.bucket_code)

    sums: dict[str, dict[int | None, Decimal]] = defaultdict(
        lambda: defaultdict(lambda: ZERO)
    )
    labels: dict[str, tuple[str, str | None, Mapping[str, Any]]] = {}

    for movement in movements:
        entry = table.get(movement.account_code)
        if entry is None or entry.bucket_code != bucket.code:
            continue
        if request.level is BreakdownLevel.ACCOUNT:
            key = entry.account_code
            labels[key] = (entry.full_name, entry.short_name, entry.account_custom_fields)
        elif request.level is BreakdownLevel.CATEGORY:
            key = entry.category_code
            labels[key] = (entry.category_name, None, entry.category_custom_fields)
        else:
            key = bucket.code
            labels[key] = (bucket.name, None, {})
        sums[key][movement.month] += _mode_amount(request.mode, bucket.side, movement)

    codes = sorted(sums)
    if request.time_unit is TimeUnit.ANNUAL:
        annual = tuple(
            AnnualBreakdownItem(
                code=code,
                name=labels[code][0],
                short_name=labels[code][1],
                value=sum(sums[code].values(), ZERO),
                custom_fields=labels[code][2],
            )
            for code in codes
        )
        return BreakdownReport(fiscal_year=fiscal_year, request=request, annual=annual)

    monthly = tuple(
        MonthlyBreakdownItem(
            code=code,
            name=labels[code][0],
            short_name=labels[code][1],
            values=_month_values(sums[code], zero_fill=False),
            custom_fields=labels[code][2],
        )
        for code in codes
    )
    return BreakdownReport(fiscal_year=fiscal_year, request=request, monthly=monthly)


# =========================================================================
# Cash balance
# =========================================================================


def cash_account_codes(table: ClassificationTable, config: ReportingConfig) -> list[str]:
    """Account codes under the configured cash categories of asset buckets."""
    return [
        entry.account_code
        for entry in table.accounts_in_categories(config.cash_category_codes)
        if entry.bucket_kind is BucketKind.ASSET
    ]


def build_cash_balance(
    fiscal_year: str,
    movements: Iterable[AccountMovement],
    table: ClassificationTable,
    config: ReportingConfig,
) -> CashBalanceReport:
    """
    Debit totals per cash-holding category, with each category's share.

    Only debit amounts are summed; credits to a cash account do not reduce
    its figure.

    Postconditions: one entry per configured cash category present in the
        chart of accounts, ordered by category code; total is the sum of
        the entries.
    """
    cash_codes = set(cash_account_codes(table, config))
    amounts: dict[str, Decimal] = {}
    for entry in table.accounts_in_categories(config.cash_category_codes):
        if entry.account_code in cash_codes:
            amounts.setdefault(entry.category_code, ZERO)

    for movement in movements:
        if movement.account_code not in cash_codes:
            continue
        entry = table.classify(movement.account_code)
        amounts[entry.category_code] += movement.debit_total

    total = sum(amounts.values(), ZERO)
    entries = tuple(
        CashBalanceEntry(
            category_code=code,
            label=table.categories[code].name,
            amount=amounts[code],
            percentage=_percentage(amounts[code], total),
        )
        for code in sorted(amounts)
    )
    return CashBalanceReport(fiscal_year=fiscal_year, entries=entries, total=total)


def _percentage(part: Decimal, total: Decimal) -> Decimal:
    if total == ZERO:
        return ZERO
    return (part * 100 / total).quantize(_PERCENT_STEP, rounding=ROUND_HALF_UP)


# =========================================================================
# Payroll summary
# =========================================================================


def payroll_account_codes(
    table: ClassificationTable, config: ReportingConfig
) -> list[str]:
    """Account codes tagged payroll_base / payroll_deduction / payroll_addition."""
    tags = {PAYROLL_BASE, PAYROLL_DEDUCTION, PAYROLL_ADDITION}
    return [
        code
        for code in table.account_codes()
        if _tag(table.accounts[code], config) in tags
    ]


def _tag(entry: AccountClassification | None, config: ReportingConfig) -> Any:
    if entry is None:
        return None
    return entry.account_custom_fields.get(config.payroll_category_field)


def build_payroll_summary(
    fiscal_year: str,
    journals: Iterable[JournalInfo],
    table: ClassificationTable,
    config: ReportingConfig,
) -> PayrollSummaryReport:
    """
    Base pay, deductions and additions per calendar year-month.

    The credit account's tag decides the row's role.  Rows whose debit
    account is tagged fiscal_carryover are skipped.  A payroll_base credit
    against a payroll_deduction debit is a year-end-adjustment refund and is
    reported as an addition.  Amounts are the debit amount of the journal.
    """
    base: dict[str, Decimal] = defaultdict(lambda: ZERO)
    deductions: dict[str, dict[str, PayrollLineItem]] = defaultdict(dict)
    additions: dict[str, dict[str, PayrollLineItem]] = defaultdict(dict)

    for journal in journals:
        credit = table.get(journal.credit_account_code)
        credit_tag = _tag(credit, config)
        if credit is None or credit_tag not in (
            PAYROLL_BASE, PAYROLL_DEDUCTION, PAYROLL_ADDITION
        ):
            continue
        debit_tag = _tag(table.get(journal.debit_account_code), config)
        if debit_tag == FISCAL_CARRYOVER:
            continue

        year_month = journal.date[0:6]
        amount = journal.debit_amount

        if credit_tag == PAYROLL_BASE and debit_tag == PAYROLL_DEDUCTION:
            _accumulate(
                additions[year_month],
                credit.account_code,
                f"年末調整還付 ({credit.full_name})",
                amount,
            )
        elif credit_tag == PAYROLL_BASE:
            base[year_month] += amount
        elif credit_tag == PAYROLL_DEDUCTION:
            _accumulate(deductions[year_month], credit.account_code, credit.full_name, amount)
        else:
            _accumulate(additions[year_month], credit.account_code, credit.full_name, amount)

    year_months = sorted(set(base) | set(deductions) | set(additions))
    return PayrollSummaryReport(
        fiscal_year=fiscal_year,
        months=tuple(
            PayrollMonthSummary(
                year_month=ym,
                base_pay=base.get(ym, ZERO),
                deductions=tuple(deductions.get(ym, {}).values()),
                additions=tuple(additions.get(ym, {}).values()),
            )
            for ym in year_months
        ),
    )


def _accumulate(
    items: dict[str, PayrollLineItem], code: str, name: str, amount: Decimal
) -> None:
    current = items.get(code)
    if current is None:
        items[code] = PayrollLineItem(code=code, name=name, amount=amount)
    else:
        items[code] = dataclasses.replace(current, amount=current.amount + amount)


# =========================================================================
# Rendering
# =========================================================================


def render_to_dict(obj: object) -> dict | list | str | int | float | bool | None:
    """
    Convert any report dataclass to plain data for JSON serialization.

    Handles:
    - Decimal -> str (preserving precision)
    - date/datetime -> ISO format string
    - Enum -> .value
    - Nested frozen dataclasses and mappings -> nested dicts
    - Tuples -> lists
    - Derived properties of payroll summaries (totals, net payment)
    """
    if obj is None:
        return None
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, (date, datetime)):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (list, tuple)):
        return [render_to_dict(item) for item in obj]
    if isinstance(obj, Mapping):
        return {str(k): render_to_dict(v) for k, v in obj.items()}
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        data = {
            f.name: render_to_dict(getattr(obj, f.name))
            for f in dataclasses.fields(obj)
        }
        if isinstance(obj, PayrollMonthSummary):
            data["total_deductions"] = render_to_dict(obj.total_deductions)
            data["total_additions"] = render_to_dict(obj.total_additions)
            data["net_payment"] = render_to_dict(obj.net_payment)
        report_type = getattr(type(obj), "report_type", None)
        if isinstance(report_type, str):
            data["type"] = report_type
        elif isinstance(obj, FixedBreakdownRequest):
            data["type"] = obj.report_type
        return data
    if isinstance(obj, (str, int, float, bool)):
        return obj
    return str(obj)
