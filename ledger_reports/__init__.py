"""
Ledger Reports (``ledger_reports``).

Responsibility
--------------
Read-only reporting over the journal store: per-account breakdowns by
month and by year (asset, expense, income), the generic breakdown, cash
balance, payroll summary, and the batch assembler that answers several
report requests for one fiscal year at once.

Architecture position
---------------------
**Reports layer** -- above the kernel.  Reads through kernel selectors;
never writes.  Roll-ups are pure functions in ``breakdowns.py``.
"""

from ledger_reports.assembler import ReportAssembler
from ledger_reports.breakdowns import render_to_dict
from ledger_reports.config import ReportingConfig
from ledger_reports.models import (
    AnnualBreakdownItem,
    BreakdownKind,
    BreakdownLevel,
    BreakdownMode,
    BreakdownReport,
    CashBalanceEntry,
    CashBalanceReport,
    CashBalanceRequest,
    CustomBreakdownRequest,
    FixedBreakdownRequest,
    MonthlyBreakdownItem,
    MonthlyValue,
    PayrollLineItem,
    PayrollMonthSummary,
    PayrollSummaryReport,
    ReportRequest,
    ReportResult,
    TimeUnit,
    parse_report_request,
)
from ledger_reports.service import ReportingService

__all__ = [
    # Service
    "ReportingService",
    "ReportAssembler",
    # Config
    "ReportingConfig",
    # Requests
    "ReportRequest",
    "FixedBreakdownRequest",
    "CustomBreakdownRequest",
    "CashBalanceRequest",
    "BreakdownKind",
    "BreakdownLevel",
    "BreakdownMode",
    "TimeUnit",
    "parse_report_request",
    # Results
    "ReportResult",
    "BreakdownReport",
    "MonthlyBreakdownItem",
    "MonthlyValue",
    "AnnualBreakdownItem",
    "CashBalanceEntry",
    "CashBalanceReport",
    "PayrollLineItem",
    "PayrollMonthSummary",
    "PayrollSummaryReport",
    # Rendering
    "render_to_dict",
]
