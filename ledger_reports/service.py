"""
Reporting Service (``ledger_reports.service``).

Responsibility
--------------
Bridges the kernel's read selectors (``MovementSelector``) to the pure
builders in ``breakdowns.py``: fixed and generic breakdowns, the cash
balance and the payroll summary.  Read-only.

Architecture position
---------------------
**Reports layer**.  Constructor: ``session`` + optional
``ClassificationTable`` + ``config``.  When no table is given it is loaded
once per service instance through ``ReferenceDataLoader`` and shared by
every report the instance builds.

Failure modes
-------------
* ``UnknownBucketError`` for a generic breakdown naming an unknown bucket.
* Selector failures propagate unchanged; the caller's transaction scope
  decides what the caller sees.

Audit relevance
---------------
``report_generated`` is logged per report with its type and fiscal year.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from ledger_kernel.domain.classification import ClassificationTable
from ledger_kernel.logging_config import get_logger
from ledger_kernel.selectors.movement_selector import MovementSelector
from ledger_kernel.services.reference_data_loader import ReferenceDataLoader
from ledger_reports.breakdowns import (
    build_cash_balance,
    build_custom_breakdown,
    build_fixed_breakdown,
    build_payroll_summary,
    cash_account_codes,
    payroll_account_codes,
)
from ledger_reports.config import ReportingConfig
from ledger_reports.models import (
    BreakdownReport,
    CashBalanceReport,
    CustomBreakdownRequest,
    FixedBreakdownRequest,
    PayrollSummaryReport,
    TimeUnit,
)

logger = get_logger("reports.service")


class ReportingService:
    """Read-only report generation for one fiscal year at a time."""

    def __init__(
        self,
        session: Session,
        table: ClassificationTable | None = None,
        config: ReportingConfig | None = None,
    ):
        self._session = session
        self._table = table
        self._config = config or ReportingConfig.with_defaults()
        self._movements = MovementSelector(session)

    @property
    def table(self) -> ClassificationTable:
        if self._table is None:
            self._table = ReferenceDataLoader(self._session).load()
        return self._table

    def fixed_breakdown(
        self, fiscal_year: str, request: FixedBreakdownRequest
    ) -> BreakdownReport:
        """asset/expense/income breakdown by month or by year."""
        table = self.table
        codes = [
            entry.account_code
            for bucket in table.buckets_of_kind(request.kind.bucket_kind)
            for entry in table.accounts_in_bucket(bucket.code)
        ]
        movements = self._movements.account_movements(
            fiscal_year,
            by_month=request.time_unit is TimeUnit.MONTH,
            account_codes=codes,
        )
        report = build_fixed_breakdown(
            request,
            fiscal_year,
            movements,
            table,
            zero_fill_months=self._config.zero_fill_months,
        )
        self._log_generated(request.report_type, fiscal_year)
        return report

    def custom_breakdown(
        self, fiscal_year: str, request: CustomBreakdownRequest
    ) -> BreakdownReport:
        table = self.table
        bucket = table.bucket(request.bucket_code)
        codes = [entry.account_code for entry in table.accounts_in_bucket(bucket.code)]
        movements = self._movements.account_movements(
            fiscal_year,
            by_month=request.time_unit is TimeUnit.MONTH,
            account_codes=codes,
        )
        report = build_custom_breakdown(request, fiscal_year, movements, table)
        self._log_generated(request.report_type, fiscal_year)
        return report

    def cash_balance(self, fiscal_year: str) -> CashBalanceReport:
        """Debit totals per cash category with shares and a grand total."""
        table = self.table
        movements = self._movements.account_movements(
            fiscal_year,
            account_codes=cash_account_codes(table, self._config),
        )
        report = build_cash_balance(fiscal_year, movements, table, self._config)
        self._log_generated("cash-balance", fiscal_year)
        return report

    def payroll_summary(self, fiscal_year: str) -> PayrollSummaryReport:
        table = self.table
        journals = self._movements.journals_crediting(
            fiscal_year, payroll_account_codes(table, self._config)
        )
        report = build_payroll_summary(fiscal_year, journals, table, self._config)
        self._log_generated("payroll-summary", fiscal_year)
        return report

    def _log_generated(self, report_type: str, fiscal_year: str) -> None:
        logger.info(
            "report_generated",
            extra={"report_type": report_type, "fiscal_year": fiscal_year},
        )
