"""
LedgerEngine -- transport-facing facade over the ledger kernel and reports.

Responsibility:
    Expose the logical calls the HTTP layer makes, each as one unit of
    work: parse transport-level inputs (fiscal year string, checked flag
    "0"/"1", month int, raw report-request mappings), open a transaction,
    run kernel services/selectors and report builders, commit.

Architecture position:
    Services layer -- above ``ledger_kernel`` and ``ledger_reports``.  The
    kernel never imports from here.  This is the only place that owns
    transaction boundaries (``session_scope``).

Invariants enforced:
    - One operation, one transaction.  update_checked's row lock, payroll
      gate and write commit or roll back together.
    - Typed kernel errors (VALIDATION / NOT_FOUND / CONFLICT) propagate
      unchanged after rollback.
    - ``StaleDataError`` becomes ``OptimisticLockError``.
    - Any other ``SQLAlchemyError`` is logged at ERROR with the traceback
      and re-raised as ``UnexpectedError``, whose message carries no
      internals.
    - No internal retries; retry is a caller policy.

Audit relevance:
    Every call binds ``fiscal_year`` (and ``journal_id`` where relevant)
    into the LogContext, so all log lines of the unit of work carry them.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Generator, Iterable, Mapping, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from ledger_config.schema import LedgerSettings
from ledger_kernel.db.engine import get_session_factory, init_engine_from_url, session_scope
from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.dtos import (
    AccountUsageCount,
    CheckedFilter,
    FiscalYearInfo,
    JournalInfo,
    MarkAsPaidResult,
    MonthFilter,
    MonthlyCheckStatus,
    PaymentStatus,
    PaymentStatusCheck,
    parse_checked_flag,
)
from ledger_kernel.domain.fiscal_calendar import validate_fiscal_year
from ledger_kernel.exceptions import (
    LedgerKernelError,
    OptimisticLockError,
    UnexpectedError,
)
from ledger_kernel.logging_config import LogContext, configure_logging, get_logger
from ledger_kernel.selectors.fiscal_year_selector import FiscalYearSelector
from ledger_kernel.selectors.journal_selector import JournalSelector
from ledger_kernel.selectors.ledger_selector import LedgerSelector
from ledger_kernel.selectors.payroll_selector import PayrollSelector
from ledger_kernel.services.journal_service import JournalService
from ledger_kernel.services.payroll_lock_gate import PayrollLockGate
from ledger_kernel.services.payroll_service import PayrollService
from ledger_kernel.services.reference_data_loader import ReferenceDataLoader
from ledger_reports.assembler import ReportAssembler
from ledger_reports.config import ReportingConfig
from ledger_reports.models import (
    CashBalanceReport,
    PayrollSummaryReport,
    ReportRequest,
    ReportResult,
)
from ledger_reports.service import ReportingService

logger = get_logger("services.ledger_engine")


class LedgerEngine:
    """
    Fiscal-year ledger and aggregation engine.

    Contract:
        Every public method runs in its own transaction and returns DTOs or
        report models.  Failures are LedgerKernelError subclasses.

    Non-goals:
        - No HTTP concerns (routing, status codes, JSON encoding).
        - No journal creation or master-data maintenance.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session] | None = None,
        clock: Clock | None = None,
        reporting_config: ReportingConfig | None = None,
    ):
        self._session_factory = session_factory
        self._clock = clock or SystemClock()
        self._reporting_config = reporting_config or ReportingConfig()

    @classmethod
    def from_settings(
        cls, settings: LedgerSettings, clock: Clock | None = None
    ) -> LedgerEngine:
        """Initialize logging and the database engine, then build the facade."""
        configure_logging(level=settings.logging.level)
        db = settings.database
        init_engine_from_url(
            db.url,
            echo=db.echo,
            pool_size=db.pool_size,
            max_overflow=db.max_overflow,
            pool_timeout=db.pool_timeout,
            pool_recycle=db.pool_recycle,
        )
        return cls(
            session_factory=get_session_factory(),
            clock=clock,
            reporting_config=ReportingConfig.from_dict(dict(settings.reporting)),
        )

    # ------------------------------------------------------------------
    # Unit of work
    # ------------------------------------------------------------------

    @contextmanager
    def _unit_of_work(
        self,
        operation: str,
        fiscal_year: str | None = None,
        journal_id: int | None = None,
    ) -> Generator[Session, None, None]:
        with LogContext.bind(
            fiscal_year=fiscal_year,
            journal_id=str(journal_id) if journal_id is not None else None,
        ):
            try:
                with session_scope(self._session_factory) as session:
                    yield session
            except LedgerKernelError:
                raise
            except StaleDataError as exc:
                logger.warning(
                    "optimistic_lock_conflict",
                    extra={"operation": operation},
                )
                raise OptimisticLockError(journal_id) from exc
            except SQLAlchemyError as exc:
                logger.error(
                    "unexpected_storage_error",
                    extra={"operation": operation},
                    exc_info=True,
                )
                raise UnexpectedError(operation) from exc

    # ------------------------------------------------------------------
    # Fiscal years and journals
    # ------------------------------------------------------------------

    def list_fiscal_years(self) -> list[FiscalYearInfo]:
        with self._unit_of_work("list_fiscal_years") as session:
            return FiscalYearSelector(session).list_fiscal_years()

    def list_check_statuses(self, fiscal_year: str) -> list[MonthlyCheckStatus]:
        """Per-month review progress, sparse, in fiscal order."""
        validate_fiscal_year(fiscal_year)
        with self._unit_of_work("list_check_statuses", fiscal_year) as session:
            return JournalSelector(session).list_check_statuses(fiscal_year)

    def update_checked(
        self, fiscal_year: str, journal_id: int, checked: str
    ) -> JournalInfo:
        """
        Set a journal's review flag ("0" / "1") behind the payroll gate.

        Raises:
            InvalidCheckedValueError, JournalNotFoundError,
            PayrollPeriodLockedError, OptimisticLockError.
        """
        validate_fiscal_year(fiscal_year)
        flag = parse_checked_flag(checked)
        with self._unit_of_work("update_checked", fiscal_year, journal_id) as session:
            return JournalService(session, self._clock).update_checked(
                journal_id, fiscal_year, flag
            )

    def delete_journals(self, fiscal_year: str, journal_ids: Sequence[int]) -> int:
        """Soft-delete journals; returns the number of rows affected."""
        validate_fiscal_year(fiscal_year)
        if not journal_ids:
            return 0
        with self._unit_of_work("delete_journals", fiscal_year) as session:
            return JournalService(session, self._clock).soft_delete(
                fiscal_year, journal_ids
            )

    # ------------------------------------------------------------------
    # Ledger counts
    # ------------------------------------------------------------------

    def count_by_account(self, fiscal_year: str) -> list[AccountUsageCount]:
        validate_fiscal_year(fiscal_year)
        with self._unit_of_work("count_by_account", fiscal_year) as session:
            table = ReferenceDataLoader(session).load()
            return LedgerSelector(session).count_by_account(fiscal_year, table)

    def count_ledgers(
        self,
        fiscal_year: str,
        account_code: str,
        month: object = None,
        checked: object = None,
        note: str | None = None,
    ) -> int:
        """
        Count journals in one ledger.

        Args:
            month: None / "all" for the whole year, or "04" / "4" / 4.
            checked: None / "all", "0" or "1".
        """
        validate_fiscal_year(fiscal_year)
        month_filter = MonthFilter.parse(month)
        checked_filter = CheckedFilter.parse(checked)
        with self._unit_of_work("count_ledgers", fiscal_year) as session:
            table = ReferenceDataLoader(session).load()
            return LedgerSelector(session).count_ledgers(
                fiscal_year,
                account_code,
                table,
                month=month_filter,
                checked=checked_filter,
                note=note,
            )

    # ------------------------------------------------------------------
    # Payroll
    # ------------------------------------------------------------------

    def check_payment_dates(
        self, fiscal_year: str, dates: Iterable[str]
    ) -> list[PaymentStatusCheck]:
        validate_fiscal_year(fiscal_year)
        with self._unit_of_work("check_payment_dates", fiscal_year) as session:
            return PayrollLockGate(session).check_dates(fiscal_year, dates)

    def get_payment_statuses(self, fiscal_year: str) -> list[PaymentStatus]:
        validate_fiscal_year(fiscal_year)
        with self._unit_of_work("get_payment_statuses", fiscal_year) as session:
            return PayrollSelector(session).payment_statuses(fiscal_year)

    def mark_as_paid(self, fiscal_year: str, month: int) -> MarkAsPaidResult:
        with self._unit_of_work("mark_as_paid", fiscal_year) as session:
            return PayrollService(session, self._clock).mark_as_paid(fiscal_year, month)

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    def run_reports(
        self,
        fiscal_year: str,
        requests: Sequence[Mapping[str, Any] | ReportRequest],
    ) -> list[ReportResult]:
        """Execute a batch of report requests; results are in request order."""
        validate_fiscal_year(fiscal_year)
        with self._unit_of_work("run_reports", fiscal_year) as session:
            assembler = ReportAssembler(self._reporting(session))
            return assembler.run(fiscal_year, requests)

    def cash_balance(self, fiscal_year: str) -> CashBalanceReport:
        validate_fiscal_year(fiscal_year)
        with self._unit_of_work("cash_balance", fiscal_year) as session:
            return self._reporting(session).cash_balance(fiscal_year)

    def payroll_summary(self, fiscal_year: str) -> PayrollSummaryReport:
        validate_fiscal_year(fiscal_year)
        with self._unit_of_work("payroll_summary", fiscal_year) as session:
            return self._reporting(session).payroll_summary(fiscal_year)

    def _reporting(self, session: Session) -> ReportingService:
        return ReportingService(session, config=self._reporting_config)
