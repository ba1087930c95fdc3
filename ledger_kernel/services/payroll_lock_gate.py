"""
PayrollLockGate -- veto on review-state changes in paid payroll months.

Responsibility:
    Answer "is payroll for the month of this date finalized?" for one date
    or a batch of dates, and turn a positive answer into a typed veto.

Architecture position:
    Kernel > Services.  Reads PayrollPayment through PayrollSelector and
    never writes journal rows.  JournalService.update_checked composes
    ``ensure_unlocked`` as an explicit precondition inside its own unit of
    work; no caller needs to remember to call the gate.

Invariants enforced:
    - Once a month's payroll is paid, the checked flag of every journal
      dated in that month is frozen.  The veto is unconditional: setting a
      flag to the value it already has is refused too.
    - Batch checks cost one store read regardless of how many dates are
      given: distinct months are extracted, looked up with a single query,
      then fanned back out per input date.

Failure modes:
    - InvalidDateError for a malformed date in the input.
    - PayrollPeriodLockedError (code PAYROLL_PERIOD_LOCKED) from the
      ensure_* methods, naming the locked month(s).

Audit relevance:
    Every veto is logged at WARNING as ``payroll_period_locked``.
"""

from typing import Iterable

from sqlalchemy.orm import Session

from ledger_kernel.domain.dtos import PaymentStatusCheck
from ledger_kernel.domain.fiscal_calendar import fiscal_month_of
from ledger_kernel.exceptions import PayrollPeriodLockedError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.selectors.payroll_selector import PayrollSelector

logger = get_logger("services.payroll_lock_gate")


class PayrollLockGate:
    """
    Payroll finalization lookups and the review-state veto.

    Contract:
        Read-only.  Dates are YYYYMMDD strings; the month is the literal
        calendar month of the date.

    Non-goals:
        - Does NOT validate that a date falls inside the fiscal year.
    """

    def __init__(self, session: Session):
        self._selector = PayrollSelector(session)

    def check_date(self, fiscal_year: str, date: str) -> PaymentStatusCheck:
        return self.check_dates(fiscal_year, [date])[0]

    def check_dates(
        self, fiscal_year: str, dates: Iterable[str]
    ) -> list[PaymentStatusCheck]:
        """
        Batched payment-status check.

        Postconditions: one result per input date, in input order
            (duplicates preserved); exactly one query when dates is non-empty.
        """
        date_list = list(dates)
        months = [fiscal_month_of(d) for d in date_list]
        if not date_list:
            return []

        paid = self._selector.paid_months(fiscal_year, set(months))

        return [
            PaymentStatusCheck(
                date=d,
                fiscal_year=fiscal_year,
                month=m,
                is_paid=m in paid,
            )
            for d, m in zip(date_list, months)
        ]

    def locked_months(self, fiscal_year: str, dates: Iterable[str]) -> list[int]:
        """Sorted distinct months among dates whose payroll is paid."""
        return sorted(
            {c.month for c in self.check_dates(fiscal_year, dates) if c.is_paid}
        )

    def ensure_unlocked(
        self,
        fiscal_year: str,
        date: str,
        journal_id: int | None = None,
    ) -> None:
        """
        Raise if the payroll month of date is paid.

        Raises:
            PayrollPeriodLockedError: payroll for the month is finalized.
        """
        check = self.check_date(fiscal_year, date)
        if check.is_paid:
            logger.warning(
                "payroll_period_locked",
                extra={
                    "fiscal_year": fiscal_year,
                    "month": check.month,
                    "date": date,
                    "journal_id": journal_id,
                },
            )
            raise PayrollPeriodLockedError(fiscal_year, [check.month], journal_id)

    def ensure_dates_unlocked(self, fiscal_year: str, dates: Iterable[str]) -> None:
        """Raise naming every locked month among dates."""
        months = self.locked_months(fiscal_year, dates)
        if months:
            logger.warning(
                "payroll_period_locked",
                extra={"fiscal_year": fiscal_year, "months": months},
            )
            raise PayrollPeriodLockedError(fiscal_year, months)
