"""
PayrollService -- payroll finalization.

Responsibility:
    Mark a month of a fiscal year as paid once every journal of that month
    has been reviewed.

Architecture position:
    Kernel > Services -- imperative shell.  Flush-only.

Invariants enforced:
    - At most one PayrollPayment row per (fiscal_year, month): the row is
      upserted under a row lock; a concurrent insert that loses the unique
      constraint surfaces as PayrollAlreadyPaidError.
    - A month can only be paid when it has no unchecked, non-deleted
      journals.  Every live journal of the month is locked FOR UPDATE,
      whatever its checked flag, and the unchecked ones are counted among
      the locked rows.  A concurrent update_checked therefore either
      commits first (and is counted) or waits and then sees the month as
      paid.
    - Months 1..3 of fiscal year N are January..March of calendar year N+1.

Failure modes:
    - InvalidFiscalYearError / InvalidMonthError for malformed input.
    - PayrollAlreadyPaidError (ALREADY_PAID).
    - UncheckedJournalsExistError (UNCHECKED_JOURNALS_EXIST) with the count.

Audit relevance:
    ``payroll_marked_paid`` is logged at INFO; refusals at WARNING.
"""

from sqlalchemy import false, select
from sqlalchemy.exc import IntegrityError

from ledger_kernel.domain.dtos import MarkAsPaidResult
from ledger_kernel.domain.fiscal_calendar import (
    validate_fiscal_year,
    validate_month,
    year_month_prefix,
)
from ledger_kernel.exceptions import (
    PayrollAlreadyPaidError,
    UncheckedJournalsExistError,
)
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.journal import Journal
from ledger_kernel.models.payroll_payment import PayrollPayment
from ledger_kernel.services.base import BaseService

logger = get_logger("services.payroll")


class PayrollService(BaseService):
    """Payroll finalization writes."""

    def mark_as_paid(self, fiscal_year: str, month: int) -> MarkAsPaidResult:
        """
        Finalize payroll for a month.

        Raises:
            InvalidMonthError: month outside 1..12.
            PayrollAlreadyPaidError: month already paid.
            UncheckedJournalsExistError: unreviewed journals remain.
        """
        validate_fiscal_year(fiscal_year)
        validate_month(month)

        payment = self._get_payment_for_update(fiscal_year, month)
        if payment is not None and payment.is_paid:
            logger.warning(
                "payroll_already_paid",
                extra={"fiscal_year": fiscal_year, "month": month},
            )
            raise PayrollAlreadyPaidError(fiscal_year, month)

        unchecked = [
            journal_id
            for journal_id, checked in self._lock_month_journals(fiscal_year, month)
            if not checked
        ]
        if unchecked:
            logger.warning(
                "payroll_unchecked_journals",
                extra={
                    "fiscal_year": fiscal_year,
                    "month": month,
                    "unchecked_count": len(unchecked),
                },
            )
            raise UncheckedJournalsExistError(fiscal_year, month, len(unchecked))

        now = self._clock.now()
        if payment is None:
            payment = PayrollPayment(
                fiscal_year=fiscal_year,
                month=month,
                is_paid=True,
                created_at=now,
            )
            self.session.add(payment)
        else:
            payment.is_paid = True
            payment.created_at = now

        try:
            self.session.flush()
        except IntegrityError:
            logger.warning(
                "concurrent_payroll_payment_conflict",
                extra={"fiscal_year": fiscal_year, "month": month},
            )
            raise PayrollAlreadyPaidError(fiscal_year, month) from None

        logger.info(
            "payroll_marked_paid",
            extra={"fiscal_year": fiscal_year, "month": month},
        )
        return MarkAsPaidResult(
            fiscal_year=fiscal_year,
            month=month,
            is_paid=True,
            created_at=now,
        )

    def _get_payment_for_update(
        self, fiscal_year: str, month: int
    ) -> PayrollPayment | None:
        return self.session.execute(
            select(PayrollPayment)
            .where(
                PayrollPayment.fiscal_year == fiscal_year,
                PayrollPayment.month == month,
            )
            .with_for_update()
        ).scalar_one_or_none()

    def _lock_month_journals(
        self, fiscal_year: str, month: int
    ) -> list[tuple[int, bool]]:
        """(id, checked) of every live journal in the month, row-locked.

        The lock must not filter on checked: a row whose flag is being
        changed by an open transaction has to block this read.
        """
        prefix = year_month_prefix(fiscal_year, month)
        rows = self.session.execute(
            select(Journal.id, Journal.checked)
            .where(
                Journal.fiscal_year == fiscal_year,
                Journal.deleted == false(),
                Journal.date.startswith(prefix),
            )
            .with_for_update()
        ).all()
        return [(row.id, bool(row.checked)) for row in rows]
