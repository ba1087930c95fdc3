"""
Module: ledger_kernel.selectors.payroll_selector
Responsibility: Read-only access to payroll finalization rows.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - paid_months() answers any number of months with exactly one SELECT.
    - payment_statuses() is in calendar month order (1..12), unlike journal
      review reporting which is in fiscal order: payroll periods align to
      calendar months.
"""

from typing import Iterable

from sqlalchemy import select, true

from ledger_kernel.domain.dtos import PaymentStatus
from ledger_kernel.models.payroll_payment import PayrollPayment
from ledger_kernel.selectors.base import BaseSelector


class PayrollSelector(BaseSelector):
    """Payroll payment lookups."""

    def paid_months(self, fiscal_year: str, months: Iterable[int]) -> set[int]:
        """Subset of months whose payroll is marked paid (one query)."""
        wanted = sorted(set(months))
        if not wanted:
            return set()
        rows = self.session.execute(
            select(PayrollPayment.month).where(
                PayrollPayment.fiscal_year == fiscal_year,
                PayrollPayment.month.in_(wanted),
                PayrollPayment.is_paid == true(),
            )
        ).scalars().all()
        return set(rows)

    def payment_statuses(self, fiscal_year: str) -> list[PaymentStatus]:
        """All payment rows of a fiscal year, month ascending."""
        rows = self.session.execute(
            select(PayrollPayment)
            .where(PayrollPayment.fiscal_year == fiscal_year)
            .order_by(PayrollPayment.month)
        ).scalars().all()
        return [
            PaymentStatus(month=r.month, is_paid=r.is_paid, created_at=r.created_at)
            for r in rows
        ]
