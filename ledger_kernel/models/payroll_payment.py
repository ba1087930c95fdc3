"""
Module: ledger_kernel.models.payroll_payment
Responsibility: ORM persistence for payroll finalization, one row per
    (fiscal year, calendar month).
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - At most one row per (fiscal_year, month) (uq_payroll_payment_month).
    - Absence of a row means "not paid".
    - month is the calendar month 1..12.  Months 1..3 of fiscal year N are
      January..March of calendar year N+1.

Audit relevance:
    is_paid == True freezes the checked state of every journal dated in the
    month.  The payroll lock gate reads this table; it never writes journals.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import Base


class PayrollPayment(Base):
    """Payroll finalization marker for one month of a fiscal year."""

    __tablename__ = "payroll_payments"

    __table_args__ = (
        UniqueConstraint("fiscal_year", "month", name="uq_payroll_payment_month"),
    )

    fiscal_year: Mapped[str] = mapped_column(
        String(4),
        nullable=False,
    )

    month: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    is_paid: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<PayrollPayment {self.fiscal_year}/{self.month} paid={self.is_paid}>"
