"""
Module: ledger_kernel.models.journal
Responsibility: ORM persistence for journals -- one balanced double-entry
    transaction (one debit account/amount, one credit account/amount).
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - debit_amount == credit_amount (enforced by the entry writer, not
      re-validated here).
    - A journal belongs to exactly one fiscal year; fiscal-year semantics,
      not calendar-year: a journal dated 20260115 belongs to fiscal year 2025.
    - Soft delete only.  Rows are never physically removed and deleted rows
      are excluded from every read.
    - version is the ORM version counter.  A flush against a stale version
      raises StaleDataError, so concurrent writes on the same row fail
      loudly instead of overwriting each other.

Failure modes:
    - JournalNotFoundError when (id, fiscal_year) matches no row.
    - PayrollPeriodLockedError when the checked flag is changed inside a
      paid payroll month (raised by the service layer).

Audit relevance:
    checked is the accountant's review mark.  Once payroll for a month is
    paid, the review state of that month's journals is frozen.
"""

from decimal import Decimal

from sqlalchemy import Boolean, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TrackedBase


class Journal(TrackedBase):
    """
    A single journal row (shiwake).

    Contract:
        date is an 8-digit YYYYMMDD string.  The stored month is the
        calendar month (characters 4-5); fiscal ordering is applied by readers.

    Guarantees:
        - checked and deleted default to False.
        - version starts at 1 and increments on every ORM update.
    """

    __tablename__ = "journals"

    __table_args__ = (
        Index("idx_journal_fiscal_year_date", "fiscal_year", "date"),
        Index("idx_journal_debit_account", "fiscal_year", "debit_account_code"),
        Index("idx_journal_credit_account", "fiscal_year", "credit_account_code"),
    )

    fiscal_year: Mapped[str] = mapped_column(
        String(4),
        nullable=False,
    )

    date: Mapped[str] = mapped_column(
        String(8),
        nullable=False,
    )

    debit_account_code: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
    )

    debit_amount: Mapped[Decimal] = mapped_column(
        nullable=False,
    )

    credit_account_code: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
    )

    credit_amount: Mapped[Decimal] = mapped_column(
        nullable=False,
    )

    note: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    checked: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    deleted: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
    )

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<Journal {self.id} {self.fiscal_year}/{self.date}>"
