"""
Module: ledger_kernel.models.fiscal_year
Responsibility: ORM persistence for fiscal years (nendo) -- the partition key
    of every journal row.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Fiscal year N spans 1-April-N to 31-March-(N+1).
    - Exactly one fiscal year is current (fixed == False) at a time.  Both are
      maintained by the period-close workflow; the ledger only reads them.

Audit relevance:
    A fixed fiscal year is closed; its journals are historical figures.
"""

from sqlalchemy import Boolean, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TrackedBase


class FiscalYear(TrackedBase):
    """
    One fiscal year (nendo).

    Guarantees:
        - fiscal_year is a unique 4-digit string.
        - start_date / end_date are YYYYMMDD strings.
    """

    __tablename__ = "fiscal_years"

    __table_args__ = (
        UniqueConstraint("fiscal_year", name="uq_fiscal_year"),
    )

    fiscal_year: Mapped[str] = mapped_column(
        String(4),
        nullable=False,
    )

    start_date: Mapped[str] = mapped_column(
        String(8),
        nullable=False,
    )

    end_date: Mapped[str] = mapped_column(
        String(8),
        nullable=False,
    )

    # Closed by the period-close workflow
    fixed: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<FiscalYear {self.fiscal_year} fixed={self.fixed}>"

    @property
    def is_current(self) -> bool:
        return not self.fixed
