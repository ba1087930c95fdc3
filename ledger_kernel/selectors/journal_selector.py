"""
Module: ledger_kernel.selectors.journal_selector
Responsibility: Read-only journal queries -- single-row lookup and the
    per-month review progress (checked statuses) of a fiscal year.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Soft-deleted journals are invisible: get() returns None for them and
      they are not counted.
    - Monthly statuses are sparse (months with no journals are absent) and
      returned in fiscal order: months >= 4 ascending, then months < 4
      ascending.
"""

from sqlalchemy import case, func, select, true

from ledger_kernel.domain.dtos import JournalInfo, MonthlyCheckStatus
from ledger_kernel.domain.fiscal_calendar import fiscal_sort_key
from ledger_kernel.models.journal import Journal
from ledger_kernel.selectors.base import BaseSelector, not_deleted


def journal_month_column():
    """SQL expression for the 2-digit calendar month of Journal.date."""
    return func.substr(Journal.date, 5, 2)


class JournalSelector(BaseSelector):
    """Read-only queries over the journal store."""

    def get(self, journal_id: int, fiscal_year: str) -> JournalInfo | None:
        """Get a non-deleted journal by id within a fiscal year."""
        model = self.session.execute(
            select(Journal).where(
                Journal.id == journal_id,
                Journal.fiscal_year == fiscal_year,
                not_deleted(),
            )
        ).scalar_one_or_none()
        return JournalInfo.from_model(model) if model is not None else None

    def list_for_fiscal_year(self, fiscal_year: str) -> list[JournalInfo]:
        """All non-deleted journals of a fiscal year, ordered by date then id."""
        models = self.session.execute(
            select(Journal)
            .where(Journal.fiscal_year == fiscal_year, not_deleted())
            .order_by(Journal.date, Journal.id)
        ).scalars().all()
        return [JournalInfo.from_model(m) for m in models]

    def list_check_statuses(self, fiscal_year: str) -> list[MonthlyCheckStatus]:
        """
        Review progress per calendar month.

        Postconditions: one MonthlyCheckStatus per month that has at least
            one non-deleted journal, sorted in fiscal order.
        """
        month = journal_month_column().label("month")
        checked_count = func.sum(
            case((Journal.checked == true(), 1), else_=0)
        ).label("checked_count")

        rows = self.session.execute(
            select(
                month,
                func.count(Journal.id).label("total_count"),
                checked_count,
            )
            .where(Journal.fiscal_year == fiscal_year, not_deleted())
            .group_by(month)
        ).all()

        statuses = [
            MonthlyCheckStatus(
                month=int(row.month),
                total_count=int(row.total_count),
                checked_count=int(row.checked_count or 0),
            )
            for row in rows
        ]
        return sorted(statuses, key=lambda s: fiscal_sort_key(s.month))
