"""
Module: ledger_kernel.selectors.fiscal_year_selector
Responsibility: Fiscal year listing with display labels.
Architecture position: Kernel > Selectors.
"""

from sqlalchemy import select

from ledger_kernel.domain.dtos import FiscalYearInfo
from ledger_kernel.models.fiscal_year import FiscalYear
from ledger_kernel.selectors.base import BaseSelector


def _iso(yyyymmdd: str) -> str:
    return f"{yyyymmdd[0:4]}-{yyyymmdd[4:6]}-{yyyymmdd[6:8]}"


def fiscal_year_label(fiscal_year: str, start_date: str, end_date: str) -> str:
    """e.g. 2025年度（2025年04月〜2026年03月）"""
    return (
        f"{fiscal_year}年度"
        f"（{start_date[0:4]}年{start_date[4:6]}月〜{end_date[0:4]}年{end_date[4:6]}月）"
    )


class FiscalYearSelector(BaseSelector):

    def list_fiscal_years(self) -> list[FiscalYearInfo]:
        """All fiscal years, newest first."""
        rows = self.session.execute(
            select(FiscalYear).order_by(FiscalYear.fiscal_year.desc())
        ).scalars().all()
        return [
            FiscalYearInfo(
                fiscal_year=r.fiscal_year,
                label=fiscal_year_label(r.fiscal_year, r.start_date, r.end_date),
                start_date=_iso(r.start_date),
                end_date=_iso(r.end_date),
                is_current=r.is_current,
            )
            for r in rows
        ]
