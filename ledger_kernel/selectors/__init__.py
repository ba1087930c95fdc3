"""Read-only query selectors."""

from ledger_kernel.selectors.fiscal_year_selector import FiscalYearSelector
from ledger_kernel.selectors.journal_selector import JournalSelector
from ledger_kernel.selectors.ledger_selector import LedgerSelector
from ledger_kernel.selectors.movement_selector import MovementSelector
from ledger_kernel.selectors.payroll_selector import PayrollSelector

__all__ = [
    "FiscalYearSelector",
    "JournalSelector",
    "LedgerSelector",
    "MovementSelector",
    "PayrollSelector",
]
