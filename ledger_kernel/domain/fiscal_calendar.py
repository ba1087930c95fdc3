"""
Fiscal Calendar -- month arithmetic for an April-March fiscal year.

Responsibility:
    Convert YYYYMMDD date strings into fiscal coordinates and order calendar
    months the way the fiscal year runs.

Architecture position:
    Kernel > Domain -- pure functions, zero I/O.

Invariants enforced:
    - Fiscal year N spans 1-April-N to 31-March-(N+1) and is identified by N.
    - The stored month is always the literal calendar month 1..12.  Only the
      ORDER is fiscal: months 4..12 take positions 1..9 and months 1..3 take
      positions 10..12.  In a mixed set every month >= 4 sorts before every
      month < 4; within each group the order is ascending.
    - Dates are plain 8-digit strings parsed by fixed offsets
      (YYYY at 0-3, MM at 4-5, DD at 6-7).  No timezone handling.

Failure modes:
    - InvalidDateError for anything that is not an 8-digit calendar date.
    - InvalidMonthError for a month outside 1..12.
    - InvalidFiscalYearError for a fiscal year that is not 4 digits.
"""

from __future__ import annotations

import datetime as _dt
from typing import Iterable

from ledger_kernel.exceptions import (
    InvalidDateError,
    InvalidFiscalYearError,
    InvalidMonthError,
)

FISCAL_YEAR_START_MONTH = 4

# Calendar months in fiscal order.
FISCAL_MONTHS: tuple[int, ...] = (4, 5, 6, 7, 8, 9, 10, 11, 12, 1, 2, 3)


def validate_fiscal_year(value: object) -> str:
    """Return the fiscal year identifier, or raise InvalidFiscalYearError."""
    if not isinstance(value, str) or len(value) != 4 or not value.isdigit():
        raise InvalidFiscalYearError(value)
    return value


def validate_month(value: object) -> int:
    """Return the calendar month as an int, or raise InvalidMonthError."""
    if isinstance(value, bool) or not isinstance(value, int) or not 1 <= value <= 12:
        raise InvalidMonthError(value)
    return value


def parse_journal_date(value: object) -> _dt.date:
    """Parse a YYYYMMDD string into a date.

    Raises:
        InvalidDateError: value is not 8 digits or not a real calendar date.
    """
    if not isinstance(value, str) or len(value) != 8 or not value.isdigit():
        raise InvalidDateError(value)
    try:
        return _dt.date(int(value[0:4]), int(value[4:6]), int(value[6:8]))
    except ValueError:
        raise InvalidDateError(value) from None


def fiscal_month_of(value: str) -> int:
    """Calendar month (1..12) of a YYYYMMDD date string."""
    return parse_journal_date(value).month


def fiscal_year_of(value: str) -> str:
    """Fiscal year identifier a YYYYMMDD date belongs to."""
    parsed = parse_journal_date(value)
    year = parsed.year if parsed.month >= FISCAL_YEAR_START_MONTH else parsed.year - 1
    return f"{year:04d}"


def fiscal_position(month: int) -> int:
    """Position 1..12 of a calendar month within the fiscal year."""
    validate_month(month)
    if month >= FISCAL_YEAR_START_MONTH:
        return month - FISCAL_YEAR_START_MONTH + 1
    return month + 12 - FISCAL_YEAR_START_MONTH + 1


def fiscal_sort_key(month: int) -> int:
    return fiscal_position(month)


def compare_fiscal_month(a: int, b: int) -> int:
    """Three-way compare two calendar months in fiscal order (-1, 0, 1)."""
    pa, pb = fiscal_position(a), fiscal_position(b)
    return (pa > pb) - (pa < pb)


def sort_months_fiscal(months: Iterable[int]) -> list[int]:
    """Sort calendar months in fiscal order (April first, March last)."""
    return sorted(months, key=fiscal_sort_key)


def calendar_year_of(fiscal_year: str, month: int) -> int:
    """Calendar year of a month within a fiscal year (Jan-Mar are year N+1)."""
    year = int(validate_fiscal_year(fiscal_year))
    return year if validate_month(month) >= FISCAL_YEAR_START_MONTH else year + 1


def year_month_prefix(fiscal_year: str, month: int) -> str:
    """YYYYMM prefix of the journal dates falling in a fiscal month."""
    return f"{calendar_year_of(fiscal_year, month):04d}{month:02d}"


def fiscal_year_bounds(fiscal_year: str) -> tuple[str, str]:
    """First and last day of the fiscal year as YYYYMMDD strings."""
    year = int(validate_fiscal_year(fiscal_year))
    return f"{year:04d}0401", f"{year + 1:04d}0331"
