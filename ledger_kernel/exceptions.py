"""
Typed Exception Hierarchy for the Ledger Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers (HTTP handlers, batch jobs) must decide how to surface a failure
without parsing message strings.  Every error therefore has:
  1. A TYPED exception class (catch by type, not message)
  2. A static CODE attribute (machine-readable, API-safe)
  3. A KIND (VALIDATION / NOT_FOUND / CONFLICT / UNEXPECTED) that maps to
     a response family (4xx vs 5xx)
  4. Structured DATA as attributes plus a ``details`` list

Example - WRONG way to handle errors:
    try:
        engine.update_checked("2025", 42, "1")
    except Exception as e:
        if "給与" in str(e):  # FRAGILE
            ...

Example - RIGHT way:
    try:
        engine.update_checked("2025", 42, "1")
    except PayrollPeriodLockedError as e:
        render_locked_banner(month=e.month)
    except LedgerKernelError as e:
        return e.to_dict(), status_for(e.kind)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    LedgerKernelError (base)
    |
    +-- ValidationError                      kind=VALIDATION
    |   +-- InvalidDateError
    |   +-- InvalidFiscalYearError
    |   +-- InvalidMonthError
    |   +-- InvalidCheckedValueError
    |   +-- PayrollPeriodLockedError
    |   +-- PayrollAlreadyPaidError
    |   +-- UncheckedJournalsExistError
    |   +-- UnknownLedgerError
    |   +-- UnknownBucketError
    |   +-- UnknownReportTypeError
    |   +-- InvalidReportRequestError
    |
    +-- NotFoundError                        kind=NOT_FOUND
    |   +-- JournalNotFoundError
    |   +-- AccountNotFoundError
    |
    +-- ConcurrencyError                     kind=CONFLICT
    |   +-- OptimisticLockError
    |
    +-- UnexpectedError                      kind=UNEXPECTED

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category     | Code                      | When Raised
-------------|---------------------------|------------------------------------------
Validation   | VALIDATION_ERROR          | Generic malformed input
             | INVALID_DATE              | Date is not a valid YYYYMMDD string
             | INVALID_FISCAL_YEAR       | Fiscal year is not a 4-digit string
             | INVALID_MONTH             | Month outside 1..12
             | INVALID_CHECKED_VALUE     | checked flag not "0" / "1"
             | PAYROLL_PERIOD_LOCKED     | Review change in a paid payroll month
             | ALREADY_PAID              | Month already marked as paid
             | UNCHECKED_JOURNALS_EXIST  | Paying a month with unreviewed journals
             | LEDGER_NOT_FOUND          | Ledger count for an unknown account code
             | BUCKET_NOT_FOUND          | Breakdown for an unknown bucket code
             | UNKNOWN_REPORT_TYPE       | Report request with an unknown tag
             | INVALID_REPORT_REQUEST    | Report request with a bad field value
-------------|---------------------------|------------------------------------------
Not found    | RECORD_NOT_FOUND          | Journal id/fiscal year does not exist
             | ACCOUNT_NOT_FOUND         | Account code has no classification
-------------|---------------------------|------------------------------------------
Conflict     | OPTIMISTIC_LOCK_CONFLICT  | Concurrent write on the same journal row
-------------|---------------------------|------------------------------------------
Unexpected   | UNEXPECTED_ERROR          | Storage / infrastructure failure
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Response family for an error."""

    VALIDATION = "VALIDATION"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    UNEXPECTED = "UNEXPECTED"


@dataclass(frozen=True)
class ErrorDetail:
    """One machine-readable problem attached to an error."""

    code: str
    message: str
    path: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.path:
            data["path"] = list(self.path)
        return data


class LedgerKernelError(Exception):
    """
    Base exception for all ledger kernel errors.

    All subclasses must define a ``code`` class attribute and inherit a
    ``kind``.  ``details`` defaults to a single detail built from the code
    and message.
    """

    code: str = "LEDGER_KERNEL_ERROR"
    kind: ErrorKind = ErrorKind.UNEXPECTED

    def __init__(self, message: str, details: list[ErrorDetail] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details if details is not None else [
            ErrorDetail(code=self.code, message=message)
        ]

    def to_dict(self) -> dict[str, Any]:
        """Transport shape: ``{message, code, kind, details}``."""
        return {
            "message": self.message,
            "code": self.code,
            "kind": self.kind.value,
            "details": [d.to_dict() for d in self.details],
        }


# Validation errors


class ValidationError(LedgerKernelError):
    """Base exception for caller input that fails validation."""

    code: str = "VALIDATION_ERROR"
    kind: ErrorKind = ErrorKind.VALIDATION


class InvalidDateError(ValidationError):
    """Date string is not a valid 8-digit YYYYMMDD calendar date."""

    code: str = "INVALID_DATE"

    def __init__(self, value: object):
        self.value = value
        super().__init__(
            f"Invalid date {value!r}: expected YYYYMMDD",
            [ErrorDetail(self.code, f"Invalid date {value!r}", ("date",))],
        )


class InvalidFiscalYearError(ValidationError):
    """Fiscal year identifier is not a 4-digit year string."""

    code: str = "INVALID_FISCAL_YEAR"

    def __init__(self, value: object):
        self.value = value
        super().__init__(
            f"Invalid fiscal year {value!r}: expected 4 digits",
            [ErrorDetail(self.code, f"Invalid fiscal year {value!r}", ("fiscal_year",))],
        )


class InvalidMonthError(ValidationError):
    """Month is outside 1..12."""

    code: str = "INVALID_MONTH"

    def __init__(self, value: object):
        self.value = value
        super().__init__(
            f"Invalid month {value!r}: expected 1..12",
            [ErrorDetail(self.code, f"Invalid month {value!r}", ("month",))],
        )


class InvalidCheckedValueError(ValidationError):
    """Checked flag is not one of "0" / "1"."""

    code: str = "INVALID_CHECKED_VALUE"

    def __init__(self, value: object):
        self.value = value
        super().__init__(
            f"Invalid checked value {value!r}: expected '0' or '1'",
            [ErrorDetail(self.code, f"Invalid checked value {value!r}", ("checked",))],
        )


class PayrollPeriodLockedError(ValidationError):
    """
    Journal review state change attempted in a month whose payroll is paid.

    The veto is unconditional: setting the flag to its current value is
    refused as well.
    """

    code: str = "PAYROLL_PERIOD_LOCKED"

    def __init__(
        self,
        fiscal_year: str,
        months: list[int],
        journal_id: int | None = None,
    ):
        self.fiscal_year = fiscal_year
        self.months = sorted(set(months))
        self.month = self.months[0] if self.months else None
        self.journal_id = journal_id
        months_text = ", ".join(str(m) for m in self.months)
        message = f"{months_text}月は既に給与支払いが完了しているため、修正できません"
        super().__init__(
            message,
            [ErrorDetail(self.code, message, ("date",))],
        )


class PayrollAlreadyPaidError(ValidationError):
    """Month has already been marked as paid."""

    code: str = "ALREADY_PAID"

    def __init__(self, fiscal_year: str, month: int):
        self.fiscal_year = fiscal_year
        self.month = month
        super().__init__(f"{fiscal_year}年度{month}月は既に支払い済みです")


class UncheckedJournalsExistError(ValidationError):
    """Payroll cannot be finalized while journals of the month are unreviewed."""

    code: str = "UNCHECKED_JOURNALS_EXIST"

    def __init__(self, fiscal_year: str, month: int, unchecked_count: int):
        self.fiscal_year = fiscal_year
        self.month = month
        self.unchecked_count = unchecked_count
        super().__init__(
            f"未確認の仕訳データが{unchecked_count}件あります。先に確認を完了してください。"
        )


class UnknownLedgerError(ValidationError):
    """Ledger query names an account code with no classification."""

    code: str = "LEDGER_NOT_FOUND"

    def __init__(self, account_code: str):
        self.account_code = account_code
        super().__init__(
            f"Ledger not found: {account_code}",
            [ErrorDetail(self.code, f"Ledger not found: {account_code}", ("ledger_cd",))],
        )


class UnknownBucketError(ValidationError):
    """Breakdown request names a bucket code that does not exist."""

    code: str = "BUCKET_NOT_FOUND"

    def __init__(self, bucket_code: str):
        self.bucket_code = bucket_code
        super().__init__(f"Account bucket not found: {bucket_code}")


class UnknownReportTypeError(ValidationError):
    """Report request carries a tag with no matching report."""

    code: str = "UNKNOWN_REPORT_TYPE"

    def __init__(self, report_type: object, index: int | None = None):
        self.report_type = report_type
        self.index = index
        path = ("requests", str(index), "type") if index is not None else ("type",)
        super().__init__(
            f"Unknown report type: {report_type!r}",
            [ErrorDetail(self.code, f"Unknown report type: {report_type!r}", path)],
        )


class InvalidReportRequestError(ValidationError):
    """Report request field has a value outside its allowed set."""

    code: str = "INVALID_REPORT_REQUEST"

    def __init__(self, field_name: str, value: object, allowed: list[str] | None = None):
        self.field_name = field_name
        self.value = value
        self.allowed = allowed or []
        message = f"Invalid value {value!r} for {field_name}"
        if self.allowed:
            message += f" (allowed: {', '.join(self.allowed)})"
        super().__init__(message, [ErrorDetail(self.code, message, (field_name,))])


# Not-found errors


class NotFoundError(LedgerKernelError):
    """Base exception for references to rows that do not exist."""

    code: str = "NOT_FOUND"
    kind: ErrorKind = ErrorKind.NOT_FOUND


class JournalNotFoundError(NotFoundError):
    """No journal matches the id within the fiscal year."""

    code: str = "RECORD_NOT_FOUND"

    def __init__(self, journal_id: int, fiscal_year: str):
        self.journal_id = journal_id
        self.fiscal_year = fiscal_year
        message = f"ID {journal_id} の取引データが見つかりません"
        super().__init__(message, [ErrorDetail(self.code, message, ("id",))])


class AccountNotFoundError(NotFoundError):
    """Account code has no entry in the classification table."""

    code: str = "ACCOUNT_NOT_FOUND"

    def __init__(self, account_code: str):
        self.account_code = account_code
        super().__init__(f"Account not found: {account_code}")


# Concurrency errors


class ConcurrencyError(LedgerKernelError):
    """Base exception for write conflicts."""

    code: str = "CONCURRENCY_ERROR"
    kind: ErrorKind = ErrorKind.CONFLICT


class OptimisticLockError(ConcurrencyError):
    """Another transaction modified the journal row first."""

    code: str = "OPTIMISTIC_LOCK_CONFLICT"

    def __init__(self, journal_id: int | None = None):
        self.journal_id = journal_id
        super().__init__(
            f"Journal {journal_id} was modified concurrently; retry the request"
        )


# Unexpected errors


class UnexpectedError(LedgerKernelError):
    """Storage or infrastructure failure; message never carries internals."""

    code: str = "UNEXPECTED_ERROR"
    kind: ErrorKind = ErrorKind.UNEXPECTED

    def __init__(self, operation: str | None = None):
        self.operation = operation
        super().__init__("An unexpected error occurred", [])
