"""ORM models for the ledger kernel."""

from ledger_kernel.models.account import (
    Account,
    AccountBucket,
    AccountCategory,
    BalanceSide,
    BucketKind,
)
from ledger_kernel.models.fiscal_year import FiscalYear
from ledger_kernel.models.journal import Journal
from ledger_kernel.models.payroll_payment import PayrollPayment

__all__ = [
    "Account",
    "AccountBucket",
    "AccountCategory",
    "BalanceSide",
    "BucketKind",
    "FiscalYear",
    "Journal",
    "PayrollPayment",
]
