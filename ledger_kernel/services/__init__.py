"""Kernel services: flush-only writes and the payroll lock gate."""

from ledger_kernel.services.journal_service import JournalService
from ledger_kernel.services.payroll_lock_gate import PayrollLockGate
from ledger_kernel.services.payroll_service import PayrollService
from ledger_kernel.services.reference_data_loader import ReferenceDataLoader

__all__ = [
    "JournalService",
    "PayrollLockGate",
    "PayrollService",
    "ReferenceDataLoader",
]
