"""
JournalService -- the mutable side of the journal store.

Responsibility:
    Soft-delete journals and change their review ("checked") flag.

Architecture position:
    Kernel > Services -- imperative shell.  Flush-only; the caller owns the
    transaction.

Invariants enforced:
    - Soft delete never removes rows.  It affects only matching rows that
      are not already deleted, so repeating a delete affects 0 rows.
    - set_checked() is the raw store write: identity/existence only, no
      business lock.
    - update_checked() is the gated write: it locks the journal row
      (SELECT ... FOR UPDATE), runs PayrollLockGate.ensure_unlocked against
      the stored date, then writes, all inside the caller's transaction.
      Payroll cannot be finalized between the check and the write.
    - Every write stamps updated_at from the injected clock and bumps the
      row version.  A write against a stale version fails with
      OptimisticLockError instead of overwriting.

Failure modes:
    - JournalNotFoundError (RECORD_NOT_FOUND) when (id, fiscal_year) matches
      no live row.  Existence is checked before the gate runs.
    - PayrollPeriodLockedError from the gate.
    - OptimisticLockError on a concurrent write to the same row.

Audit relevance:
    ``journal_checked_updated`` and ``journals_soft_deleted`` are logged
    at INFO with the affected ids.
"""

from typing import Sequence

from sqlalchemy import false, select, update
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from ledger_kernel.domain.clock import Clock
from ledger_kernel.domain.dtos import JournalInfo
from ledger_kernel.exceptions import JournalNotFoundError, OptimisticLockError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.journal import Journal
from ledger_kernel.services.base import BaseService
from ledger_kernel.services.payroll_lock_gate import PayrollLockGate

logger = get_logger("services.journal")


class JournalService(BaseService):
    """
    Journal store mutations.

    Contract:
        Returns JournalInfo DTOs, never ORM rows.

    Non-goals:
        - Does NOT create journals (entry creation is an outer concern).
        - Does NOT gate soft delete on payroll state.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        gate: PayrollLockGate | None = None,
    ):
        super().__init__(session, clock)
        self._gate = gate or PayrollLockGate(session)

    def soft_delete(self, fiscal_year: str, journal_ids: Sequence[int]) -> int:
        """
        Mark journals deleted.

        Postconditions: returns the number of rows that went from live to
            deleted.  An empty id list performs no write and returns 0.
            Ids that match nothing are silently ignored.
        """
        ids = sorted(set(journal_ids))
        if not ids:
            return 0

        result = self.session.execute(
            update(Journal)
            .where(
                Journal.id.in_(ids),
                Journal.fiscal_year == fiscal_year,
                Journal.deleted == false(),
            )
            .values(
                deleted=True,
                updated_at=self._clock.now(),
                version=Journal.version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        affected = result.rowcount or 0
        self.session.expire_all()

        logger.info(
            "journals_soft_deleted",
            extra={
                "fiscal_year": fiscal_year,
                "requested": len(ids),
                "affected": affected,
            },
        )
        return affected

    def set_checked(self, journal_id: int, fiscal_year: str, checked: bool) -> JournalInfo:
        """
        Store-level checked update, without the payroll gate.

        Raises:
            JournalNotFoundError: no live row matches id and fiscal year.
        """
        journal = self._get_journal_for_update(journal_id, fiscal_year)
        if journal is None:
            raise JournalNotFoundError(journal_id, fiscal_year)
        return self._apply_checked(journal, checked)

    def update_checked(
        self, journal_id: int, fiscal_year: str, checked: bool
    ) -> JournalInfo:
        """
        Gated checked update: existence, then payroll veto, then write.

        Raises:
            JournalNotFoundError: no live row matches id and fiscal year.
            PayrollPeriodLockedError: the journal's month is payroll-locked.
            OptimisticLockError: the row changed under us.
        """
        journal = self._get_journal_for_update(journal_id, fiscal_year)
        if journal is None:
            raise JournalNotFoundError(journal_id, fiscal_year)

        self._gate.ensure_unlocked(fiscal_year, journal.date, journal_id)

        return self._apply_checked(journal, checked)

    def _apply_checked(self, journal: Journal, checked: bool) -> JournalInfo:
        previous = journal.checked
        journal.checked = checked
        journal.updated_at = self._clock.now()
        try:
            self.session.flush()
        except StaleDataError:
            logger.warning(
                "journal_version_conflict",
                extra={"journal_id": journal.id},
            )
            raise OptimisticLockError(journal.id) from None

        logger.info(
            "journal_checked_updated",
            extra={
                "journal_id": journal.id,
                "fiscal_year": journal.fiscal_year,
                "previous": previous,
                "checked": checked,
            },
        )
        return JournalInfo.from_model(journal)

    def _get_journal_for_update(
        self, journal_id: int, fiscal_year: str
    ) -> Journal | None:
        """Get a live ORM Journal with a row lock for the check-then-write."""
        return self.session.execute(
            select(Journal)
            .where(
                Journal.id == journal_id,
                Journal.fiscal_year == fiscal_year,
                Journal.deleted == false(),
            )
            .with_for_update()
        ).scalar_one_or_none()
