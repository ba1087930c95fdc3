"""
JournalService tests.

Verifies:
- soft_delete: empty input is a no-op, repeats affect 0 rows, unknown ids
  are ignored, rows are never physically removed.
- update_checked: existence before the gate, unconditional payroll veto,
  timestamp and version stamping, optimistic-lock conflicts.
"""

from datetime import timedelta

import pytest
from sqlalchemy import func, select, text

from ledger_kernel.exceptions import (
    JournalNotFoundError,
    OptimisticLockError,
    PayrollPeriodLockedError,
)
from ledger_kernel.models.journal import Journal
from ledger_kernel.selectors.journal_selector import JournalSelector
from ledger_kernel.services.journal_service import JournalService


@pytest.fixture
def journal_service(session, deterministic_clock):
    return JournalService(session, deterministic_clock)


class TestSoftDelete:

    def test_empty_ids_is_noop(self, journal_service, captured_logs):
        assert journal_service.soft_delete("2025", []) == 0
        assert not any(r["message"] == "journals_soft_deleted" for r in captured_logs())

    def test_marks_rows_deleted(self, session, journal_service, chart_of_accounts, create_journal):
        first = create_journal("20250415", debit="1011", credit="4011")
        second = create_journal("20250416", debit="1011", credit="4011")
        kept = create_journal("20250417", debit="1011", credit="4011")

        affected = journal_service.soft_delete("2025", [first.id, second.id])

        assert affected == 2
        remaining = JournalSelector(session).list_for_fiscal_year("2025")
        assert [j.id for j in remaining] == [kept.id]
        # Rows stay in the table
        assert session.execute(select(func.count(Journal.id))).scalar_one() == 3

    def test_second_call_affects_nothing(self, journal_service, chart_of_accounts, create_journal):
        journal = create_journal("20250415", debit="1011", credit="4011")

        assert journal_service.soft_delete("2025", [journal.id]) == 1
        assert journal_service.soft_delete("2025", [journal.id]) == 0

    def test_unknown_and_foreign_ids_ignored(
        self, journal_service, chart_of_accounts, create_journal
    ):
        journal = create_journal("20250415", debit="1011", credit="4011")
        other_year = create_journal("20240415", debit="1011", credit="4011")

        assert journal_service.soft_delete("2025", [journal.id, other_year.id, 999_999]) == 1

    def test_stamps_timestamp_and_version(
        self, session, journal_service, deterministic_clock, chart_of_accounts, create_journal
    ):
        journal = create_journal("20250415", debit="1011", credit="4011")
        deterministic_clock.advance(3600)

        journal_service.soft_delete("2025", [journal.id])

        row = session.get(Journal, journal.id)
        assert row.deleted is True
        assert row.version == 2

    def test_not_gated_by_payroll(
        self, journal_service, chart_of_accounts, create_journal, create_payroll_payment
    ):
        journal = create_journal("20250415", debit="1011", credit="4011")
        create_payroll_payment("2025", 4)

        assert journal_service.soft_delete("2025", [journal.id]) == 1


class TestUpdateChecked:

    def test_round_trip(
        self, session, journal_service, deterministic_clock, chart_of_accounts, create_journal
    ):
        journal = create_journal("20250415", debit="1011", credit="4011")
        deterministic_clock.advance(60)

        info = journal_service.update_checked(journal.id, "2025", True)

        assert info.checked is True
        assert info.updated_at == deterministic_clock.now()
        assert info.version == 2
        reread = JournalSelector(session).get(journal.id, "2025")
        assert reread.checked is True

    def test_unchecking(self, journal_service, chart_of_accounts, create_journal):
        journal = create_journal("20250415", debit="1011", credit="4011", checked=True)

        assert journal_service.update_checked(journal.id, "2025", False).checked is False

    def test_missing_journal(self, journal_service, chart_of_accounts):
        with pytest.raises(JournalNotFoundError) as exc_info:
            journal_service.update_checked(12345, "2025", True)
        assert exc_info.value.code == "RECORD_NOT_FOUND"
        assert exc_info.value.kind.value == "NOT_FOUND"

    def test_wrong_fiscal_year_is_not_found(self, journal_service, chart_of_accounts, create_journal):
        journal = create_journal("20250415", debit="1011", credit="4011")

        with pytest.raises(JournalNotFoundError):
            journal_service.update_checked(journal.id, "2024", True)

    def test_deleted_journal_is_not_found(self, journal_service, chart_of_accounts, create_journal):
        journal = create_journal("20250415", debit="1011", credit="4011", deleted=True)

        with pytest.raises(JournalNotFoundError):
            journal_service.update_checked(journal.id, "2025", True)

    def test_missing_journal_reported_before_gate(
        self, journal_service, chart_of_accounts, create_payroll_payment
    ):
        create_payroll_payment("2025", 4)

        with pytest.raises(JournalNotFoundError):
            journal_service.update_checked(12345, "2025", True)

    @pytest.mark.parametrize("current, requested", [
        (False, True),
        (True, False),
        (False, False),
        (True, True),
    ])
    def test_locked_month_always_vetoed(
        self,
        session,
        journal_service,
        chart_of_accounts,
        create_journal,
        create_payroll_payment,
        current,
        requested,
    ):
        journal = create_journal("20250420", debit="1011", credit="4011", checked=current)
        create_payroll_payment("2025", 4)

        with pytest.raises(PayrollPeriodLockedError) as exc_info:
            journal_service.update_checked(journal.id, "2025", requested)

        assert exc_info.value.code == "PAYROLL_PERIOD_LOCKED"
        assert exc_info.value.month == 4
        assert "4月" in str(exc_info.value)
        session.refresh(journal)
        assert journal.checked is current
        assert journal.version == 1

    def test_other_month_not_locked(
        self, journal_service, chart_of_accounts, create_journal, create_payroll_payment
    ):
        journal = create_journal("20250520", debit="1011", credit="4011")
        create_payroll_payment("2025", 4)

        assert journal_service.update_checked(journal.id, "2025", True).checked is True

    def test_set_checked_skips_gate(
        self, journal_service, chart_of_accounts, create_journal, create_payroll_payment
    ):
        journal = create_journal("20250420", debit="1011", credit="4011")
        create_payroll_payment("2025", 4)

        assert journal_service.set_checked(journal.id, "2025", True).checked is True

    def test_stale_version_conflict(
        self, session, journal_service, chart_of_accounts, create_journal
    ):
        journal = create_journal("20250415", debit="1011", credit="4011")
        # Another writer bumps the row behind the identity map's back
        session.execute(
            text("UPDATE journals SET version = version + 1 WHERE id = :id"),
            {"id": journal.id},
        )

        with pytest.raises(OptimisticLockError) as exc_info:
            journal_service.update_checked(journal.id, "2025", True)

        assert exc_info.value.journal_id == journal.id
        assert exc_info.value.kind.value == "CONFLICT"

    def test_logs_update(self, journal_service, chart_of_accounts, create_journal, captured_logs):
        journal = create_journal("20250415", debit="1011", credit="4011")

        journal_service.update_checked(journal.id, "2025", True)

        (record,) = [r for r in captured_logs() if r["message"] == "journal_checked_updated"]
        assert record["journal_id"] == journal.id
        assert record["previous"] is False
        assert record["checked"] is True

    def test_timestamp_moves_forward(
        self, journal_service, deterministic_clock, chart_of_accounts, create_journal
    ):
        journal = create_journal("20250415", debit="1011", credit="4011")
        first = journal_service.update_checked(journal.id, "2025", True).updated_at
        deterministic_clock.advance(5)

        second = journal_service.update_checked(journal.id, "2025", False).updated_at

        assert second - first == timedelta(seconds=5)
