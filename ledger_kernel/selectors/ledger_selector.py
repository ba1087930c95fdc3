"""
Module: ledger_kernel.selectors.ledger_selector
Responsibility: Per-account usage counts over a fiscal year, and the journal
    count within one ledger (account) for a month or the whole year.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - A journal counts once per account even when the account appears on
      both of its sides.
    - Accounts with zero usage still appear (left-join semantics, count 0).
    - Representative names and category of an account code come from the
      ClassificationTable (minimum-id tie-break), not from the join.
    - Soft-deleted journals are never counted.

Failure modes:
    - UnknownLedgerError (VALIDATION) from count_ledgers() when the account
      code has no classification.
"""

from sqlalchemy import and_, case, false, func, or_, select, true

from ledger_kernel.domain.classification import ClassificationTable
from ledger_kernel.domain.dtos import AccountUsageCount, CheckedFilter, MonthFilter
from ledger_kernel.domain.fiscal_calendar import year_month_prefix
from ledger_kernel.exceptions import UnknownLedgerError
from ledger_kernel.models.account import Account
from ledger_kernel.models.journal import Journal
from ledger_kernel.selectors.base import BaseSelector, not_deleted


def _touches_account(account_code):
    return or_(
        Journal.debit_account_code == account_code,
        Journal.credit_account_code == account_code,
    )


class LedgerSelector(BaseSelector):
    """Usage-count queries keyed by account code."""

    def count_by_account(
        self,
        fiscal_year: str,
        table: ClassificationTable,
    ) -> list[AccountUsageCount]:
        """
        One row per classifiable account with its journal counts.

        Postconditions: rows are ordered by account code.  An account with
            no journals in the fiscal year has count == checked_count == 0.
        """
        count = func.count(Journal.id.distinct()).label("count")
        checked_count = func.count(
            case((Journal.checked == true(), Journal.id)).distinct()
        ).label("checked_count")

        rows = self.session.execute(
            select(Account.code.label("account_code"), count, checked_count)
            .select_from(Account)
            .outerjoin(
                Journal,
                and_(
                    _touches_account(Account.code),
                    Journal.fiscal_year == fiscal_year,
                    not_deleted(),
                ),
            )
            .group_by(Account.code)
            .order_by(Account.code)
        ).all()
        counts = {
            row.account_code: (int(row.count), int(row.checked_count)) for row in rows
        }

        result: list[AccountUsageCount] = []
        for code in table.account_codes():
            entry = table.classify(code)
            total, checked = counts.get(code, (0, 0))
            result.append(
                AccountUsageCount(
                    account_code=code,
                    full_name=entry.full_name,
                    short_name=entry.short_name,
                    kana_name=entry.kana_name,
                    category_code=entry.category_code,
                    category_name=entry.category_name,
                    bucket_code=entry.bucket_code,
                    bucket_name=entry.bucket_name,
                    count=total,
                    checked_count=checked,
                )
            )
        return result

    def count_ledgers(
        self,
        fiscal_year: str,
        account_code: str,
        table: ClassificationTable,
        month: MonthFilter = MonthFilter(),
        checked: CheckedFilter = CheckedFilter.ALL,
        note: str | None = None,
    ) -> int:
        """
        Count non-deleted journals touching one account.

        Args:
            month: MonthFilter(None) counts the whole fiscal year.
            checked: restrict to reviewed / unreviewed journals.
            note: substring match on the journal note.

        Raises:
            UnknownLedgerError: account_code has no classification.
        """
        if account_code not in table:
            raise UnknownLedgerError(account_code)

        query = (
            select(func.count(Journal.id))
            .where(
                Journal.fiscal_year == fiscal_year,
                not_deleted(),
                _touches_account(account_code),
            )
        )

        if month.month is not None:
            prefix = year_month_prefix(fiscal_year, month.month)
            query = query.where(Journal.date.startswith(prefix))

        if checked is CheckedFilter.CHECKED:
            query = query.where(Journal.checked == true())
        elif checked is CheckedFilter.UNCHECKED:
            query = query.where(Journal.checked == false())

        if note:
            query = query.where(Journal.note.contains(note, autoescape=True))

        return int(self.session.execute(query).scalar_one())
