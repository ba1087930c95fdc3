"""
Module: ledger_kernel.selectors.movement_selector
Responsibility: Summed journal amounts per account code (optionally per
    calendar month) -- the raw input of every breakdown and balance report.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Debit totals sum debit_amount over rows where the account is the
      debit account; credit totals sum credit_amount where it is the credit
      account.  A row with the same account on both sides contributes to both.
    - There are no stored balances; every figure is derived at query time.
    - Soft-deleted journals are excluded.

Audit relevance:
    Roll-ups by category and bucket are computed from these rows in
    ledger_reports, through the ClassificationTable.
"""

from decimal import Decimal
from typing import Iterable

from sqlalchemy import func, select

from ledger_kernel.domain.dtos import AccountMovement, JournalInfo
from ledger_kernel.models.journal import Journal
from ledger_kernel.selectors.base import BaseSelector, not_deleted, to_decimal
from ledger_kernel.selectors.journal_selector import journal_month_column


class MovementSelector(BaseSelector):
    """Per-account debit/credit sums for a fiscal year."""

    def account_movements(
        self,
        fiscal_year: str,
        by_month: bool = False,
        account_codes: Iterable[str] | None = None,
    ) -> list[AccountMovement]:
        """
        Sum debit and credit amounts per account code.

        Args:
            by_month: group additionally by calendar month.
            account_codes: restrict to these codes (None = all codes).

        Returns:
            AccountMovement rows ordered by account code, then month.  Only
            (account, month) pairs with at least one journal are present.
        """
        codes = sorted(set(account_codes)) if account_codes is not None else None
        if codes is not None and not codes:
            return []

        totals: dict[tuple[str, int | None], list[Decimal]] = {}

        for column, amount, slot in (
            (Journal.debit_account_code, Journal.debit_amount, 0),
            (Journal.credit_account_code, Journal.credit_amount, 1),
        ):
            code_col = column.label("account_code")
            columns = [code_col, func.sum(amount).label("total")]
            group_by = [column]
            if by_month:
                month = journal_month_column().label("month")
                columns.insert(1, month)
                group_by.append(month)

            query = (
                select(*columns)
                .where(Journal.fiscal_year == fiscal_year, not_deleted())
                .group_by(*group_by)
            )
            if codes is not None:
                query = query.where(column.in_(codes))

            for row in self.session.execute(query).all():
                key = (row.account_code, int(row.month) if by_month else None)
                pair = totals.setdefault(key, [Decimal("0"), Decimal("0")])
                pair[slot] += to_decimal(row.total)

        return [
            AccountMovement(
                account_code=code,
                month=month,
                debit_total=debit,
                credit_total=credit,
            )
            for (code, month), (debit, credit) in sorted(
                totals.items(), key=lambda item: (item[0][0], item[0][1] or 0)
            )
        ]

    def journals_crediting(
        self,
        fiscal_year: str,
        account_codes: Iterable[str],
    ) -> list[JournalInfo]:
        """Non-deleted journals whose credit account is one of account_codes."""
        codes = sorted(set(account_codes))
        if not codes:
            return []
        models = self.session.execute(
            select(Journal)
            .where(
                Journal.fiscal_year == fiscal_year,
                not_deleted(),
                Journal.credit_account_code.in_(codes),
            )
            .order_by(Journal.date, Journal.id)
        ).scalars().all()
        return [JournalInfo.from_model(m) for m in models]
