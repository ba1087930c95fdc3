"""
Reference Data Loader - builds the ClassificationTable from the database.

Keeps database access out of the pure domain layer: the loader reads the
chart of accounts once and hands an immutable table to whoever classifies.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from ledger_kernel.domain.classification import (
    AccountRecord,
    BucketRecord,
    CategoryRecord,
    ClassificationTable,
)
from ledger_kernel.models.account import (
    Account,
    AccountBucket,
    AccountCategory,
    BalanceSide,
    BucketKind,
)


class ReferenceDataLoader:
    """Loads the chart of accounts into a ClassificationTable."""

    def __init__(self, session: Session):
        self._session = session

    def load(self) -> ClassificationTable:
        return ClassificationTable.build(
            buckets=self._load_buckets(),
            categories=self._load_categories(),
            accounts=self._load_accounts(),
        )

    def _load_buckets(self) -> list[BucketRecord]:
        rows = self._session.execute(select(AccountBucket)).scalars().all()
        return [
            BucketRecord(
                code=r.code,
                name=r.name,
                kind=BucketKind(r.kind),
                side=BalanceSide(r.side),
                carryover=r.carryover,
            )
            for r in rows
        ]

    def _load_categories(self) -> list[CategoryRecord]:
        rows = self._session.execute(select(AccountCategory)).scalars().all()
        return [
            CategoryRecord(
                code=r.code,
                name=r.name,
                bucket_code=r.bucket_code,
                custom_fields=r.custom_fields or {},
            )
            for r in rows
        ]

    def _load_accounts(self) -> list[AccountRecord]:
        rows = self._session.execute(
            select(Account).order_by(Account.id)
        ).scalars().all()
        return [
            AccountRecord(
                id=r.id,
                code=r.code,
                category_code=r.category_code,
                full_name=r.full_name,
                short_name=r.short_name,
                kana_name=r.kana_name,
                custom_fields=r.custom_fields or {},
            )
            for r in rows
        ]
