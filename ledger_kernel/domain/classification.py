"""
Classification -- immutable account lookup table.

Responsibility:
    Resolve an account code (saimoku) to its category (kamoku), top-level
    bucket and balance side in O(1), so aggregations never re-join the chart
    of accounts per journal row.

Architecture position:
    Kernel > Domain -- pure, zero I/O.  Built from plain records by
    ReferenceDataLoader (service layer) and passed explicitly to the
    components that classify.  There is no module-level singleton.

Invariants enforced:
    - An account's side is the side of its category's bucket.
    - Account code ambiguity: when the same code exists under several
      categories, the row with the minimum id wins.  The tie-break is
      deterministic and applied once, at build time.
    - Accounts whose category or bucket is missing are not classifiable.

Failure modes:
    - AccountNotFoundError from classify() for an unknown account code.
    - UnknownBucketError from bucket() for an unknown bucket code.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from ledger_kernel.exceptions import AccountNotFoundError, UnknownBucketError
from ledger_kernel.models.account import BalanceSide, BucketKind


def _freeze(value: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(value or {}))


@dataclass(frozen=True)
class BucketRecord:
    code: str
    name: str
    kind: BucketKind
    side: BalanceSide
    carryover: bool = False


@dataclass(frozen=True)
class CategoryRecord:
    code: str
    name: str
    bucket_code: str
    custom_fields: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AccountRecord:
    id: int
    code: str
    category_code: str
    full_name: str
    short_name: str | None = None
    kana_name: str | None = None
    custom_fields: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AccountClassification:
    """Resolved classification of one account code."""

    account_id: int
    account_code: str
    full_name: str
    short_name: str | None
    kana_name: str | None
    category_code: str
    category_name: str
    bucket_code: str
    bucket_name: str
    bucket_kind: BucketKind
    side: BalanceSide
    account_custom_fields: Mapping[str, Any]
    category_custom_fields: Mapping[str, Any]


@dataclass(frozen=True)
class ClassificationTable:
    """
    Immutable account-code lookup table.

    Contract:
        Build once per engine call with ``build()``; share by reference.

    Guarantees:
        - classify() is a dictionary lookup.
        - Iteration helpers return codes in ascending code order.
    """

    buckets: Mapping[str, BucketRecord]
    categories: Mapping[str, CategoryRecord]
    accounts: Mapping[str, AccountClassification]

    @classmethod
    def build(
        cls,
        buckets: Iterable[BucketRecord],
        categories: Iterable[CategoryRecord],
        accounts: Iterable[AccountRecord],
    ) -> ClassificationTable:
        bucket_map = {b.code: b for b in buckets}
        category_map = {
            c.code: CategoryRecord(c.code, c.name, c.bucket_code, _freeze(c.custom_fields))
            for c in categories
        }

        account_map: dict[str, AccountClassification] = {}
        for acc in sorted(accounts, key=lambda a: a.id):
            if acc.code in account_map:
                # Minimum id already recorded.
                continue
            category = category_map.get(acc.category_code)
            if category is None:
                continue
            bucket = bucket_map.get(category.bucket_code)
            if bucket is None:
                continue
            account_map[acc.code] = AccountClassification(
                account_id=acc.id,
                account_code=acc.code,
                full_name=acc.full_name,
                short_name=acc.short_name,
                kana_name=acc.kana_name,
                category_code=category.code,
                category_name=category.name,
                bucket_code=bucket.code,
                bucket_name=bucket.name,
                bucket_kind=BucketKind(bucket.kind),
                side=BalanceSide(bucket.side),
                account_custom_fields=_freeze(acc.custom_fields),
                category_custom_fields=category.custom_fields,
            )

        return cls(
            buckets=MappingProxyType(bucket_map),
            categories=MappingProxyType(category_map),
            accounts=MappingProxyType(account_map),
        )

    def __contains__(self, account_code: object) -> bool:
        return account_code in self.accounts

    def get(self, account_code: str) -> AccountClassification | None:
        return self.accounts.get(account_code)

    def classify(self, account_code: str) -> AccountClassification:
        """Resolve an account code.

        Raises:
            AccountNotFoundError: account_code has no classification.
        """
        try:
            return self.accounts[account_code]
        except KeyError:
            raise AccountNotFoundError(account_code) from None

    def bucket(self, bucket_code: str) -> BucketRecord:
        try:
            return self.buckets[bucket_code]
        except KeyError:
            raise UnknownBucketError(bucket_code) from None

    def buckets_of_kind(self, kind: BucketKind) -> list[BucketRecord]:
        return sorted(
            (b for b in self.buckets.values() if b.kind == kind),
            key=lambda b: b.code,
        )

    def accounts_in_bucket(self, bucket_code: str) -> list[AccountClassification]:
        return sorted(
            (a for a in self.accounts.values() if a.bucket_code == bucket_code),
            key=lambda a: a.account_code,
        )

    def accounts_in_categories(
        self, category_codes: Iterable[str]
    ) -> list[AccountClassification]:
        wanted = set(category_codes)
        return sorted(
            (a for a in self.accounts.values() if a.category_code in wanted),
            key=lambda a: a.account_code,
        )

    def account_codes(self) -> list[str]:
        return sorted(self.accounts)
