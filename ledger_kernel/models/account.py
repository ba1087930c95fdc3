"""
Module: ledger_kernel.models.account
Responsibility: ORM persistence for the two-level chart of accounts:
    AccountBucket (top-level classification, kamoku bunrui) >
    AccountCategory (kamoku) > Account (saimoku).
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Every Account belongs to exactly one AccountCategory, and every
      AccountCategory to exactly one AccountBucket.
    - An Account's effective side (L = debit-normal, R = credit-normal) is
      inherited from its bucket; accounts carry no side of their own.
    - (code, category_code) is unique on accounts.  The same account code
      under two categories is representable; readers resolve it to the row
      with the minimum id (see ClassificationTable).

Failure modes:
    - AccountNotFoundError when a lookup names an unknown account code.

Audit relevance:
    Reference data.  The ledger never mutates these rows.
"""

from enum import Enum
from typing import Any

from sqlalchemy import JSON, Boolean, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TrackedBase


class BucketKind(str, Enum):
    """Top-level classification of a bucket."""

    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"
    TAX = "tax"
    CLOSING = "closing"


class BalanceSide(str, Enum):
    """Normal balance side, encoded the way the chart of accounts stores it."""

    LEFT = "L"  # debit-normal
    RIGHT = "R"  # credit-normal


class AccountBucket(TrackedBase):
    """
    Top-level account classification.

    Contract:
        side decides the sign convention of every net figure computed for
        accounts under this bucket (L: debit - credit, R: credit - debit).
    """

    __tablename__ = "account_buckets"

    __table_args__ = (
        UniqueConstraint("code", name="uq_account_bucket_code"),
    )

    code: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
    )

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    kind: Mapped[BucketKind] = mapped_column(
        String(20),
        nullable=False,
    )

    side: Mapped[BalanceSide] = mapped_column(
        String(1),
        nullable=False,
    )

    # Balance carries over into the next fiscal year (balance sheet items)
    carryover: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<AccountBucket {self.code}: {self.name}>"


class AccountCategory(TrackedBase):
    """Mid-level grouping of accounts (kamoku)."""

    __tablename__ = "account_categories"

    __table_args__ = (
        UniqueConstraint("code", name="uq_account_category_code"),
        Index("idx_account_category_bucket", "bucket_code"),
    )

    code: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
    )

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    bucket_code: Mapped[str] = mapped_column(
        String(10),
        ForeignKey("account_buckets.code"),
        nullable=False,
    )

    custom_fields: Mapped[dict[str, Any] | None] = mapped_column(
        JSON,
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<AccountCategory {self.code}: {self.name}>"


class Account(TrackedBase):
    """
    Leaf ledger account (saimoku) -- the code journals reference.

    Guarantees:
        - (code, category_code) is unique.

    Non-goals:
        - code alone is NOT unique; see the module docstring.
    """

    __tablename__ = "accounts"

    __table_args__ = (
        UniqueConstraint("code", "category_code", name="uq_account_code_category"),
        Index("idx_account_code", "code"),
    )

    code: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
    )

    category_code: Mapped[str] = mapped_column(
        String(10),
        ForeignKey("account_categories.code"),
        nullable=False,
    )

    full_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    short_name: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
    )

    kana_name: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    custom_fields: Mapped[dict[str, Any] | None] = mapped_column(
        JSON,
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Account {self.code}: {self.full_name}>"
