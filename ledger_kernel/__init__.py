"""
Ledger Kernel - fiscal-year ledger and aggregation engine.

A double-entry bookkeeping core for Japanese fiscal years (April-March) with:
- Fiscal-month arithmetic and ordering
- Two-level chart of accounts (category -> account) under top-level buckets
- Soft-deletable journal store with a review ("checked") flag
- Payroll lock gate freezing reviewed months once payroll is paid
- Aggregations: usage counts, breakdowns by month/year, cash balances
"""

__version__ = "0.1.0"
