"""
Tests for the pure report builders in ledger_reports/breakdowns.py.

No database: movements and journals are constructed directly.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from ledger_kernel.domain.classification import (
    AccountRecord,
    BucketRecord,
    CategoryRecord,
    ClassificationTable,
)
from ledger_kernel.domain.dtos import AccountMovement, JournalInfo
from ledger_kernel.exceptions import UnknownBucketError
from ledger_kernel.models.account import BalanceSide, BucketKind
from ledger_reports.breakdowns import (
    build_cash_balance,
    build_custom_breakdown,
    build_fixed_breakdown,
    build_payroll_summary,
    cash_account_codes,
    net_amount,
    payroll_account_codes,
    render_to_dict,
)
from ledger_reports.config import ReportingConfig
from ledger_reports.models import (
    BreakdownKind,
    BreakdownLevel,
    BreakdownMode,
    CustomBreakdownRequest,
    FixedBreakdownRequest,
    TimeUnit,
)

FY = "2025"
AT = datetime(2025, 4, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def table() -> ClassificationTable:
    return ClassificationTable.build(
        buckets=[
            BucketRecord("11", "流動資産", BucketKind.ASSET, BalanceSide.LEFT),
            BucketRecord("21", "流動負債", BucketKind.LIABILITY, BalanceSide.RIGHT),
            BucketRecord("41", "売上高", BucketKind.REVENUE, BalanceSide.RIGHT),
            BucketRecord("51", "販管費", BucketKind.EXPENSE, BalanceSide.LEFT),
            BucketRecord("91", "繰越", BucketKind.CLOSING, BalanceSide.LEFT),
        ],
        categories=[
            CategoryRecord("101", "現金", "11"),
            CategoryRecord("102", "普通預金", "11"),
            CategoryRecord("111", "売掛金", "11"),
            CategoryRecord("201", "預り金", "21"),
            CategoryRecord("202", "未払金", "21"),
            CategoryRecord("401", "売上高", "41", {"pl_line": "sales"}),
            CategoryRecord("501", "給料手当", "51"),
            CategoryRecord("502", "通信費", "51"),
            CategoryRecord("901", "前期繰越", "91"),
        ],
        accounts=[
            AccountRecord(1, "1011", "101", "現金"),
            AccountRecord(2, "1021", "102", "三井住友銀行", "三井住友"),
            AccountRecord(3, "1022", "102", "ゆうちょ銀行"),
            AccountRecord(4, "1111", "111", "売掛金"),
            AccountRecord(5, "2011", "201", "預り金(所得税)", custom_fields={"category": "payroll_deduction"}),
            AccountRecord(6, "2012", "201", "預り金(住民税)", custom_fields={"category": "payroll_deduction"}),
            AccountRecord(7, "2021", "202", "未払給与", custom_fields={"category": "payroll_base"}),
            AccountRecord(8, "2022", "202", "立替経費", custom_fields={"category": "payroll_addition"}),
            AccountRecord(9, "4011", "401", "売上高", custom_fields={"tax": "10%"}),
            AccountRecord(10, "5011", "501", "給料手当"),
            AccountRecord(11, "5021", "502", "通信費"),
            AccountRecord(12, "9011", "901", "前期繰越", custom_fields={"category": "fiscal_carryover"}),
        ],
    )


def mv(code: str, month: int | None, debit: int = 0, credit: int = 0) -> AccountMovement:
    return AccountMovement(code, month, Decimal(debit), Decimal(credit))


def journal(date: str, debit: str, credit: str, amount: int, journal_id: int = 1) -> JournalInfo:
    return JournalInfo(
        id=journal_id,
        fiscal_year=FY,
        date=date,
        debit_account_code=debit,
        debit_amount=Decimal(amount),
        credit_account_code=credit,
        credit_amount=Decimal(amount),
        note=None,
        checked=True,
        deleted=False,
        version=1,
        created_at=AT,
        updated_at=AT,
    )


class TestNetAmount:

    def test_left_side(self):
        assert net_amount(BalanceSide.LEFT, Decimal("100"), Decimal("30")) == Decimal("70")

    def test_right_side(self):
        assert net_amount(BalanceSide.RIGHT, Decimal("100"), Decimal("30")) == Decimal("-70")

    def test_accepts_stored_code(self):
        assert net_amount("R", Decimal("0"), Decimal("5")) == Decimal("5")


class TestFixedBreakdown:

    def test_income_by_month_zero_filled_in_fiscal_order(self, table):
        request = FixedBreakdownRequest(BreakdownKind.INCOME, TimeUnit.MONTH)
        movements = [mv("4011", 4, credit=1000), mv("4011", 1, credit=500, debit=100)]

        report = build_fixed_breakdown(request, FY, movements, table)

        (item,) = report.monthly
        assert item.code == "4011"
        assert item.custom_fields["tax"] == "10%"
        assert [v.month for v in item.values] == [4, 5, 6, 7, 8, 9, 10, 11, 12, 1, 2, 3]
        values = {v.month: v.value for v in item.values}
        assert values[4] == Decimal("1000")
        assert values[1] == Decimal("400")
        assert values[5] == Decimal("0")
        assert item.total == Decimal("1400")

    def test_sparse_months_when_not_zero_filled(self, table):
        request = FixedBreakdownRequest(BreakdownKind.EXPENSE, TimeUnit.MONTH)
        movements = [mv("5021", 2, debit=80), mv("5021", 6, debit=20)]

        report = build_fixed_breakdown(request, FY, movements, table, zero_fill_months=False)

        assert [v.month for v in report.monthly[0].values] == [6, 2]

    def test_other_kinds_ignored(self, table):
        request = FixedBreakdownRequest(BreakdownKind.ASSET, TimeUnit.ANNUAL)
        movements = [mv("1011", None, debit=1000, credit=200), mv("4011", None, credit=1000)]

        report = build_fixed_breakdown(request, FY, movements, table)

        assert [(i.code, i.value) for i in report.annual] == [("1011", Decimal("800"))]
        assert report.monthly == ()

    def test_unclassifiable_codes_ignored(self, table):
        request = FixedBreakdownRequest(BreakdownKind.ASSET, TimeUnit.ANNUAL)

        report = build_fixed_breakdown(request, FY, [mv("0000", None, debit=5)], table)

        assert report.annual == ()

    def test_monthly_sums_equal_annual(self, table):
        monthly_movements = [
            mv("5011", 4, debit=300000),
            mv("5011", 5, debit=300000),
            mv("5021", 4, debit=5000, credit=500),
            mv("5021", 3, debit=7000),
        ]
        annual_movements = [
            mv("5011", None, debit=600000),
            mv("5021", None, debit=12000, credit=500),
        ]
        monthly = build_fixed_breakdown(
            FixedBreakdownRequest(BreakdownKind.EXPENSE, TimeUnit.MONTH),
            FY, monthly_movements, table,
        )
        annual = build_fixed_breakdown(
            FixedBreakdownRequest(BreakdownKind.EXPENSE, TimeUnit.ANNUAL),
            FY, annual_movements, table,
        )

        assert {i.code: i.total for i in monthly.monthly} == {
            i.code: i.value for i in annual.annual
        }


class TestCustomBreakdown:

    def test_account_level_net(self, table):
        request = CustomBreakdownRequest(
            "11", BreakdownLevel.ACCOUNT, BreakdownMode.NET, TimeUnit.ANNUAL
        )
        movements = [
            mv("1011", None, debit=1000, credit=300),
            mv("1021", None, debit=500),
            mv("4011", None, credit=999),
        ]

        report = build_custom_breakdown(request, FY, movements, table)

        assert [(i.code, i.value) for i in report.annual] == [
            ("1011", Decimal("700")),
            ("1021", Decimal("500")),
        ]
        assert report.annual[1].short_name == "三井住友"

    def test_category_level_debit_mode(self, table):
        request = CustomBreakdownRequest(
            "11", BreakdownLevel.CATEGORY, BreakdownMode.DEBIT, TimeUnit.ANNUAL
        )
        movements = [
            mv("1021", None, debit=500, credit=100),
            mv("1022", None, debit=250),
            mv("1011", None, debit=10),
        ]

        report = build_custom_breakdown(request, FY, movements, table)

        assert [(i.code, i.name, i.value) for i in report.annual] == [
            ("101", "現金", Decimal("10")),
            ("102", "普通預金", Decimal("750")),
        ]

    def test_bucket_level_credit_mode_monthly_is_sparse(self, table):
        request = CustomBreakdownRequest(
            "41", BreakdownLevel.BUCKET, BreakdownMode.CREDIT, TimeUnit.MONTH
        )
        movements = [mv("4011", 2, credit=700), mv("4011", 10, credit=300, debit=50)]

        report = build_custom_breakdown(request, FY, movements, table)

        (item,) = report.monthly
        assert item.code == "41"
        assert item.name == "売上高"
        assert [(v.month, v.value) for v in item.values] == [
            (10, Decimal("300")),
            (2, Decimal("700")),
        ]

    def test_category_custom_fields(self, table):
        request = CustomBreakdownRequest(
            "41", BreakdownLevel.CATEGORY, BreakdownMode.NET, TimeUnit.ANNUAL
        )

        report = build_custom_breakdown(request, FY, [mv("4011", None, credit=1)], table)

        assert report.annual[0].custom_fields["pl_line"] == "sales"

    def test_right_side_net(self, table):
        request = CustomBreakdownRequest(
            "21", BreakdownLevel.ACCOUNT, BreakdownMode.NET, TimeUnit.ANNUAL
        )

        report = build_custom_breakdown(
            request, FY, [mv("2021", None, debit=290000, credit=300000)], table
        )

        assert report.annual[0].value == Decimal("10000")

    def test_unknown_bucket(self, table):
        request = CustomBreakdownRequest(
            "77", BreakdownLevel.ACCOUNT, BreakdownMode.NET, TimeUnit.ANNUAL
        )
        with pytest.raises(UnknownBucketError):
            build_custom_breakdown(request, FY, [], table)


class TestCashBalance:

    def test_cash_accounts(self, table):
        assert cash_account_codes(table, ReportingConfig()) == ["1011", "1021", "1022"]

    def test_non_asset_category_ignored(self, table):
        config = ReportingConfig(cash_category_codes=("101", "401"))
        assert cash_account_codes(table, config) == ["1011"]

    def test_single_debit(self, table):
        report = build_cash_balance(FY, [mv("1011", None, debit=1000)], table, ReportingConfig())

        assert report.total == Decimal("1000")
        entries = {e.category_code: e for e in report.entries}
        assert entries["101"].amount == Decimal("1000")
        assert entries["101"].label == "現金"
        assert entries["101"].percentage == Decimal("100.0")
        assert entries["102"].amount == Decimal("0")
        assert entries["102"].percentage == Decimal("0")

    def test_debit_sums_by_category_with_shares(self, table):
        # credits to cash accounts do not lower the figures
        movements = [
            mv("1011", None, debit=300, credit=250),
            mv("1021", None, debit=500, credit=100),
            mv("1022", None, debit=200),
        ]

        report = build_cash_balance(FY, movements, table, ReportingConfig())

        assert [(e.category_code, e.amount, e.percentage) for e in report.entries] == [
            ("101", Decimal("300"), Decimal("30.0")),
            ("102", Decimal("700"), Decimal("70.0")),
        ]
        assert report.total == Decimal("1000")

    def test_zero_total(self, table):
        report = build_cash_balance(FY, [], table, ReportingConfig())

        assert report.total == Decimal("0")
        assert all(e.percentage == Decimal("0") for e in report.entries)


class TestPayrollSummary:

    def test_payroll_accounts(self, table):
        assert payroll_account_codes(table, ReportingConfig()) == ["2011", "2012", "2021", "2022"]

    def test_month_summary(self, table):
        journals = [
            journal("20250425", "5011", "2021", 300000, 1),
            journal("20250425", "2021", "2011", 10000, 2),
            journal("20250425", "2021", "2012", 15000, 3),
            journal("20250425", "2021", "2011", 2000, 4),
            journal("20250425", "2021", "2022", 5000, 5),
            journal("20250425", "2011", "2021", 3000, 6),
            journal("20250401", "9011", "2021", 50000, 7),
            journal("20250525", "5011", "2021", 300000, 8),
        ]

        report = build_payroll_summary(FY, journals, table, ReportingConfig())

        assert [m.year_month for m in report.months] == ["202504", "202505"]
        april = report.months[0]
        assert april.base_pay == Decimal("300000")
        assert [(d.code, d.amount) for d in april.deductions] == [
            ("2011", Decimal("12000")),
            ("2012", Decimal("15000")),
        ]
        assert [(a.code, a.name, a.amount) for a in april.additions] == [
            ("2022", "立替経費", Decimal("5000")),
            ("2021", "年末調整還付 (未払給与)", Decimal("3000")),
        ]
        assert april.total_deductions == Decimal("27000")
        assert april.total_additions == Decimal("8000")
        assert april.net_payment == Decimal("281000")
        assert report.months[1].net_payment == Decimal("300000")

    def test_non_payroll_credit_ignored(self, table):
        report = build_payroll_summary(
            FY, [journal("20250425", "2021", "1021", 285000)], table, ReportingConfig()
        )
        assert report.months == ()


class TestRender:

    def test_payroll_totals_rendered(self, table):
        report = build_payroll_summary(
            FY, [journal("20250425", "5011", "2021", 1000)], table, ReportingConfig()
        )

        data = render_to_dict(report)

        assert data["months"][0]["base_pay"] == "1000"
        assert data["months"][0]["net_payment"] == "1000"

    def test_request_type_rendered(self, table):
        request = FixedBreakdownRequest(BreakdownKind.ASSET, TimeUnit.ANNUAL, FY)
        report = build_fixed_breakdown(request, FY, [mv("1011", None, debit=5)], table)

        data = render_to_dict(report)

        assert data["request"]["type"] == "asset-by-year"
        assert data["request"]["kind"] == "asset"
        assert data["annual"][0]["value"] == "5"
