"""
ReportingService and ReportAssembler tests against the database.

Verifies:
- Cash balance of a single April cash debit.
- Monthly and annual breakdowns of the same journals agree.
- Soft-deleted journals never reach a report.
- The assembler answers a mixed batch in request order and rejects an
  unknown tag before running anything.
"""

from decimal import Decimal

import pytest

from ledger_kernel.exceptions import UnknownBucketError, UnknownReportTypeError
from ledger_reports.assembler import ReportAssembler
from ledger_reports.config import ReportingConfig
from ledger_reports.models import (
    BreakdownKind,
    BreakdownLevel,
    BreakdownMode,
    BreakdownReport,
    CashBalanceReport,
    CashBalanceRequest,
    CustomBreakdownRequest,
    FixedBreakdownRequest,
    TimeUnit,
)
from ledger_reports.service import ReportingService


@pytest.fixture
def reporting(session, chart_of_accounts):
    return ReportingService(session)


@pytest.fixture
def sample_journals(create_journal):
    """A year of sales, expenses and transfers, plus one deleted row."""
    create_journal("20250415", debit="1011", credit="4011", amount=1000)
    create_journal("20250520", debit="1021", credit="4011", amount=50000)
    create_journal("20250525", debit="5021", credit="1021", amount=8000)
    create_journal("20251210", debit="1022", credit="1021", amount=10000)
    create_journal("20260115", debit="1111", credit="4011", amount=30000)
    create_journal("20260310", debit="5021", credit="1011", amount=400)
    create_journal("20250601", debit="1011", credit="4011", amount=99999, deleted=True)


class TestCashBalance:

    def test_single_april_cash_journal(self, reporting, create_journal):
        create_journal("20250415", debit="1011", credit="4011", amount=1000)

        report = reporting.cash_balance("2025")

        cash = next(e for e in report.entries if e.category_code == "101")
        assert cash.amount == Decimal("1000")
        assert cash.label == "現金"
        assert report.total == Decimal("1000")

    def test_payment_from_cash_does_not_lower_balance(self, reporting, create_journal):
        create_journal("20250415", debit="1011", credit="4011", amount=1000)
        create_journal("20250420", debit="5021", credit="1011", amount=300)

        report = reporting.cash_balance("2025")

        cash = next(e for e in report.entries if e.category_code == "101")
        assert cash.amount == Decimal("1000")
        assert report.total == Decimal("1000")

    def test_debit_sums_per_category(self, reporting, sample_journals):
        report = reporting.cash_balance("2025")

        amounts = {e.category_code: e.amount for e in report.entries}
        assert amounts == {"101": Decimal("1000"), "102": Decimal("60000")}
        assert report.total == Decimal("61000")

    def test_custom_cash_categories(self, session, chart_of_accounts, sample_journals):
        service = ReportingService(
            session, config=ReportingConfig(cash_category_codes=("102",))
        )

        report = service.cash_balance("2025")

        assert [e.category_code for e in report.entries] == ["102"]
        assert report.entries[0].percentage == Decimal("100.0")


class TestBreakdowns:

    @pytest.mark.parametrize("kind", list(BreakdownKind))
    def test_monthly_totals_equal_annual(self, reporting, sample_journals, kind):
        monthly = reporting.fixed_breakdown(
            "2025", FixedBreakdownRequest(kind, TimeUnit.MONTH)
        )
        annual = reporting.fixed_breakdown(
            "2025", FixedBreakdownRequest(kind, TimeUnit.ANNUAL)
        )

        assert {i.code: i.total for i in monthly.monthly} == {
            i.code: i.value for i in annual.annual
        }
        assert monthly.monthly

    def test_income_by_month(self, reporting, sample_journals):
        report = reporting.fixed_breakdown(
            "2025", FixedBreakdownRequest(BreakdownKind.INCOME, TimeUnit.MONTH)
        )

        (sales,) = report.monthly
        values = {v.month: v.value for v in sales.values}
        assert values[4] == Decimal("1000")
        assert values[5] == Decimal("50000")
        assert values[1] == Decimal("30000")
        assert values[6] == Decimal("0")
        assert sales.values[-1].month == 3

    def test_custom_breakdown_by_category(self, reporting, sample_journals):
        report = reporting.custom_breakdown(
            "2025",
            CustomBreakdownRequest(
                "11", BreakdownLevel.CATEGORY, BreakdownMode.CREDIT, TimeUnit.ANNUAL
            ),
        )

        assert [(i.code, i.value) for i in report.annual] == [
            ("101", Decimal("400")),
            ("102", Decimal("18000")),
            # debit-only account still has movement in the year
            ("111", Decimal("0")),
        ]

    def test_custom_breakdown_unknown_bucket(self, reporting):
        with pytest.raises(UnknownBucketError):
            reporting.custom_breakdown(
                "2025",
                CustomBreakdownRequest(
                    "77", BreakdownLevel.ACCOUNT, BreakdownMode.NET, TimeUnit.MONTH
                ),
            )

    def test_logs_report(self, reporting, sample_journals, captured_logs):
        reporting.cash_balance("2025")

        (record,) = [r for r in captured_logs() if r["message"] == "report_generated"]
        assert record["report_type"] == "cash-balance"
        assert record["fiscal_year"] == "2025"


class TestPayrollSummary:

    def test_summary_from_journals(self, reporting, create_journal):
        create_journal("20250425", debit="5011", credit="2021", amount=300000)
        create_journal("20250425", debit="2021", credit="2011", amount=10000)
        create_journal("20250425", debit="2021", credit="2012", amount=15000)
        create_journal("20250425", debit="2021", credit="1021", amount=275000)
        create_journal("20250425", debit="2021", credit="2011", amount=5000, deleted=True)

        report = reporting.payroll_summary("2025")

        (april,) = report.months
        assert april.year_month == "202504"
        assert april.base_pay == Decimal("300000")
        assert april.total_deductions == Decimal("25000")
        assert april.net_payment == Decimal("275000")


class TestAssembler:

    def test_mixed_batch_in_request_order(self, reporting, sample_journals):
        results = ReportAssembler(reporting).run(
            "2025",
            [
                {"type": "cash-balance"},
                {"type": "expense-by-year"},
                {
                    "type": "breakdown",
                    "bucketCode": "41",
                    "breakdownLevel": "kamoku_bunrui",
                    "breakdownType": "net",
                    "timeUnit": "month",
                },
                FixedBreakdownRequest(BreakdownKind.ASSET, TimeUnit.MONTH),
            ],
        )

        assert isinstance(results[0], CashBalanceReport)
        assert isinstance(results[1], BreakdownReport)
        assert results[1].request.report_type == "expense-by-year"
        assert results[2].monthly[0].code == "41"
        assert results[3].request.kind is BreakdownKind.ASSET
        assert all(r.fiscal_year == "2025" for r in results)

    def test_fiscal_year_stamped(self, reporting):
        prepared = ReportAssembler(reporting).prepare(
            "2025", [CashBalanceRequest(fiscal_year="1999"), {"type": "income-by-year"}]
        )

        assert [r.fiscal_year for r in prepared] == ["2025", "2025"]

    def test_unknown_tag_fails_whole_batch(self, reporting, captured_logs):
        with pytest.raises(UnknownReportTypeError) as exc_info:
            ReportAssembler(reporting).run(
                "2025", [{"type": "cash-balance"}, {"type": "balance-sheet"}]
            )

        assert exc_info.value.index == 1
        assert not any(r["message"] == "report_generated" for r in captured_logs())

    def test_non_mapping_request(self, reporting):
        with pytest.raises(UnknownReportTypeError):
            ReportAssembler(reporting).run("2025", ["cash-balance"])

    def test_empty_batch(self, reporting):
        assert ReportAssembler(reporting).run("2025", []) == []
