"""
Report Assembler (``ledger_reports.assembler``).

Responsibility
--------------
Answer several report panels in one round trip: accept a heterogeneous
list of report requests plus a fiscal year, stamp the fiscal year onto
each, dispatch each to the matching ReportingService operation and return
the results in request order.

Invariants enforced
-------------------
* Every request is parsed before any report runs, so one malformed entry
  fails the whole batch without partial work.
* ``_dispatch`` is the single dispatch point over the closed
  ``ReportRequest`` variants; a value outside them is an
  ``UnknownReportTypeError``.
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from ledger_kernel.domain.fiscal_calendar import validate_fiscal_year
from ledger_kernel.exceptions import UnknownReportTypeError
from ledger_kernel.logging_config import get_logger
from ledger_reports.models import (
    CashBalanceRequest,
    CustomBreakdownRequest,
    FixedBreakdownRequest,
    ReportRequest,
    ReportResult,
    parse_report_request,
    with_fiscal_year,
)
from ledger_reports.service import ReportingService

logger = get_logger("reports.assembler")

_VARIANTS = (FixedBreakdownRequest, CustomBreakdownRequest, CashBalanceRequest)


class ReportAssembler:
    """Batch executor for report requests."""

    def __init__(self, service: ReportingService):
        self._service = service

    def prepare(
        self,
        fiscal_year: str,
        requests: Sequence[Mapping[str, Any] | ReportRequest],
    ) -> list[ReportRequest]:
        """Parse transport mappings and stamp the fiscal year on each request."""
        validate_fiscal_year(fiscal_year)
        prepared: list[ReportRequest] = []
        for index, raw in enumerate(requests):
            if isinstance(raw, _VARIANTS):
                request = raw
            elif isinstance(raw, Mapping):
                request = parse_report_request(raw, index)
            else:
                raise UnknownReportTypeError(type(raw).__name__, index)
            prepared.append(with_fiscal_year(request, fiscal_year))
        return prepared

    def run(
        self,
        fiscal_year: str,
        requests: Sequence[Mapping[str, Any] | ReportRequest],
    ) -> list[ReportResult]:
        prepared = self.prepare(fiscal_year, requests)
        results = [self._dispatch(request) for request in prepared]
        logger.info(
            "report_batch_executed",
            extra={
                "fiscal_year": fiscal_year,
                "request_count": len(prepared),
                "report_types": [r.report_type for r in prepared],
            },
        )
        return results

    def _dispatch(self, request: ReportRequest) -> ReportResult:
        fiscal_year = request.fiscal_year
        if isinstance(request, FixedBreakdownRequest):
            return self._service.fixed_breakdown(fiscal_year, request)
        if isinstance(request, CustomBreakdownRequest):
            return self._service.custom_breakdown(fiscal_year, request)
        if isinstance(request, CashBalanceRequest):
            return self._service.cash_balance(fiscal_year)
        raise UnknownReportTypeError(type(request).__name__)
