"""
Reporting Configuration Schema.

Names the categories treated as cash and the custom field that tags
payroll accounts.  Category codes follow the chart of accounts
(101 = 現金, 102 = 普通預金).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Self

from ledger_kernel.logging_config import get_logger

logger = get_logger("reports.config")

PAYROLL_BASE = "payroll_base"
PAYROLL_DEDUCTION = "payroll_deduction"
PAYROLL_ADDITION = "payroll_addition"
FISCAL_CARRYOVER = "fiscal_carryover"


@dataclass(frozen=True)
class ReportingConfig:
    """
    Configuration schema for the reporting module.

    cash_category_codes must name categories under an asset bucket; other
    codes are ignored by the cash balance report.
    """

    # Categories holding cash and cash equivalents
    cash_category_codes: tuple[str, ...] = ("101", "102")

    # Account custom_fields key carrying the payroll tag
    payroll_category_field: str = "category"

    # Fixed breakdowns list every fiscal month, zero when there was no movement
    zero_fill_months: bool = True

    def __post_init__(self):
        if not self.payroll_category_field:
            raise ValueError("payroll_category_field cannot be empty")
        if isinstance(self.cash_category_codes, str):
            raise ValueError("cash_category_codes must be a sequence of codes")

    @classmethod
    def with_defaults(cls) -> Self:
        """Create config with standard defaults."""
        logger.info("reporting_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Create config from dictionary."""
        data = dict(data)
        if "cash_category_codes" in data:
            codes = data["cash_category_codes"]
            if isinstance(codes, str):
                raise ValueError("cash_category_codes must be a list of codes")
            data["cash_category_codes"] = tuple(str(c) for c in codes)
        logger.info(
            "reporting_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        return cls(**data)
