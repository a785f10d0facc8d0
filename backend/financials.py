"""Per-year income statement summaries.

One ``YearFinancialInput`` (free text, as typed into the wizard) becomes one
``YearFinancialSummary``:

    grossProfit    = revenue - cogs
    netIncome      = grossProfit - operatingExpenses
    ebitda         = netIncome + depreciation + amortization + interest + taxes
    adjustedEbitda = ebitda - nonRecurringIncome + nonRecurringExpenses

Losses are legitimate input, so nothing is clamped at zero.
"""

from typing import Dict, Optional

from .formatting import parse_amount
from .schemas import (
    FinancialsPayload,
    FinancialsPeriod,
    YearFinancialInput,
    YearFinancialSummary,
)

PRIOR_YEAR = "2023"
CURRENT_YEAR = "2024"
YTD = "2025YTD"
PERIODS = (PRIOR_YEAR, CURRENT_YEAR, YTD)

# Period key -> attribute on FinancialsPayload
PERIOD_FIELDS = {
    PRIOR_YEAR: "year2023",
    CURRENT_YEAR: "year2024",
    YTD: "year2025_ytd",
}


def summarize_year(data: Optional[YearFinancialInput], skip: bool = False) -> YearFinancialSummary:
    if data is None or skip:
        data = YearFinancialInput()

    revenue = parse_amount(data.revenue, allow_negative=True)
    cogs = parse_amount(data.cogs, allow_negative=True)
    operating_expenses = parse_amount(data.operating_expenses, allow_negative=True)
    non_recurring_income = parse_amount(data.non_recurring_income, allow_negative=True)
    non_recurring_expenses = parse_amount(data.non_recurring_expenses, allow_negative=True)
    depreciation = parse_amount(data.depreciation, allow_negative=True)
    amortization = parse_amount(data.amortization, allow_negative=True)
    interest = parse_amount(data.interest, allow_negative=True)
    taxes = parse_amount(data.taxes, allow_negative=True)

    gross_profit = revenue - cogs
    net_income = gross_profit - operating_expenses
    ebitda = net_income + depreciation + amortization + interest + taxes
    adjusted_ebitda = ebitda - non_recurring_income + non_recurring_expenses

    return YearFinancialSummary(
        revenue=revenue,
        cogs=cogs,
        operating_expenses=operating_expenses,
        non_recurring_income=non_recurring_income,
        non_recurring_expenses=non_recurring_expenses,
        depreciation=depreciation,
        amortization=amortization,
        interest=interest,
        taxes=taxes,
        gross_profit=gross_profit,
        net_income=net_income,
        ebitda=ebitda,
        adjusted_ebitda=adjusted_ebitda,
    )


def period_of(payload: FinancialsPayload, period: str) -> FinancialsPeriod:
    return getattr(payload, PERIOD_FIELDS[period])


def summarize_financials(payload: FinancialsPayload) -> Dict[str, YearFinancialSummary]:
    """Summaries keyed by period ("2023", "2024", "2025YTD")."""
    summaries = {}
    for period in PERIODS:
        entry = period_of(payload, period)
        summaries[period] = summarize_year(entry.input, skip=entry.skip)
    return summaries


def with_summaries(payload: FinancialsPayload) -> FinancialsPayload:
    """Copy of ``payload`` whose ``summary`` fields are rebuilt from ``input``."""
    summaries = summarize_financials(payload)
    updates = {
        PERIOD_FIELDS[period]: period_of(payload, period).model_copy(
            update={"summary": summaries[period]}
        )
        for period in PERIODS
    }
    return payload.model_copy(update=updates)
