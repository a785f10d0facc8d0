"""Debt Service Coverage Ratio per reporting period."""

from typing import Dict, Optional

from .debts import prorate
from .financials import CURRENT_YEAR, PERIODS, PRIOR_YEAR, YTD
from .schemas import DebtSummary, DscrYearResult, YearFinancialSummary

# Lender thresholds. Fixed business constants, not per-lender settings.
STRONG_DSCR = 1.25
MINIMUM_DSCR = 1.00

STRONG = "strong"
BORDERLINE = "borderline"
INSUFFICIENT = "insufficient"


def calculate_dscr(
    adjusted_ebitda: float,
    existing_annual_debt_service: float,
    annualized_loan_payment: float,
) -> DscrYearResult:
    """adjustedEbitda / (existing debt service + new loan payment).

    ``dscr`` is None unless both the total debt service and the adjusted
    EBITDA are positive. No rounding happens here.
    """
    total_debt_service = existing_annual_debt_service + annualized_loan_payment
    if total_debt_service > 0 and adjusted_ebitda > 0:
        dscr = adjusted_ebitda / total_debt_service
    else:
        dscr = None
    return DscrYearResult(
        adjusted_ebitda=adjusted_ebitda,
        annual_debt_service=existing_annual_debt_service,
        annualized_loan_payment=annualized_loan_payment,
        total_debt_service=total_debt_service,
        dscr=dscr,
    )


def existing_debt_service(period: str, annual_debt_service: float, ytd_month: int) -> float:
    if period == YTD:
        return prorate(annual_debt_service, ytd_month)
    return annual_debt_service


def loan_payment_for(period: str, annualized_loan: float, ytd_month: int) -> float:
    """New loan payment counted against a period.

    The prior year predates the loan; the most recent full year carries the
    whole annualized payment; the YTD period carries its share.
    """
    if period == PRIOR_YEAR:
        return 0.0
    if period == CURRENT_YEAR:
        return annualized_loan
    return prorate(annualized_loan, ytd_month)


def calculate_period_dscrs(
    summaries: Dict[str, YearFinancialSummary],
    debt_summary: DebtSummary,
    annualized_loan: float,
    ytd_month: int,
) -> Dict[str, DscrYearResult]:
    results = {}
    for period in PERIODS:
        summary = summaries.get(period) or YearFinancialSummary()
        results[period] = calculate_dscr(
            summary.adjusted_ebitda,
            existing_debt_service(period, debt_summary.annual_debt_service, ytd_month),
            loan_payment_for(period, annualized_loan, ytd_month),
        )
    return results


def rate_dscr(dscr: Optional[float]) -> Optional[str]:
    if dscr is None:
        return None
    if dscr >= STRONG_DSCR:
        return STRONG
    if dscr >= MINIMUM_DSCR:
        return BORDERLINE
    return INSUFFICIENT
