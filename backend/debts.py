"""Aggregation of the business debt schedule."""

from typing import Dict, List

from .formatting import parse_amount
from .schemas import CategoryTotals, DebtCategory, DebtEntry, DebtSummary

# Categories whose originalLoanAmount is a credit limit
REVOLVING_CATEGORIES = (DebtCategory.CREDIT_CARD, DebtCategory.LINE_OF_CREDIT)

CATEGORY_LABELS: Dict[DebtCategory, str] = {
    DebtCategory.REAL_ESTATE: "Real Estate",
    DebtCategory.VEHICLE_EQUIPMENT: "Vehicle/Equipment",
    DebtCategory.CREDIT_CARD: "Credit Card",
    DebtCategory.LINE_OF_CREDIT: "Line of Credit",
    DebtCategory.OTHER: "Other",
}

CATEGORY_DESCRIPTIONS: Dict[DebtCategory, str] = {
    DebtCategory.REAL_ESTATE: "Loans secured by property for business use.",
    DebtCategory.VEHICLE_EQUIPMENT: "Loans for business vehicles or equipment.",
    DebtCategory.CREDIT_CARD: "Balances on business credit cards.",
    DebtCategory.LINE_OF_CREDIT: "Revolving credit lines for business use.",
    DebtCategory.OTHER: "Any other miscellaneous business debts.",
}

# Rows per category in the wizard; not checked here.
MAX_ENTRIES_PER_CATEGORY = 5


def summarize_debts(entries: List[DebtEntry]) -> DebtSummary:
    """Monthly/annual debt service, per-category totals and credit utilization."""
    if not isinstance(entries, list):
        raise TypeError(f"summarize_debts expects a list of DebtEntry, got {type(entries).__name__}")

    category_totals = {category: CategoryTotals() for category in DebtCategory}
    for entry in entries:
        totals = category_totals[entry.category]
        totals.total_monthly_payment += parse_amount(entry.monthly_payment)
        totals.total_original_loan_amount += parse_amount(entry.original_loan_amount)
        totals.total_outstanding_balance += parse_amount(entry.outstanding_balance)

    monthly_debt_service = sum(t.total_monthly_payment for t in category_totals.values())
    total_credit_balance = sum(
        category_totals[c].total_outstanding_balance for c in REVOLVING_CATEGORIES
    )
    total_credit_limit = sum(
        category_totals[c].total_original_loan_amount for c in REVOLVING_CATEGORIES
    )
    if total_credit_limit > 0:
        credit_utilization_rate = total_credit_balance / total_credit_limit
    else:
        credit_utilization_rate = None

    return DebtSummary(
        monthly_debt_service=monthly_debt_service,
        annual_debt_service=monthly_debt_service * 12,
        total_credit_balance=total_credit_balance,
        total_credit_limit=total_credit_limit,
        credit_utilization_rate=credit_utilization_rate,
        category_totals=category_totals,
    )


def prorate(annual_amount: float, ytd_month: int) -> float:
    """Share of an annual figure covered by ``ytd_month`` months."""
    return annual_amount * ytd_month / 12


def entries_by_category(entries: List[DebtEntry]) -> Dict[DebtCategory, List[DebtEntry]]:
    grouped: Dict[DebtCategory, List[DebtEntry]] = {category: [] for category in DebtCategory}
    for entry in entries:
        grouped[entry.category].append(entry)
    return grouped
