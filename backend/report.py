"""Lender-style cash flow report, rendered as Markdown."""

from typing import List, Optional

import pandas as pd

from .debts import CATEGORY_LABELS, entries_by_category
from .dscr import BORDERLINE, STRONG, STRONG_DSCR, rate_dscr
from .financials import CURRENT_YEAR, PERIODS, PRIOR_YEAR, YTD, period_of
from .formatting import (
    format_currency,
    format_percentage,
    format_ratio,
    parse_amount,
    term_years_label,
    to_number_or_none,
    ytd_month_name,
)
from .schemas import AnalysisResult, DebtCategory

INCOME_STATEMENT_ROWS = [
    ("Revenue", "revenue"),
    ("Cost of Goods Sold", "cogs"),
    ("Gross Profit", "gross_profit"),
    ("Operating Expenses", "operating_expenses"),
    ("Net Income", "net_income"),
    ("Depreciation", "depreciation"),
    ("Amortization", "amortization"),
    ("Interest", "interest"),
    ("Taxes", "taxes"),
    ("EBITDA", "ebitda"),
    ("Non-Recurring Income", "non_recurring_income"),
    ("Non-Recurring Expenses", "non_recurring_expenses"),
    ("Adjusted EBITDA", "adjusted_ebitda"),
]


def period_headers(result: AnalysisResult) -> List[str]:
    month = ytd_month_name(result.financials.year2025_ytd.ytd_month)
    ytd_header = f"2025 YTD - {month}" if month else "2025 YTD"
    return [PRIOR_YEAR, CURRENT_YEAR, ytd_header]


def summary_frame(result: AnalysisResult) -> pd.DataFrame:
    """Income statement summary: one row per line item, one column per period."""
    data = {}
    for header, period in zip(period_headers(result), PERIODS):
        summary = period_of(result.financials, period).summary
        data[header] = [getattr(summary, field) for _, field in INCOME_STATEMENT_ROWS]
    return pd.DataFrame(data, index=[label for label, _ in INCOME_STATEMENT_ROWS])


def debt_frame(result: AnalysisResult) -> pd.DataFrame:
    rows = [
        {
            "Category": CATEGORY_LABELS[entry.category],
            "Description": entry.description,
            "Monthly Payment": parse_amount(entry.monthly_payment),
            "Original Amount / Limit": parse_amount(entry.original_loan_amount),
            "Outstanding Balance": parse_amount(entry.outstanding_balance),
            "Notes": entry.notes,
        }
        for entry in result.debts.entries
    ]
    columns = ["Category", "Description", "Monthly Payment", "Original Amount / Limit", "Outstanding Balance", "Notes"]
    return pd.DataFrame(rows, columns=columns)


def _table(header: List[str], rows: List[List[str]]) -> str:
    lines = [
        "| " + " | ".join(header) + " |",
        "|" + "|".join(["---"] * len(header)) + "|",
    ]
    lines += ["| " + " | ".join(row) + " |" for row in rows]
    return "\n".join(lines)


def dscr_message(dscr: Optional[float], year: str = CURRENT_YEAR) -> str:
    rating = rate_dscr(dscr)
    if rating is None:
        return (
            f"A {year} DSCR could not be calculated: it needs positive adjusted EBITDA "
            "and some debt service."
        )
    shown = f"{format_ratio(dscr)}x"
    if rating == STRONG:
        return f"Great job! Your {year} DSCR of **{shown}** is strong and meets or exceeds most lender requirements."
    if rating == BORDERLINE:
        return f"Your {year} DSCR of **{shown}** covers debt payments, but consider improving it for better loan options."
    return (
        f"Caution: Your {year} DSCR of **{shown}** means your business may not generate "
        "enough cash to cover debt payments."
    )


def _loan_section(result: AnalysisResult) -> str:
    loan = result.loan_info
    rate = to_number_or_none(loan.interest_rate)
    down_pct = to_number_or_none(loan.down_payment_percent)
    proposed = to_number_or_none(loan.proposed_loan)
    if proposed is None:
        proposed = to_number_or_none(loan.desired_amount)
    items = [
        ("Loan Purpose", loan.loan_purpose or "N/A"),
        ("Estimated Term", term_years_label(loan.term) or "N/A"),
        ("Estimated Interest Rate", format_percentage(rate / 100 if rate is not None else None, 2)),
        ("Down Payment %", format_percentage(down_pct / 100 if down_pct is not None else None, 2)),
        ("Estimated Monthly Payment", format_currency(to_number_or_none(loan.estimated_payment))),
        ("Down Payment Amount", format_currency(to_number_or_none(loan.down_payment))),
        ("Annualized Loan Payment", format_currency(to_number_or_none(loan.annualized_loan))),
        ("Proposed Loan Amount", format_currency(proposed)),
    ]
    return "## Loan Request\n\n" + "\n".join(f"- **{label}:** {value}" for label, value in items)


def _dscr_section(result: AnalysisResult) -> str:
    results = [result.dscr_results[p] for p in PERIODS]
    rows = [
        ["Adjusted EBITDA"] + [format_currency(r.adjusted_ebitda) for r in results],
        ["Existing Debt Service"] + [format_currency(r.annual_debt_service) for r in results],
        ["New Loan Payment"] + [format_currency(r.annualized_loan_payment) for r in results],
        ["Total Debt Service"] + [format_currency(r.total_debt_service) for r in results],
        ["DSCR"] + [format_ratio(r.dscr) for r in results],
    ]
    return "\n\n".join(
        [
            "## Debt Service Coverage",
            _table([""] + period_headers(result), rows),
            f"Bank Preference: At Least {STRONG_DSCR:.2f}x",
            dscr_message(result.dscr_results[CURRENT_YEAR].dscr),
        ]
    )


def _income_section(result: AnalysisResult) -> str:
    frame = summary_frame(result)
    rows = [[label] + [format_currency(v) for v in values] for label, values in frame.iterrows()]
    return "## Income Statement Summary\n\n" + _table([""] + list(frame.columns), rows)


def _debt_section(result: AnalysisResult) -> str:
    debts = result.debts
    grouped = entries_by_category(debts.entries)
    rows = []
    for category in DebtCategory:
        totals = debts.category_totals.get(category)
        if totals is None:
            continue
        rows.append(
            [
                CATEGORY_LABELS[category],
                str(len(grouped[category])),
                format_currency(totals.total_monthly_payment),
                format_currency(totals.total_original_loan_amount),
                format_currency(totals.total_outstanding_balance),
            ]
        )
    rows.append(["**Total**", str(len(debts.entries)), format_currency(debts.monthly_debt_service), "", ""])
    table = _table(["Category", "Entries", "Monthly Payment", "Original Amount / Limit", "Outstanding Balance"], rows)
    facts = "\n".join(
        [
            f"- **Monthly Debt Service:** {format_currency(debts.monthly_debt_service)}",
            f"- **Annual Debt Service:** {format_currency(debts.annual_debt_service)}",
            f"- **Revolving Credit Balance:** {format_currency(debts.total_credit_balance)}",
            f"- **Revolving Credit Limit:** {format_currency(debts.total_credit_limit)}",
            f"- **Credit Utilization:** {format_percentage(debts.credit_utilization_rate)}",
        ]
    )
    section = "## Business Debt Summary\n\n" + table + "\n\n" + facts

    detail = debt_frame(result)
    if detail.empty:
        return section
    money = ["Monthly Payment", "Original Amount / Limit", "Outstanding Balance"]
    detail[money] = detail[money].map(format_currency)
    rows = [[str(v) for v in values] for values in detail.itertuples(index=False)]
    return section + "\n\n### Debt Detail\n\n" + _table(list(detail.columns), rows)


def render_report(result: AnalysisResult) -> str:
    loan = result.loan_info
    title = "# Comprehensive Cash Flow Analysis"
    header = [title]
    if loan.business_name:
        header.append(f"**Business:** {loan.business_name}")
    owner = " ".join(n for n in (loan.first_name, loan.last_name) if n)
    if owner:
        header.append(f"**Prepared for:** {owner}")
    ytd = period_of(result.financials, YTD)
    header.append(f"**YTD Through:** {ytd_month_name(ytd.ytd_month) or 'N/A'}")

    return "\n\n".join(
        [
            "\n\n".join(header),
            _loan_section(result),
            _dscr_section(result),
            _income_section(result),
            _debt_section(result),
        ]
    ) + "\n"
