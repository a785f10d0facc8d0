"""Builds the full analysis from wizard input, and maps it to and from storage.

Every write and every read goes through ``build_analysis`` so summaries,
debt totals and ratios stored in a row are never trusted as the source of
truth; only ``input``, ``entries`` and the loan request are.
"""

import logging
from typing import Any, Dict, List, Optional

from .db import CashFlowAnalysis
from .debts import summarize_debts
from .dscr import calculate_period_dscrs
from .financials import PERIODS, period_of, with_summaries
from .formatting import parse_amount, parse_ytd_month, round2, to_number_or_none
from .schemas import (
    AnalysisInput,
    AnalysisRecord,
    AnalysisResult,
    DebtEntry,
    DebtsSnapshot,
    FinancialsPayload,
    LoanInfo,
)

logger = logging.getLogger(__name__)


def build_analysis(data: AnalysisInput) -> AnalysisResult:
    financials = with_summaries(data.financials)
    summaries = {period: period_of(financials, period).summary for period in PERIODS}
    debt_summary = summarize_debts(list(data.debts))

    ytd_month = parse_ytd_month(financials.year2025_ytd.ytd_month)
    annualized_loan = parse_amount(data.loan_info.annualized_loan)
    results = calculate_period_dscrs(summaries, debt_summary, annualized_loan, ytd_month)

    debts = DebtsSnapshot(
        **debt_summary.model_dump(),
        entries=list(data.debts),
        total_debt_service={p: r.total_debt_service for p, r in results.items()},
        annualized_loan_payments={p: r.annualized_loan_payment for p, r in results.items()},
    )
    return AnalysisResult(
        loan_info=data.loan_info,
        financials=financials,
        debts=debts,
        dscr_results=results,
        dscr={p: round2(r.dscr) for p, r in results.items()},
    )


# ---------------------------
# Storage boundary
# ---------------------------

def normalize_debt_entries(raw: Any) -> List[DebtEntry]:
    """Debt entries from a stored ``debts`` value.

    Older rows hold a bare list, newer ones ``{"entries": [...]}``.
    """
    if raw is None:
        return []
    if isinstance(raw, dict):
        raw = raw.get("entries") or []
    if not isinstance(raw, list):
        logger.warning("Ignoring stored debts of unexpected type %s", type(raw).__name__)
        return []
    return [DebtEntry.model_validate(item) for item in raw if isinstance(item, dict)]


def normalize_financials(raw: Optional[Dict[str, Any]]) -> FinancialsPayload:
    return FinancialsPayload.model_validate(raw or {})


def loan_info_from_row(row: CashFlowAnalysis) -> LoanInfo:
    return LoanInfo(
        business_name=row.business_name,
        first_name=row.first_name,
        last_name=row.last_name,
        loan_purpose=row.loan_purpose,
        desired_amount=row.desired_amount,
        estimated_payment=row.estimated_payment,
        down_payment=row.down_payment,
        down_payment_percent=row.down_payment_percent,
        proposed_loan=row.proposed_loan,
        term=row.term_months,
        interest_rate=row.interest_rate,
        annualized_loan=row.annualized_loan,
    )


def input_from_row(row: CashFlowAnalysis) -> AnalysisInput:
    return AnalysisInput(
        loan_info=loan_info_from_row(row),
        financials=normalize_financials(row.financials),
        debts=normalize_debt_entries(row.debts),
    )


def apply_to_row(row: CashFlowAnalysis, result: AnalysisResult) -> None:
    """Write a freshly built analysis onto a row."""
    loan = result.loan_info
    term = to_number_or_none(loan.term)

    row.business_name = loan.business_name.strip()
    row.first_name = loan.first_name or None
    row.last_name = loan.last_name or None
    row.loan_purpose = loan.loan_purpose or None
    row.desired_amount = to_number_or_none(loan.desired_amount)
    row.estimated_payment = to_number_or_none(loan.estimated_payment)
    row.down_payment = to_number_or_none(loan.down_payment)
    row.down_payment_percent = loan.down_payment_percent or None
    row.proposed_loan = to_number_or_none(loan.proposed_loan)
    row.term_months = int(term) if term else None
    row.interest_rate = to_number_or_none(loan.interest_rate)
    row.annualized_loan = to_number_or_none(loan.annualized_loan)

    dumped = result.dump()
    row.financials = dumped["financials"]
    row.debts = dumped["debts"]
    row.dscr = dumped["dscr"]


def record_from_row(row: CashFlowAnalysis) -> AnalysisRecord:
    result = build_analysis(input_from_row(row))
    return AnalysisRecord(
        **dict(result),
        id=row.id,
        user_id=row.user_id,
        status=row.status,
        created_at=row.created_at.isoformat() if row.created_at else None,
        updated_at=row.updated_at.isoformat() if row.updated_at else None,
    )
