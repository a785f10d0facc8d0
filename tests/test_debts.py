import pytest

from backend.debts import prorate, summarize_debts
from backend.schemas import DebtCategory, DebtEntry

from conftest import SCENARIO_DEBTS


def entries(raw):
    return [DebtEntry.model_validate(d) for d in raw]


def test_summarize_concrete_debts():
    summary = summarize_debts(entries(SCENARIO_DEBTS))
    assert summary.monthly_debt_service == 1500
    assert summary.annual_debt_service == 18000
    assert summary.total_credit_balance == 5000
    assert summary.total_credit_limit == 10000
    assert summary.credit_utilization_rate == 0.5


def test_category_totals_cover_every_category():
    summary = summarize_debts(entries(SCENARIO_DEBTS))
    assert set(summary.category_totals) == set(DebtCategory)
    real_estate = summary.category_totals[DebtCategory.REAL_ESTATE]
    assert real_estate.total_monthly_payment == 1000
    assert real_estate.total_original_loan_amount == 250000
    assert real_estate.total_outstanding_balance == 200000
    assert summary.category_totals[DebtCategory.OTHER].total_monthly_payment == 0


@pytest.mark.parametrize("category", ["REAL_ESTATE", "VEHICLE_EQUIPMENT", "OTHER"])
def test_term_debt_never_counts_as_credit(category):
    summary = summarize_debts(
        entries([{"category": category, "monthlyPayment": "900", "outstandingBalance": "40000", "originalLoanAmount": "60000"}])
    )
    assert summary.total_credit_balance == 0
    assert summary.total_credit_limit == 0
    assert summary.credit_utilization_rate is None
    assert summary.annual_debt_service == 10800


def test_lines_of_credit_and_cards_combine():
    summary = summarize_debts(
        entries(
            [
                {"category": "CREDIT_CARD", "outstandingBalance": "$2,000", "originalLoanAmount": "$8,000"},
                {"category": "LINE_OF_CREDIT", "outstandingBalance": "13000", "originalLoanAmount": "22000"},
            ]
        )
    )
    assert summary.total_credit_balance == 15000
    assert summary.total_credit_limit == 30000
    assert summary.credit_utilization_rate == 0.5


def test_zero_limit_has_no_utilization():
    summary = summarize_debts(entries([{"category": "CREDIT_CARD", "outstandingBalance": "500"}]))
    assert summary.total_credit_balance == 500
    assert summary.credit_utilization_rate is None


def test_empty_schedule():
    summary = summarize_debts([])
    assert summary.monthly_debt_service == 0
    assert summary.annual_debt_service == 0
    assert summary.credit_utilization_rate is None


def test_malformed_amounts_count_as_zero():
    summary = summarize_debts(entries([{"category": "OTHER", "monthlyPayment": "call lender"}]))
    assert summary.monthly_debt_service == 0


def test_unknown_category_is_filed_under_other():
    entry = DebtEntry.model_validate({"category": "PAYDAY", "monthlyPayment": "10"})
    assert entry.category == DebtCategory.OTHER
    assert DebtEntry.model_validate({"category": "credit_card"}).category == DebtCategory.CREDIT_CARD


def test_only_lists_are_accepted():
    with pytest.raises(TypeError):
        summarize_debts({"entries": SCENARIO_DEBTS})


def test_prorate():
    assert prorate(18000, 6) == 9000
    assert prorate(18000, 12) == 18000
    assert prorate(18000, 0) == 0
