import pytest

from backend.loan import (
    LOAN_PURPOSES,
    UnknownLoanPurpose,
    estimate_loan_terms,
    interest_only_payment,
    monthly_payment,
)


def test_monthly_payment_amortizes():
    assert monthly_payment(100000, 60, 7.0) == 1980


@pytest.mark.parametrize("args", [(0, 60, 7.0), (100000, 0, 7.0), (100000, 60, 0)])
def test_monthly_payment_zero_inputs(args):
    assert monthly_payment(*args) == 0


def test_interest_only_payment():
    assert interest_only_payment(50000, 10.0) == 417
    assert interest_only_payment(50000, 0) == 0


def test_estimate_equipment_purchase():
    terms = estimate_loan_terms("Equipment Purchase", "$100,000")
    assert terms.desired_amount == "100000"
    assert terms.term == "60"
    assert terms.interest_rate == "7.0"
    assert terms.down_payment == "10000"
    assert terms.down_payment_percent == "10.0%"
    assert terms.proposed_loan == "90000"
    assert terms.estimated_payment == "1980"
    assert terms.annualized_loan == "23760"


def test_estimate_line_of_credit_is_interest_only():
    terms = estimate_loan_terms("Line of Credit", "50000")
    assert terms.estimated_payment == "417"
    assert terms.annualized_loan == "5004"
    assert terms.down_payment == "0"


def test_estimate_without_amount():
    terms = estimate_loan_terms("Working Capital", "")
    assert terms.loan_purpose == "Working Capital"
    assert terms.estimated_payment == ""


def test_unknown_purpose():
    with pytest.raises(UnknownLoanPurpose):
        estimate_loan_terms("Yacht", "100000")


def test_purpose_catalog():
    assert len(LOAN_PURPOSES) == 9
    assert LOAN_PURPOSES["Real Estate Acquisition or Development"].default_down_payment_pct == 0.2
    assert LOAN_PURPOSES["Line of Credit"].interest_only
