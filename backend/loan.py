"""Default terms and payment estimates for the requested loan."""

import logging
import math
from typing import Dict

from .formatting import parse_amount
from .schemas import LoanInfo, LoanPurpose

logger = logging.getLogger(__name__)

LINE_OF_CREDIT = "Line of Credit"

LOAN_PURPOSES: Dict[str, LoanPurpose] = {
    p.title: p
    for p in [
        LoanPurpose(
            title="Working Capital",
            description="To cover day-to-day operational expenses, including payroll, inventory, and other recurring costs.",
            default_term=24,
            default_rate=0.08,
        ),
        LoanPurpose(
            title="Equipment Purchase",
            description="For acquiring machinery, tools, or other business equipment to improve operations.",
            default_term=60,
            default_rate=0.07,
            default_down_payment_pct=0.1,
        ),
        LoanPurpose(
            title="Vehicle Purchase",
            description="To finance company vehicles, delivery trucks, or other business-related transportation.",
            default_term=60,
            default_rate=0.065,
            default_down_payment_pct=0.15,
        ),
        LoanPurpose(
            title="Inventory Purchase",
            description="To stock up on inventory, raw materials, or supplies for your business.",
            default_term=12,
            default_rate=0.08,
        ),
        LoanPurpose(
            title="Debt Refinancing",
            description="To consolidate existing business debts into a single loan with better terms.",
            default_term=60,
            default_rate=0.075,
        ),
        LoanPurpose(
            title="Real Estate Acquisition or Development",
            description="For purchasing, renovating, or developing commercial real estate.",
            default_term=120,
            default_rate=0.06,
            default_down_payment_pct=0.2,
        ),
        LoanPurpose(
            title="Business Acquisition",
            description="To finance the purchase of an existing business or franchise.",
            default_term=84,
            default_rate=0.075,
            default_down_payment_pct=0.2,
        ),
        LoanPurpose(
            title="Unexpected Expenses",
            description="To cover unforeseen business costs or emergency situations.",
            default_term=36,
            default_rate=0.09,
        ),
        LoanPurpose(
            title=LINE_OF_CREDIT,
            description="Flexible access to funds with interest-only payments. Draw from as needed to manage expenses or seize business opportunities.",
            default_term=12,
            default_rate=0.10,
            interest_only=True,
        ),
    ]
}


class UnknownLoanPurpose(ValueError):
    pass


def _whole_dollars(value: float) -> int:
    return int(math.floor(value + 0.5))


def monthly_payment(amount: float, term_months: int, annual_rate_pct: float) -> int:
    """Fully amortizing monthly payment, rounded to whole dollars."""
    if not amount or not term_months or not annual_rate_pct:
        return 0
    rate = annual_rate_pct / 100 / 12
    growth = math.pow(1 + rate, term_months)
    payment = amount * rate * growth / (growth - 1)
    return _whole_dollars(payment) if math.isfinite(payment) else 0


def interest_only_payment(amount: float, annual_rate_pct: float) -> int:
    if not amount or not annual_rate_pct:
        return 0
    payment = amount * annual_rate_pct / 100 / 12
    return _whole_dollars(payment) if math.isfinite(payment) else 0


def estimate_loan_terms(purpose: str, desired_amount) -> LoanInfo:
    """Fill in term, rate, down payment and payments from the purpose defaults.

    The payment is estimated on the full desired amount.
    """
    if purpose not in LOAN_PURPOSES:
        raise UnknownLoanPurpose(purpose)
    defaults = LOAN_PURPOSES[purpose]
    amount = int(parse_amount(desired_amount))
    if amount <= 0:
        return LoanInfo(loan_purpose=purpose)

    rate_pct = defaults.default_rate * 100
    down = _whole_dollars(amount * defaults.default_down_payment_pct)
    if defaults.interest_only:
        payment = interest_only_payment(amount, rate_pct)
    else:
        payment = monthly_payment(amount, defaults.default_term, rate_pct)
    logger.debug("Estimated %s payment of %s on %s", purpose, payment, amount)

    return LoanInfo(
        loan_purpose=purpose,
        desired_amount=str(amount),
        term=str(defaults.default_term),
        interest_rate=f"{rate_pct:.1f}",
        down_payment=str(down),
        down_payment_percent=f"{defaults.default_down_payment_pct * 100:.1f}%",
        proposed_loan=str(amount - down),
        estimated_payment=str(payment),
        annualized_loan=str(payment * 12),
    )
