import os
import sys

import pytest

ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.append(ROOT_DIR)

# Must be set before backend.db is imported
os.environ["DATABASE_URL"] = "sqlite://"

from backend.schemas import AnalysisInput  # noqa: E402

SCENARIO_YEAR = {
    "revenue": "$500,000",
    "cogs": "200000",
    "operatingExpenses": "150,000",
    "depreciation": "20000",
    "amortization": "0",
    "interest": "10000",
    "taxes": "5000",
    "nonRecurringIncome": "",
    "nonRecurringExpenses": "",
}

SCENARIO_DEBTS = [
    {
        "category": "CREDIT_CARD",
        "description": "Chase Ink Business",
        "monthlyPayment": "500",
        "outstandingBalance": "5000",
        "originalLoanAmount": "10000",
        "notes": "",
    },
    {
        "category": "REAL_ESTATE",
        "description": "123 Main St",
        "monthlyPayment": "1000",
        "outstandingBalance": "200000",
        "originalLoanAmount": "250000",
        "notes": "",
    },
]


@pytest.fixture
def scenario_payload():
    return {
        "loanInfo": {
            "businessName": "Acme Bakery",
            "firstName": "Sam",
            "lastName": "Rivera",
            "loanPurpose": "Equipment Purchase",
            "desiredAmount": "100000",
            "term": "60",
            "interestRate": "7.0",
            "annualizedLoan": "12000",
        },
        "financials": {
            "year2023": {"input": dict(SCENARIO_YEAR)},
            "year2024": {"input": dict(SCENARIO_YEAR)},
            "year2025YTD": {"input": dict(SCENARIO_YEAR), "ytdMonth": "06"},
        },
        "debts": [dict(d) for d in SCENARIO_DEBTS],
    }


@pytest.fixture
def scenario_input(scenario_payload):
    return AnalysisInput.model_validate(scenario_payload)
