import pytest

from backend.analysis import (
    apply_to_row,
    build_analysis,
    input_from_row,
    normalize_debt_entries,
    record_from_row,
)
from backend.db import CashFlowAnalysis
from backend.schemas import AnalysisInput, DebtCategory

from conftest import SCENARIO_DEBTS


def test_build_analysis_scenario(scenario_input):
    result = build_analysis(scenario_input)

    assert result.financials.year2024.summary.adjusted_ebitda == 185000
    assert result.debts.monthly_debt_service == 1500
    assert result.debts.total_debt_service == {"2023": 18000, "2024": 30000, "2025YTD": 15000}
    assert result.debts.annualized_loan_payments == {"2023": 0, "2024": 12000, "2025YTD": 6000}
    assert result.dscr == {"2023": 10.28, "2024": 6.17, "2025YTD": 12.33}
    assert result.dscr_results["2024"].dscr == pytest.approx(185000 / 30000)


def test_build_analysis_of_nothing():
    result = build_analysis(AnalysisInput())
    assert result.dscr == {"2023": None, "2024": None, "2025YTD": None}
    assert result.debts.credit_utilization_rate is None


def test_dump_uses_stored_shape(scenario_input):
    dumped = build_analysis(scenario_input).dump()
    assert set(dumped["financials"]) == {"year2023", "year2024", "year2025YTD"}
    assert dumped["financials"]["year2025YTD"]["ytdMonth"] == "06"
    assert dumped["financials"]["year2024"]["summary"]["adjustedEbitda"] == 185000
    assert set(dumped["debts"]) >= {
        "entries",
        "monthlyDebtService",
        "annualDebtService",
        "totalCreditBalance",
        "totalCreditLimit",
        "creditUtilizationRate",
        "categoryTotals",
        "totalDebtService",
        "annualizedLoanPayments",
    }
    assert dumped["debts"]["categoryTotals"]["CREDIT_CARD"]["totalMonthlyPayment"] == 500


@pytest.mark.parametrize(
    "raw",
    [SCENARIO_DEBTS, {"entries": SCENARIO_DEBTS, "monthlyDebtService": 1}],
)
def test_normalize_debt_entries_accepts_both_stored_shapes(raw):
    entries = normalize_debt_entries(raw)
    assert [e.category for e in entries] == [DebtCategory.CREDIT_CARD, DebtCategory.REAL_ESTATE]


@pytest.mark.parametrize("raw", [None, {}, {"entries": None}, "garbage", [None, 3]])
def test_normalize_debt_entries_degrades_to_empty(raw):
    assert normalize_debt_entries(raw) == []


def test_row_round_trip(scenario_input):
    row = CashFlowAnalysis(id="a1", status="inprogress")
    apply_to_row(row, build_analysis(scenario_input))

    assert row.business_name == "Acme Bakery"
    assert row.desired_amount == 100000
    assert row.term_months == 60
    assert row.annualized_loan == 12000
    assert row.dscr == {"2023": 10.28, "2024": 6.17, "2025YTD": 12.33}

    restored = input_from_row(row)
    assert restored.loan_info.annualized_loan == "12000"
    assert restored.loan_info.term == "60"
    assert restored.financials.year2025_ytd.ytd_month == "06"
    assert len(restored.debts) == 2


def test_record_ignores_stored_derived_values(scenario_input):
    row = CashFlowAnalysis(id="a2", status="inprogress")
    apply_to_row(row, build_analysis(scenario_input))
    row.financials["year2024"]["summary"]["adjustedEbitda"] = 1
    row.debts["monthlyDebtService"] = 0
    row.dscr = {"2024": 99.0}

    record = record_from_row(row)
    assert record.financials.year2024.summary.adjusted_ebitda == 185000
    assert record.debts.monthly_debt_service == 1500
    assert record.dscr["2024"] == 6.17
    assert record.created_at is None
