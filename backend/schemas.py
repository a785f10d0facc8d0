# backend/schemas.py

import logging
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


class CamelModel(BaseModel):
    """Base model: snake_case in Python, camelCase on the wire and in stored JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def dump(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


def _as_text(v):
    if v is None:
        return ""
    if isinstance(v, bool):
        return str(v).lower()
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    if isinstance(v, (int, float)):
        return str(v)
    return v


# ---------------------------
# Financials
# ---------------------------

class YearFinancialInput(CamelModel):
    revenue: str = ""
    cogs: str = ""
    operating_expenses: str = ""
    non_recurring_income: str = ""
    non_recurring_expenses: str = ""
    depreciation: str = ""
    amortization: str = ""
    interest: str = ""
    taxes: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def as_text(cls, v):
        return _as_text(v)


class YearFinancialSummary(CamelModel):
    revenue: float = 0.0
    cogs: float = 0.0
    operating_expenses: float = 0.0
    non_recurring_income: float = 0.0
    non_recurring_expenses: float = 0.0
    depreciation: float = 0.0
    amortization: float = 0.0
    interest: float = 0.0
    taxes: float = 0.0
    gross_profit: float = 0.0
    net_income: float = 0.0
    ebitda: float = 0.0
    adjusted_ebitda: float = 0.0


class FinancialsPeriod(CamelModel):
    input: YearFinancialInput = Field(default_factory=YearFinancialInput)
    # Ignored on the way in; always recomputed from ``input``.
    summary: Optional[YearFinancialSummary] = None
    skip: bool = False


class YtdFinancialsPeriod(FinancialsPeriod):
    ytd_month: str = ""

    @field_validator("ytd_month", mode="before")
    @classmethod
    def month_as_text(cls, v):
        return _as_text(v)


class FinancialsPayload(CamelModel):
    year2023: FinancialsPeriod = Field(default_factory=FinancialsPeriod)
    year2024: FinancialsPeriod = Field(default_factory=FinancialsPeriod)
    year2025_ytd: YtdFinancialsPeriod = Field(
        default_factory=YtdFinancialsPeriod, alias="year2025YTD"
    )


# ---------------------------
# Debts
# ---------------------------

class DebtCategory(str, Enum):
    REAL_ESTATE = "REAL_ESTATE"
    VEHICLE_EQUIPMENT = "VEHICLE_EQUIPMENT"
    CREDIT_CARD = "CREDIT_CARD"
    LINE_OF_CREDIT = "LINE_OF_CREDIT"
    OTHER = "OTHER"


class DebtEntry(CamelModel):
    category: DebtCategory = DebtCategory.OTHER
    description: str = ""
    monthly_payment: str = ""
    # Credit limit for CREDIT_CARD and LINE_OF_CREDIT
    original_loan_amount: str = ""
    outstanding_balance: str = ""
    notes: str = ""

    @field_validator("category", mode="before")
    @classmethod
    def known_category(cls, v):
        if isinstance(v, DebtCategory):
            return v
        try:
            return DebtCategory(str(v).upper())
        except ValueError:
            logger.warning("Unknown debt category %r, filing under OTHER", v)
            return DebtCategory.OTHER

    @field_validator(
        "description",
        "monthly_payment",
        "original_loan_amount",
        "outstanding_balance",
        "notes",
        mode="before",
    )
    @classmethod
    def as_text(cls, v):
        return _as_text(v)


class CategoryTotals(CamelModel):
    total_monthly_payment: float = 0.0
    total_original_loan_amount: float = 0.0
    total_outstanding_balance: float = 0.0


class DebtSummary(CamelModel):
    monthly_debt_service: float = 0.0
    annual_debt_service: float = 0.0
    total_credit_balance: float = 0.0
    total_credit_limit: float = 0.0
    credit_utilization_rate: Optional[float] = None
    category_totals: Dict[DebtCategory, CategoryTotals] = Field(default_factory=dict)


# ---------------------------
# DSCR
# ---------------------------

class DscrYearResult(CamelModel):
    adjusted_ebitda: float = 0.0
    annual_debt_service: float = 0.0
    annualized_loan_payment: float = 0.0
    total_debt_service: float = 0.0
    dscr: Optional[float] = None


# ---------------------------
# Loan request
# ---------------------------

class LoanInfo(CamelModel):
    business_name: str = ""
    first_name: str = ""
    last_name: str = ""
    loan_purpose: str = ""
    desired_amount: str = ""
    estimated_payment: str = ""
    down_payment: str = ""
    down_payment_percent: str = ""
    proposed_loan: str = ""
    # Months
    term: str = ""
    # Annual percent, e.g. "7.5"
    interest_rate: str = ""
    annualized_loan: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def as_text(cls, v):
        return _as_text(v)


class LoanPurpose(CamelModel):
    title: str
    description: str
    default_term: int
    default_rate: float
    default_down_payment_pct: float = 0.0
    interest_only: bool = False


# ---------------------------
# Analysis
# ---------------------------

class AnalysisInput(CamelModel):
    loan_info: LoanInfo = Field(default_factory=LoanInfo)
    financials: FinancialsPayload = Field(default_factory=FinancialsPayload)
    debts: List[DebtEntry] = Field(default_factory=list)


class DebtsSnapshot(DebtSummary):
    entries: List[DebtEntry] = Field(default_factory=list)
    total_debt_service: Dict[str, float] = Field(default_factory=dict)
    annualized_loan_payments: Dict[str, float] = Field(default_factory=dict)


class AnalysisResult(CamelModel):
    loan_info: LoanInfo
    financials: FinancialsPayload
    debts: DebtsSnapshot
    dscr_results: Dict[str, DscrYearResult]
    # Rounded to two places for display and storage
    dscr: Dict[str, Optional[float]]


class CreateAnalysisRequest(CamelModel):
    user_id: Optional[str] = None


class LoanTermsRequest(CamelModel):
    loan_purpose: str
    desired_amount: str

    @field_validator("desired_amount", mode="before")
    @classmethod
    def as_text(cls, v):
        return _as_text(v)


class AnalysisRecord(AnalysisResult):
    id: str
    user_id: Optional[str] = None
    status: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
