import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .analysis import apply_to_row, build_analysis, record_from_row
from .db import (
    STATUS_IN_PROGRESS,
    STATUS_SUBMITTED,
    CashFlowAnalysis,
    get_db,
    new_analysis_id,
)
from .financials import CURRENT_YEAR
from .loan import LOAN_PURPOSES, UnknownLoanPurpose, estimate_loan_terms
from .report import render_report
from .schemas import AnalysisInput, CreateAnalysisRequest, LoanTermsRequest

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_row(db: Session, analysis_id: str) -> CashFlowAnalysis:
    row = db.get(CashFlowAnalysis, analysis_id)
    if row is None:
        logger.info("Analysis %s not found", analysis_id)
        raise HTTPException(status_code=404, detail="Analysis not found.")
    return row


def _commit(db: Session, row: CashFlowAnalysis) -> None:
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to save analysis %s", row.id)
        raise
    db.refresh(row)


def _ensure_editable(row: CashFlowAnalysis) -> None:
    if row.status == STATUS_SUBMITTED:
        raise HTTPException(status_code=409, detail="Analysis has already been submitted.")


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/loan-purposes")
def loan_purposes():
    return [purpose.dump() for purpose in LOAN_PURPOSES.values()]


@router.post("/loan-terms")
def loan_terms(req: LoanTermsRequest):
    try:
        terms = estimate_loan_terms(req.loan_purpose, req.desired_amount)
    except UnknownLoanPurpose:
        raise HTTPException(status_code=400, detail=f"Unknown loan purpose: {req.loan_purpose}")
    return terms.dump()


@router.post("/calculate")
def calculate(data: AnalysisInput):
    return build_analysis(data).dump()


@router.post("/analyses", status_code=201)
def create_analysis(req: Optional[CreateAnalysisRequest] = None, db: Session = Depends(get_db)):
    row = CashFlowAnalysis(
        id=new_analysis_id(),
        user_id=req.user_id if req else None,
        status=STATUS_IN_PROGRESS,
    )
    apply_to_row(row, build_analysis(AnalysisInput()))
    db.add(row)
    _commit(db, row)
    logger.info("Created analysis %s for user %s", row.id, row.user_id)
    return record_from_row(row).dump()


@router.get("/analyses")
def list_analyses(
    user_id: Optional[str] = Query(None, alias="userId"),
    status: Optional[str] = None,
    db: Session = Depends(get_db),
):
    query = db.query(CashFlowAnalysis)
    if user_id is not None:
        query = query.filter(CashFlowAnalysis.user_id == user_id)
    if status is not None:
        query = query.filter(CashFlowAnalysis.status == status)
    rows = query.order_by(CashFlowAnalysis.created_at.desc()).all()
    return [record_from_row(row).dump() for row in rows]


@router.get("/analyses/{analysis_id}")
def get_analysis(analysis_id: str, db: Session = Depends(get_db)):
    return record_from_row(_get_row(db, analysis_id)).dump()


@router.put("/analyses/{analysis_id}")
def save_analysis(analysis_id: str, data: AnalysisInput, db: Session = Depends(get_db)):
    row = _get_row(db, analysis_id)
    _ensure_editable(row)
    apply_to_row(row, build_analysis(data))
    _commit(db, row)
    logger.debug("Saved draft %s", analysis_id)
    return record_from_row(row).dump()


@router.post("/analyses/{analysis_id}/submit")
def submit_analysis(
    analysis_id: str,
    data: Optional[AnalysisInput] = None,
    db: Session = Depends(get_db),
):
    row = _get_row(db, analysis_id)
    _ensure_editable(row)
    if data is not None:
        apply_to_row(row, build_analysis(data))
    row.status = STATUS_SUBMITTED
    _commit(db, row)
    record = record_from_row(row)
    logger.info(
        "Submitted analysis %s, %s DSCR %s", analysis_id, CURRENT_YEAR, record.dscr.get(CURRENT_YEAR)
    )
    return record.dump()


@router.get("/report/{analysis_id}")
def report(analysis_id: str, db: Session = Depends(get_db)):
    record = record_from_row(_get_row(db, analysis_id))
    return {"report": render_report(record)}
