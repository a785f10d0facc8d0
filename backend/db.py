# backend/db.py

import uuid
from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, Float, Integer, Text, create_engine
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import DATABASE_URL

if DATABASE_URL.startswith("sqlite"):
    # Single shared connection so an in-memory database survives across sessions
    engine = create_engine(
        DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
else:
    engine = create_engine(DATABASE_URL, echo=False)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
Base = declarative_base()

JSONColumn = JSON().with_variant(JSONB(), "postgresql")

STATUS_IN_PROGRESS = "inprogress"
STATUS_SUBMITTED = "submitted"


def new_analysis_id() -> str:
    return str(uuid.uuid4())


class CashFlowAnalysis(Base):
    __tablename__ = "cash_flow_analyses"
    id = Column(Text, primary_key=True, index=True, default=new_analysis_id)
    user_id = Column(Text, index=True, nullable=True)
    status = Column(Text, nullable=False, default=STATUS_IN_PROGRESS)

    business_name = Column(Text, nullable=False, default="")
    first_name = Column(Text, nullable=True)
    last_name = Column(Text, nullable=True)
    loan_purpose = Column(Text, nullable=True)
    desired_amount = Column(Float, nullable=True)
    estimated_payment = Column(Float, nullable=True)
    down_payment = Column(Float, nullable=True)
    down_payment_percent = Column(Text, nullable=True)
    proposed_loan = Column(Float, nullable=True)
    term_months = Column(Integer, nullable=True)
    interest_rate = Column(Float, nullable=True)
    annualized_loan = Column(Float, nullable=True)

    financials = Column(JSONColumn, nullable=False, default=dict)
    debts = Column(JSONColumn, nullable=False, default=dict)
    dscr = Column(JSONColumn, nullable=False, default=dict)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


def init_db():
    Base.metadata.create_all(bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
