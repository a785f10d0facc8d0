# frontend/app.py

import time

import pandas as pd
import requests
import streamlit as st

from backend.autosave import (
    AutosaveStatus,
    SaveState,
    begin_save,
    mark_edited,
    retry,
    save_failed,
    save_succeeded,
    serialize,
    should_flush,
)
from backend.config import AUTOSAVE_DEBOUNCE_SECONDS, CASHFLOW_API_URL
from backend.debts import CATEGORY_DESCRIPTIONS, CATEGORY_LABELS, MAX_ENTRIES_PER_CATEGORY
from backend.formatting import (
    format_amount,
    format_currency,
    format_percentage,
    format_ratio,
    ytd_month_name,
)
from backend.schemas import DebtCategory

st.set_page_config(page_title="Comprehensive Cash Flow Analysis")

st.title("📊 Comprehensive Cash Flow Analysis")

STEPS = ["Loan Info", "Financials", "Business Debts", "Review & Submit"]
PERIODS = [("year2023", "2023"), ("year2024", "2024"), ("year2025YTD", "2025 YTD")]
FINANCIAL_FIELDS = [
    ("revenue", "Revenue"),
    ("cogs", "Cost of Goods Sold"),
    ("operatingExpenses", "Operating Expenses"),
    ("nonRecurringIncome", "Non-Recurring Income"),
    ("nonRecurringExpenses", "Non-Recurring Expenses"),
    ("depreciation", "Depreciation"),
    ("amortization", "Amortization"),
    ("interest", "Interest Expense"),
    ("taxes", "Income Taxes"),
]
MONTHS = ["", "January", "February", "March", "April", "May", "June", "July",
          "August", "September", "October", "November", "December"]


def empty_debt(category: DebtCategory) -> dict:
    return {
        "category": category.value,
        "description": "",
        "monthlyPayment": "",
        "originalLoanAmount": "",
        "outstandingBalance": "",
        "notes": "",
    }


def init_state():
    defaults = {
        "step": 0,
        "analysis_id": "",
        "loan_info": {},
        "financials": {key: {"input": {}, "skip": False} for key, _ in PERIODS},
        "debts": [],
        "autosave": AutosaveStatus(),
        "submitted": False,
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value


def payload() -> dict:
    return {
        "loanInfo": st.session_state.loan_info,
        "financials": st.session_state.financials,
        "debts": st.session_state.debts,
    }


def load_analysis(record: dict):
    st.session_state.analysis_id = record["id"]
    st.session_state.loan_info = record.get("loanInfo", {})
    st.session_state.financials = {
        key: {k: v for k, v in record["financials"][key].items() if k != "summary"}
        for key, _ in PERIODS
    }
    st.session_state.debts = record["debts"].get("entries", [])
    st.session_state.submitted = record.get("status") == "submitted"
    # Loaded state is already saved
    st.session_state.autosave = AutosaveStatus(state=SaveState.SAVED, last_sent=serialize(payload()))


# ---------------------------
# Sidebar: draft selection and autosave status
# ---------------------------

init_state()

with st.sidebar:
    st.header("Draft")
    user_id = st.text_input("User ID", key="user_id")
    if st.button("Start new analysis"):
        resp = requests.post(f"{CASHFLOW_API_URL}/analyses", json={"userId": user_id or None})
        if resp.ok:
            load_analysis(resp.json())
            st.success(f"Draft created: {st.session_state.analysis_id}")
        else:
            st.error(f"Error: {resp.status_code} - {resp.text}")

    existing_id = st.text_input("Open analysis by ID")
    if st.button("Open") and existing_id:
        resp = requests.get(f"{CASHFLOW_API_URL}/analyses/{existing_id}")
        if resp.ok:
            load_analysis(resp.json())
        else:
            st.error("Analysis not found.")

    status: AutosaveStatus = st.session_state.autosave
    if st.session_state.analysis_id:
        st.caption(f"Analysis: {st.session_state.analysis_id}")
        st.caption(f"Autosave: {status.state.value}")
        st.caption(
            f"Edits are saved on your next action once they have been idle for "
            f"{AUTOSAVE_DEBOUNCE_SECONDS:g}s."
        )
        if status.state != SaveState.SAVING and st.button("Save now"):
            st.session_state.save_now = True
    if status.state == SaveState.ERROR:
        st.error(f"Save failed: {status.error}")
        if st.button("Retry save"):
            st.session_state.autosave = retry(status, time.time())

if not st.session_state.analysis_id:
    st.info("Start a new analysis or open an existing one from the sidebar.")
    st.stop()

step = st.session_state.step
st.progress(step / (len(STEPS) - 1), text=f"Step {step + 1} of {len(STEPS)}: {STEPS[step]}")

# ---------------------------
# Step 1: Loan info
# ---------------------------

if step == 0:
    loan = st.session_state.loan_info
    resp = requests.get(f"{CASHFLOW_API_URL}/loan-purposes")
    purposes = [p["title"] for p in resp.json()] if resp.ok else []

    loan["businessName"] = st.text_input("Business Name", value=loan.get("businessName", ""))
    col1, col2 = st.columns(2)
    loan["firstName"] = col1.text_input("First Name", value=loan.get("firstName", ""))
    loan["lastName"] = col2.text_input("Last Name", value=loan.get("lastName", ""))

    current = loan.get("loanPurpose", "")
    options = [""] + purposes
    loan["loanPurpose"] = st.selectbox(
        "Loan Purpose", options=options, index=options.index(current) if current in options else 0
    )
    desired = st.text_input("Desired Amount", value=format_amount(loan.get("desiredAmount", "")))
    loan["desiredAmount"] = desired

    if st.button("Estimate loan terms"):
        if loan["loanPurpose"] and desired:
            resp = requests.post(
                f"{CASHFLOW_API_URL}/loan-terms",
                json={"loanPurpose": loan["loanPurpose"], "desiredAmount": desired},
            )
            if resp.ok:
                loan.update({k: v for k, v in resp.json().items() if k not in ("businessName", "firstName", "lastName")})
            else:
                st.error("Could not estimate loan terms.")
        else:
            st.warning("Choose a loan purpose and enter an amount first.")

    col1, col2, col3 = st.columns(3)
    loan["term"] = col1.text_input("Loan Term (Months)", value=loan.get("term", ""))
    loan["interestRate"] = col2.text_input("Interest Rate (%)", value=loan.get("interestRate", ""))
    loan["downPayment"] = col3.text_input("Down Payment", value=format_amount(loan.get("downPayment", "")))
    col1, col2 = st.columns(2)
    loan["proposedLoan"] = col1.text_input("Proposed Loan Amount", value=format_amount(loan.get("proposedLoan", "")))
    loan["estimatedPayment"] = col2.text_input(
        "Estimated Monthly Payment", value=format_amount(loan.get("estimatedPayment", ""))
    )
    loan["annualizedLoan"] = st.text_input(
        "Annualized Loan Payment", value=format_amount(loan.get("annualizedLoan", ""))
    )

# ---------------------------
# Step 2: Financials
# ---------------------------

elif step == 1:
    tabs = st.tabs([label for _, label in PERIODS])
    for tab, (key, label) in zip(tabs, PERIODS):
        period = st.session_state.financials[key]
        with tab:
            if key != "year2024":
                period["skip"] = st.checkbox(
                    f"I don't have {label} figures", value=period.get("skip", False), key=f"skip-{key}"
                )
            if key == "year2025YTD":
                month = ytd_month_name(period.get("ytdMonth", ""))
                period["ytdMonth"] = st.selectbox(
                    "Year-to-date through", MONTHS, index=MONTHS.index(month) if month in MONTHS else 0
                )
            data = period["input"]
            for field, field_label in FINANCIAL_FIELDS:
                data[field] = st.text_input(
                    field_label,
                    value=format_amount(data.get(field, "")),
                    key=f"{key}-{field}",
                    disabled=period.get("skip", False),
                )

# ---------------------------
# Step 3: Business debts
# ---------------------------

elif step == 2:
    debts = st.session_state.debts
    for category in DebtCategory:
        entries = [d for d in debts if d.get("category") == category.value]
        with st.expander(f"{CATEGORY_LABELS[category]} ({len(entries)})"):
            st.caption(CATEGORY_DESCRIPTIONS[category])
            revolving = category in (DebtCategory.CREDIT_CARD, DebtCategory.LINE_OF_CREDIT)
            for i, entry in enumerate(entries):
                cols = st.columns(4)
                prefix = f"{category.value}-{i}"
                entry["description"] = cols[0].text_input("Description", entry["description"], key=f"{prefix}-desc")
                entry["monthlyPayment"] = cols[1].text_input(
                    "Monthly Payment", format_amount(entry["monthlyPayment"]), key=f"{prefix}-monthly"
                )
                entry["originalLoanAmount"] = cols[2].text_input(
                    "Credit Limit" if revolving else "Original Loan Amount",
                    format_amount(entry["originalLoanAmount"]),
                    key=f"{prefix}-original",
                )
                entry["outstandingBalance"] = cols[3].text_input(
                    "Outstanding Balance", format_amount(entry["outstandingBalance"]), key=f"{prefix}-balance"
                )
                entry["notes"] = st.text_input("Notes", entry["notes"], key=f"{prefix}-notes")
                if st.button("Remove", key=f"{prefix}-remove"):
                    debts.remove(entry)
                    st.rerun()
            if st.button(f"Add {CATEGORY_LABELS[category]}", key=f"add-{category.value}"):
                if len(entries) >= MAX_ENTRIES_PER_CATEGORY:
                    st.warning(f"You can add up to {MAX_ENTRIES_PER_CATEGORY} debts in this category.")
                else:
                    debts.append(empty_debt(category))
                    st.rerun()

# ---------------------------
# Step 4: Review & submit
# ---------------------------

else:
    resp = requests.post(f"{CASHFLOW_API_URL}/calculate", json=payload())
    if not resp.ok:
        st.error(f"Calculation failed: {resp.status_code}")
    else:
        result = resp.json()
        cols = st.columns(3)
        for col, (period, label) in zip(cols, [("2023", "2023"), ("2024", "2024"), ("2025YTD", "2025 YTD")]):
            col.metric(f"DSCR {label}", format_ratio(result["dscrResults"][period]["dscr"]))

        summary = pd.DataFrame(
            {label: result["financials"][key]["summary"] for key, label in PERIODS}
        )
        st.subheader("Financial Summary")
        st.dataframe(summary.map(format_currency))

        debts = result["debts"]
        st.subheader("Business Debts")
        st.write(f"Monthly debt service: {format_currency(debts['monthlyDebtService'])}")
        st.write(f"Annual debt service: {format_currency(debts['annualDebtService'])}")
        st.write(f"Credit utilization: {format_percentage(debts['creditUtilizationRate'])}")

    if st.session_state.submitted:
        report = requests.get(f"{CASHFLOW_API_URL}/report/{st.session_state.analysis_id}")
        if report.ok:
            st.markdown(report.json().get("report", ""))
        else:
            st.error("Report failed.")
    elif st.button("Submit analysis", type="primary"):
        resp = requests.post(
            f"{CASHFLOW_API_URL}/analyses/{st.session_state.analysis_id}/submit", json=payload()
        )
        if resp.ok:
            load_analysis(resp.json())
            st.success("Analysis submitted.")
            st.rerun()
        else:
            st.error(f"Submit failed: {resp.status_code} - {resp.text}")

# ---------------------------
# Navigation
# ---------------------------

st.markdown("---")
back, _, forward = st.columns([1, 4, 1])
if step > 0 and back.button("Back"):
    st.session_state.step -= 1
    st.rerun()
if step < len(STEPS) - 1 and forward.button("Next"):
    st.session_state.step += 1
    st.rerun()

# ---------------------------
# Autosave
# ---------------------------

if not st.session_state.submitted:
    now = time.time()
    status = mark_edited(st.session_state.autosave, payload(), now)
    save_now = st.session_state.pop("save_now", False)
    if should_flush(status, now, 0 if save_now else AUTOSAVE_DEBOUNCE_SECONDS):
        status, sent = begin_save(status)
        try:
            resp = requests.put(
                f"{CASHFLOW_API_URL}/analyses/{st.session_state.analysis_id}", data=sent,
                headers={"Content-Type": "application/json"},
            )
            resp.raise_for_status()
            status = save_succeeded(status, sent)
        except requests.RequestException as e:
            status = save_failed(status, str(e))
    st.session_state.autosave = status
