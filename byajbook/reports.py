import logging
from datetime import datetime
from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from .interest import monthly_interest, payable
from .models import Loan, Payment
from .utils.config import DUE_REMINDER_DAYS

logger = logging.getLogger(__name__)

LOAN_COLUMNS = [
    "id", "borrower_name", "amount", "interest_rate", "interest_method",
    "years", "date_created", "due_date", "total_paid", "is_active",
]

# Interest is accrued in whole 30-day months
_DAYS_PER_MONTH = 30


def loans_frame(loans: List[Loan]) -> pd.DataFrame:
    """One row per loan with payable and outstanding amounts attached."""
    if not loans:
        return pd.DataFrame(columns=LOAN_COLUMNS + ["payable", "outstanding", "monthly_interest"])

    df = pd.DataFrame([loan.model_dump() for loan in loans])[LOAN_COLUMNS]
    df["interest_method"] = df["interest_method"].map(lambda m: getattr(m, "value", m))
    df["date_created"] = pd.to_datetime(df["date_created"])
    df["due_date"] = pd.to_datetime(df["due_date"])
    df["payable"] = [payable(loan) for loan in loans]
    df["outstanding"] = np.maximum(df["payable"] - df["total_paid"], 0.0)
    df["monthly_interest"] = [monthly_interest(loan) for loan in loans]
    return df


def portfolio_summary(loans: List[Loan], payments: Optional[List[Payment]] = None) -> Dict:
    """Headline totals for the dashboard."""
    df = loans_frame(loans)
    if df.empty:
        return {
            "total_lent": 0.0, "total_payable": 0.0, "total_received": 0.0,
            "total_outstanding": 0.0, "active_loans": 0, "completed_loans": 0,
        }

    if payments:
        received = float(sum(payment.amount for payment in payments))
    else:
        received = float(df["total_paid"].sum())

    active = df["is_active"].astype(bool)
    return {
        "total_lent": float(df["amount"].sum()),
        "total_payable": float(df["payable"].sum()),
        "total_received": received,
        "total_outstanding": float(df.loc[active, "outstanding"].sum()),
        "active_loans": int(active.sum()),
        "completed_loans": int((~active).sum()),
    }


def borrower_summaries(loans: List[Loan]) -> List[Dict]:
    """Per-borrower totals, largest lender exposure first."""
    df = loans_frame(loans)
    if df.empty:
        return []

    df["is_active"] = df["is_active"].astype(bool)
    grouped = df.groupby("borrower_name").agg(
        total_lent=("amount", "sum"),
        total_paid=("total_paid", "sum"),
        outstanding=("outstanding", "sum"),
        active_loans=("is_active", "sum"),
        loan_count=("id", "count"),
    )
    grouped["completed_loans"] = grouped["loan_count"] - grouped["active_loans"]
    grouped = grouped.sort_values("total_lent", ascending=False).reset_index()

    return [
        {
            "borrower_name": row.borrower_name,
            "total_lent": float(row.total_lent),
            "total_paid": float(row.total_paid),
            "outstanding": float(row.outstanding),
            "active_loans": int(row.active_loans),
            "completed_loans": int(row.completed_loans),
        }
        for row in grouped.itertuples(index=False)
    ]


def interest_earnings(loans: List[Loan], now: Optional[datetime] = None) -> Dict:
    """
    Interest accrued so far and the share of it already collected.

    ``potential`` is simple interest for the whole months elapsed since each
    loan was created. ``earned`` weights each loan's accrued interest by the
    fraction of principal repaid, which is an estimate, not a ledger figure.
    """
    df = loans_frame(loans)
    if df.empty:
        return {"earned": 0.0, "potential": 0.0, "collection_rate": 0.0}

    now = pd.Timestamp(now or datetime.now())
    months_elapsed = np.floor((now - df["date_created"]).dt.days.clip(lower=0) / _DAYS_PER_MONTH)
    accrued = df["monthly_interest"] * months_elapsed
    paid_ratio = df["total_paid"] / df["amount"]

    potential = float(accrued.sum())
    earned = float((accrued * paid_ratio).sum())
    return {
        "earned": earned,
        "potential": potential,
        "collection_rate": earned / potential if potential else 0.0,
    }


def due_reminders(loans: List[Loan], now: Optional[datetime] = None,
                  within_days: int = DUE_REMINDER_DAYS) -> List[Dict]:
    """Active loans that are overdue or due within ``within_days``, soonest first."""
    df = loans_frame(loans)
    if df.empty:
        return []

    today = pd.Timestamp(now or datetime.now()).normalize()
    df = df[df["is_active"].astype(bool)].copy()
    df["days_until_due"] = (df["due_date"].dt.normalize() - today).dt.days
    df = df[df["days_until_due"] <= within_days].sort_values("days_until_due")

    logger.debug(f"{len(df)} loans due within {within_days} days")
    return [
        {
            "loan_id": row.id,
            "borrower_name": row.borrower_name,
            "amount": float(row.outstanding),
            "due_date": row.due_date.isoformat(),
            "days_until_due": int(row.days_until_due),
            "is_overdue": bool(row.days_until_due < 0),
        }
        for row in df.itertuples(index=False)
    ]
