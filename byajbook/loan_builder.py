import logging
import uuid
from datetime import datetime
from typing import Callable, Optional

import pandas as pd

from .exceptions import IncompleteDraftError, PersistenceError
from .models import InterestType, Loan, LoanDraft
from .utils.config import DAYS_PER_YEAR

logger = logging.getLogger(__name__)


def new_loan_id() -> str:
    return uuid.uuid4().hex[:16]


def due_date_for(created: datetime, years: float, unit: str = "years") -> datetime:
    """
    Calendar due date for a loan of ``years``.

    Durations spoken in months land on the same day N months later, whole
    years on the same date N years later; anything else is counted in days.
    """
    start = pd.Timestamp(created)
    if unit == "months":
        due = start + pd.DateOffset(months=round(years * 12))
    elif float(years).is_integer():
        due = start + pd.DateOffset(years=int(years))
    else:
        due = start + pd.Timedelta(days=round(DAYS_PER_YEAR * years))
    return due.to_pydatetime()


class LoanRecordBuilder:
    """Turns a confirmed draft into a stored Loan."""

    def __init__(self, store, clock: Optional[Callable[[], datetime]] = None,
                 id_factory: Optional[Callable[[], str]] = None):
        self.store = store
        self.clock = clock or datetime.now
        self.id_factory = id_factory or new_loan_id

    def build(self, draft: LoanDraft) -> Loan:
        missing = draft.missing_slots()
        if missing:
            raise IncompleteDraftError(missing)

        created = self.clock()
        loan = Loan(
            id=self.id_factory(),
            borrower_name=draft.borrower_name,
            amount=draft.amount,
            interest_rate=draft.interest_rate,
            interest_method=draft.interest_method,
            interest_type=InterestType.SIMPLE,
            years=draft.years,
            date_created=created,
            due_date=due_date_for(created, draft.years, draft.duration_unit),
            total_paid=0.0,
            is_active=True,
            borrower_phone=draft.borrower_phone or "",
            notes=draft.notes or "",
        )

        try:
            stored = self.store.create_loan(loan)
        except PersistenceError:
            raise
        except Exception as e:
            logger.error(f"Ledger store rejected loan {loan.id}: {e}")
            raise PersistenceError(f"Could not save loan: {e}") from e
        return stored or loan
