"""
Ledger storage for loans and their payments.

``LedgerStore`` is the interface the rest of the package talks to. Two
implementations ship: ``InMemoryLedgerStore`` for tests and short-lived
sessions, and ``JsonLedgerStore`` which keeps everything in one JSON file
under the ``byajbook_loans`` / ``byajbook_payments`` keys.
"""

import json
import logging
import os
import threading
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional

from .exceptions import PaymentRejected, PersistenceError
from .interest import payable
from .models import Loan, Payment, PaymentType
from .utils.config import LOANS_KEY, PAYMENTS_KEY

logger = logging.getLogger(__name__)

# Payments are compared in rupees; float drift below a paisa is ignored
_PAISA = 0.01


class LedgerStore(ABC):

    def __init__(self):
        # held across read, validate and write of a payment
        self._lock = threading.RLock()

    @abstractmethod
    def create_loan(self, loan: Loan) -> Loan:
        ...

    @abstractmethod
    def list_loans(self) -> List[Loan]:
        ...

    @abstractmethod
    def get_loan(self, loan_id: str) -> Optional[Loan]:
        ...

    @abstractmethod
    def list_payments(self, loan_id: Optional[str] = None) -> List[Payment]:
        ...

    @abstractmethod
    def _save_payment(self, loan: Loan, payment: Payment) -> None:
        """Persist an updated loan together with its new payment."""

    def record_payment(self, loan_id: str, amount: float,
                       payment_type: PaymentType = PaymentType.PARTIAL,
                       when: Optional[datetime] = None) -> Payment:
        """
        Record a repayment against a loan.

        Args:
            loan_id: Loan being repaid.
            amount: Rupees received; must be positive and within what is
                still outstanding (principal plus interest).
            payment_type: ``full`` closes the loan regardless of balance.
            when: Payment timestamp, defaults to now.

        Returns:
            The stored Payment.

        Raises:
            PaymentRejected: Unknown loan, closed loan or invalid amount.
            PersistenceError: The store could not be written.
        """
        with self._lock:
            return self._record_payment(loan_id, amount, payment_type, when)

    def _record_payment(self, loan_id, amount, payment_type, when) -> Payment:
        loan = self.get_loan(loan_id)
        if loan is None:
            raise PaymentRejected(f"No loan with id {loan_id}")
        if not loan.is_active:
            raise PaymentRejected(f"Loan {loan_id} is already closed")

        payment_type = PaymentType(payment_type)
        outstanding = payable(loan) - loan.total_paid
        if amount is None or amount <= 0:
            raise PaymentRejected("Payment amount must be positive")
        if amount > outstanding + _PAISA:
            raise PaymentRejected(
                f"Payment of {amount:.2f} exceeds outstanding {outstanding:.2f}"
            )

        total_paid = loan.total_paid + amount
        fully_paid = total_paid >= payable(loan) - _PAISA
        updated = loan.model_copy(update={
            "total_paid": total_paid,
            "is_active": not (fully_paid or payment_type == PaymentType.FULL),
        })
        payment = Payment(
            id=uuid.uuid4().hex[:16],
            loan_id=loan_id,
            amount=amount,
            date=when or datetime.now(),
            type=payment_type,
        )
        self._save_payment(updated, payment)
        logger.info(f"Payment {payment.id} of {amount} recorded on loan {loan_id}")
        return payment


class InMemoryLedgerStore(LedgerStore):

    def __init__(self, loans: Optional[List[Loan]] = None):
        super().__init__()
        self._loans: Dict[str, Loan] = {loan.id: loan for loan in loans or []}
        self._payments: List[Payment] = []

    def create_loan(self, loan: Loan) -> Loan:
        self._loans[loan.id] = loan
        return loan

    def list_loans(self) -> List[Loan]:
        return list(self._loans.values())

    def get_loan(self, loan_id: str) -> Optional[Loan]:
        return self._loans.get(loan_id)

    def list_payments(self, loan_id: Optional[str] = None) -> List[Payment]:
        return [p for p in self._payments if loan_id is None or p.loan_id == loan_id]

    def _save_payment(self, loan: Loan, payment: Payment) -> None:
        self._loans[loan.id] = loan
        self._payments.append(payment)


class JsonLedgerStore(LedgerStore):
    """Single-file JSON ledger, rewritten atomically on every change."""

    def __init__(self, path: str):
        self.path = path
        super().__init__()

    def _read(self) -> Dict[str, list]:
        if not os.path.exists(self.path):
            return {LOANS_KEY: [], PAYMENTS_KEY: []}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Could not read ledger {self.path}: {e}")
            raise PersistenceError(f"Could not read ledger: {e}") from e
        data.setdefault(LOANS_KEY, [])
        data.setdefault(PAYMENTS_KEY, [])
        return data

    def _write(self, data: Dict[str, list]) -> None:
        tmp_path = f"{self.path}.tmp"
        try:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error(f"Could not write ledger {self.path}: {e}")
            raise PersistenceError(f"Could not write ledger: {e}") from e

    def create_loan(self, loan: Loan) -> Loan:
        with self._lock:
            data = self._read()
            data[LOANS_KEY].append(loan.model_dump(mode="json"))
            self._write(data)
        return loan

    def list_loans(self) -> List[Loan]:
        return [Loan.model_validate(item) for item in self._read()[LOANS_KEY]]

    def get_loan(self, loan_id: str) -> Optional[Loan]:
        for item in self._read()[LOANS_KEY]:
            if item.get("id") == loan_id:
                return Loan.model_validate(item)
        return None

    def list_payments(self, loan_id: Optional[str] = None) -> List[Payment]:
        return [
            Payment.model_validate(item) for item in self._read()[PAYMENTS_KEY]
            if loan_id is None or item.get("loan_id") == loan_id
        ]

    def _save_payment(self, loan: Loan, payment: Payment) -> None:
        with self._lock:
            data = self._read()
            data[LOANS_KEY] = [
                loan.model_dump(mode="json") if item.get("id") == loan.id else item
                for item in data[LOANS_KEY]
            ]
            data[PAYMENTS_KEY].append(payment.model_dump(mode="json"))
            self._write(data)
