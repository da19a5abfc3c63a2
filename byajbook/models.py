from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, model_validator

from .utils.config import REQUIRED_SLOTS, SANKDA_RATE


class InterestMethod(str, Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"
    SANKDA = "sankda"


class InterestType(str, Enum):
    SIMPLE = "simple"
    COMPOUND = "compound"


class Mode(str, Enum):
    IDLE = "idle"
    COLLECTING = "collecting"
    CONFIRMING = "confirming"


class Step(str, Enum):
    NAME = "name"
    AMOUNT = "amount"
    RATE = "rate"
    DURATION = "duration"
    CONFIRM = "confirm"


class PaymentType(str, Enum):
    PARTIAL = "partial"
    FULL = "full"


class LoanDraft(BaseModel):
    """Slots collected so far in a loan-creation conversation."""

    borrower_name: Optional[str] = None
    amount: Optional[float] = Field(default=None, gt=0)
    interest_rate: Optional[float] = Field(default=None, ge=0)
    interest_method: Optional[InterestMethod] = None
    years: Optional[float] = Field(default=None, gt=0)
    # "months" when the duration was spoken in months; drives the due date
    duration_unit: str = "years"
    borrower_phone: Optional[str] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def _sankda_is_fixed_rate(self):
        if self.interest_method == InterestMethod.SANKDA:
            self.interest_rate = SANKDA_RATE
        return self

    def with_slots(self, **values) -> "LoanDraft":
        """Return a validated copy with the given fields replaced."""
        return LoanDraft.model_validate({**self.model_dump(), **values})

    def slot_filled(self, slot: str) -> bool:
        if slot == "name":
            return bool(self.borrower_name)
        if slot == "amount":
            return self.amount is not None
        if slot == "rate":
            return self.interest_rate is not None and self.interest_method is not None
        if slot == "duration":
            return self.years is not None
        raise ValueError(f"Unknown slot: {slot}")

    def missing_slots(self) -> List[str]:
        return [slot for slot in REQUIRED_SLOTS if not self.slot_filled(slot)]

    def has_any_slot(self) -> bool:
        return any(self.slot_filled(slot) for slot in REQUIRED_SLOTS)


class ConversationState(BaseModel):
    mode: Mode = Mode.IDLE
    current_step: Step = Step.NAME
    draft: LoanDraft = Field(default_factory=LoanDraft)
    # idle sub-mode entered after a greeting; no slot collection yet
    engaged: bool = False
    language: str = "en"


class Loan(BaseModel):
    id: str
    borrower_name: str
    amount: float = Field(gt=0)
    interest_rate: float = Field(ge=0)
    interest_method: InterestMethod
    interest_type: InterestType = InterestType.SIMPLE
    years: float = Field(gt=0)
    date_created: datetime
    due_date: datetime
    total_paid: float = 0.0
    is_active: bool = True
    borrower_phone: str = ""
    notes: str = ""


class Payment(BaseModel):
    id: str
    loan_id: str
    amount: float = Field(gt=0)
    date: datetime
    type: PaymentType = PaymentType.PARTIAL


class TranscriptEvent(BaseModel):
    transcript: str
    is_final: bool = False


class StepResult(BaseModel):
    """Outcome of feeding one utterance through the dialogue."""

    state: ConversationState
    prompt: str = ""
    committed_loan: Optional[Loan] = None
    intent: Optional[str] = None
    # true when the host should hand the utterance to the general assistant
    delegate: bool = False
    # true when the host should close the chat window
    terminate: bool = False
    error: Optional[str] = None
    heard: Optional[str] = None

    def to_response(self) -> Dict:
        return {
            "message": self.prompt,
            "intent": self.intent,
            "mode": self.state.mode.value,
            "current_step": self.state.current_step.value,
            "draft": self.state.draft.model_dump(mode="json", exclude_none=True),
            "loan": self.committed_loan.model_dump(mode="json") if self.committed_loan else None,
            "delegate": self.delegate,
            "terminate": self.terminate,
            "error": self.error,
        }
