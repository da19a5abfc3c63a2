import logging
import re
from typing import Dict, List, Optional

from .exceptions import PersistenceError
from .intent import IntentType, after_negation, classify, is_help
from .interest import engine_input, interest_amount, payable
from .models import (
    ConversationState, InterestMethod, LoanDraft, Mode, Step, StepResult,
    TranscriptEvent,
)
from .prompts import format_money, format_number, render
from .utils.config import DEFAULT_LANGUAGE, MIN_LOAN_AMOUNT, REQUIRED_SLOTS
from .utils.preprocess import (
    extract_amount, extract_duration, extract_name, extract_phone, extract_rate,
    validate_amount, validate_duration, validate_rate,
)

logger = logging.getLogger(__name__)

# In the duration step a bare "2" means two years
_BARE_NUMBER = re.compile(r"\s*(\d+(?:\.\d+)?)\s*")


class MasterAgent:
    """
    Slot-filling dialogue for creating a loan by chat or voice.

    The agent holds no conversation state of its own: every call takes the
    session's ConversationState and returns a new one inside a StepResult,
    so one agent serves any number of sessions.
    """

    def __init__(self, builder, language: str = DEFAULT_LANGUAGE):
        self.builder = builder
        self.language = language

    def new_state(self, language: Optional[str] = None) -> ConversationState:
        return ConversationState(language=language or self.language)

    def handle_transcript(self, state: ConversationState, event: TranscriptEvent) -> StepResult:
        """
        Voice entry point. Interim transcripts only update what was heard;
        the dialogue moves on final transcripts alone.
        """
        if not event.is_final:
            return StepResult(state=state.model_copy(deep=True), heard=event.transcript)

        result = self.step(state, event.transcript)
        result.heard = event.transcript
        return result

    def step(self, state: ConversationState, utterance: str) -> StepResult:
        """
        Feed one final utterance through the dialogue.

        Args:
            state: Current session state. It is never mutated.
            utterance: Raw user text.

        Returns:
            StepResult with the next state, the prompt to show and the loan
            committed by this step, if any.
        """
        working = state.model_copy(deep=True)
        try:
            return self._step(working, utterance or "")
        except Exception as e:
            logger.exception(f"Dialogue step failed for {utterance!r}: {e}")
            return StepResult(
                state=state.model_copy(deep=True),
                prompt=render(state.language, "generic_retry"),
                error="internal_error",
            )

    def _step(self, state: ConversationState, text: str) -> StepResult:
        intent = classify(text, slots_filled=state.draft.has_any_slot())
        logger.debug(f"mode={state.mode.value} step={state.current_step.value} intent={intent.value}")

        if intent == IntentType.EXIT:
            return StepResult(
                state=self._reset(state),
                prompt=render(state.language, "farewell"),
                intent=intent.value,
                terminate=True,
            )

        if state.mode == Mode.CONFIRMING:
            return self._confirm(state, intent)
        if state.mode == Mode.COLLECTING:
            return self._collect(state, text, intent)
        return self._idle(state, text, intent)

    # --- Modes ---

    def _idle(self, state: ConversationState, text: str, intent: IntentType) -> StepResult:
        if intent == IntentType.GREETING:
            state.engaged = True
            return StepResult(state=state, prompt=render(state.language, "menu"), intent=intent.value)

        if is_help(text):
            return StepResult(state=state, prompt=render(state.language, "menu"), intent=intent.value)

        # Only a marked name ("naam Priya") opens a loan; a stray word doesn't
        if intent == IntentType.LOAN_INTENT or self._extract(text, REQUIRED_SLOTS, bare_name=False):
            state.mode = Mode.COLLECTING
            state.draft = LoanDraft()
            updates = self._extract(text, REQUIRED_SLOTS)
            return self._advance(state, updates, intent, retry_on_miss=False)

        if intent in (IntentType.AFFIRM, IntentType.DENY):
            return StepResult(state=state, prompt=render(state.language, "neutral_menu"), intent=intent.value)

        return StepResult(state=state, intent=intent.value, delegate=True)

    def _collect(self, state: ConversationState, text: str, intent: IntentType) -> StepResult:
        current = state.current_step.value
        slots = [current] + [
            slot for slot in REQUIRED_SLOTS[REQUIRED_SLOTS.index(current) + 1:]
            if not state.draft.slot_filled(slot)
        ]
        updates = self._extract(text, slots, current=current)

        # A negative word only cancels when the answer carries no slot content
        if intent == IntentType.DENY:
            if not self._entered(updates, state.current_step):
                logger.info("Loan draft cancelled by user")
                return StepResult(
                    state=self._reset(state),
                    prompt=render(state.language, "cancelled"),
                    intent=intent.value,
                )
            correction = after_negation(text)
            if correction:
                corrected = self._extract(correction, slots, current=current)
                if self._entered(corrected, state.current_step):
                    updates = {**updates, **corrected}

        return self._advance(state, updates, intent)

    def _confirm(self, state: ConversationState, intent: IntentType) -> StepResult:
        if intent == IntentType.DENY:
            return StepResult(
                state=self._reset(state),
                prompt=render(state.language, "discarded"),
                intent=intent.value,
            )

        if intent != IntentType.AFFIRM:
            return StepResult(
                state=state,
                prompt=render(state.language, "confirm_again"),
                intent=intent.value,
            )

        try:
            loan = self.builder.build(state.draft)
        except PersistenceError as e:
            logger.error(f"Could not save loan for {state.draft.borrower_name}: {e}")
            return StepResult(
                state=state,
                prompt=render(state.language, "save_failed"),
                intent=intent.value,
                error=str(e),
            )

        logger.info(f"Loan {loan.id} created for {loan.borrower_name} ✅")
        return StepResult(
            state=self._reset(state),
            prompt=render(
                state.language, "created",
                name=loan.borrower_name,
                loan_id=loan.id,
                total=format_money(payable(loan)),
                due_date=loan.due_date.strftime("%d %b %Y"),
            ),
            committed_loan=loan,
            intent=intent.value,
        )

    # --- Slot handling ---

    def _extract(self, text: str, slots: List[str], current: Optional[str] = None,
                 bare_name: bool = True) -> Dict:
        """Run the extractors for ``slots`` and return draft field updates."""
        updates = {}

        if "name" in slots:
            name = extract_name(text, bare=bare_name)
            if name:
                updates["borrower_name"] = name.value

        if "amount" in slots:
            amount = extract_amount(text)
            if amount and validate_amount(amount.value):
                updates["amount"] = amount.value

        if "rate" in slots:
            rate = extract_rate(text)
            if rate and validate_rate(rate.value.rate):
                updates["interest_rate"] = rate.value.rate
                updates["interest_method"] = rate.value.method

        if "duration" in slots:
            duration = extract_duration(text)
            if duration:
                years, unit = duration.value
            elif current == "duration" and _BARE_NUMBER.fullmatch(text):
                years, unit = float(_BARE_NUMBER.fullmatch(text).group(1)), "years"
            else:
                years = None
            if years is not None and validate_duration(years):
                updates["years"] = years
                updates["duration_unit"] = unit

        if updates:
            phone = extract_phone(text)
            if phone:
                updates["borrower_phone"] = phone.value
        return updates

    def _advance(self, state: ConversationState, updates: Dict, intent: IntentType,
                 retry_on_miss: bool = True) -> StepResult:
        previous = state.current_step
        if updates:
            logger.info(f"Collected slots: {', '.join(sorted(updates))}")
        # Sankda forces the rate to 12 here, so the summary already shows it
        state.draft = state.draft.with_slots(**updates)
        missing = state.draft.missing_slots()

        if not missing:
            state.mode = Mode.CONFIRMING
            state.current_step = Step.CONFIRM
            return StepResult(state=state, prompt=self._summary(state), intent=intent.value)

        state.current_step = Step(missing[0])
        language = state.language
        draft = state.draft

        if retry_on_miss and state.current_step == previous and not self._entered(updates, previous):
            key = f"retry_{previous.value}"
            return StepResult(
                state=state,
                prompt=render(language, key, minimum=MIN_LOAN_AMOUNT),
                intent=intent.value,
            )

        if state.current_step == Step.NAME:
            prompt = render(language, "ask_name")
        elif state.current_step == Step.AMOUNT:
            prompt = render(language, "ask_amount", name=draft.borrower_name)
        elif state.current_step == Step.RATE:
            prompt = render(language, "ask_rate", amount=format_money(draft.amount))
        else:
            prompt = render(language, "ask_duration", rate=self._describe_rate(draft, language))
        return StepResult(state=state, prompt=prompt, intent=intent.value)

    @staticmethod
    def _entered(updates: Dict, step: Step) -> bool:
        fields = {
            Step.NAME: "borrower_name",
            Step.AMOUNT: "amount",
            Step.RATE: "interest_method",
            Step.DURATION: "years",
        }
        return fields.get(step) in updates

    # --- Prompt helpers ---

    def _summary(self, state: ConversationState) -> str:
        draft = state.draft
        return render(
            state.language, "summary",
            name=draft.borrower_name,
            amount=format_money(draft.amount),
            rate=self._describe_rate(draft, state.language),
            duration=self._describe_duration(draft, state.language),
            interest=format_money(interest_amount(engine_input(draft))),
            total=format_money(payable(draft)),
        )

    @staticmethod
    def _describe_rate(draft: LoanDraft, language: str) -> str:
        if draft.interest_method == InterestMethod.SANKDA:
            return render(language, "rate_sankda")
        key = "rate_monthly" if draft.interest_method == InterestMethod.MONTHLY else "rate_yearly"
        return render(language, key, rate=format_number(draft.interest_rate))

    @staticmethod
    def _describe_duration(draft: LoanDraft, language: str) -> str:
        if draft.duration_unit == "months":
            return render(language, "duration_months", months=round(draft.years * 12))
        return render(language, "duration_years", years=format_number(draft.years))

    @staticmethod
    def _reset(state: ConversationState) -> ConversationState:
        return ConversationState(language=state.language)
