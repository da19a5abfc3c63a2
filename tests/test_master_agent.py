from datetime import datetime

import pytest

from byajbook.exceptions import PersistenceError
from byajbook.loan_builder import LoanRecordBuilder
from byajbook.master_agent import MasterAgent
from byajbook.models import (
    ConversationState, InterestMethod, LoanDraft, Mode, Step, TranscriptEvent,
)

PRIYA_FLOW = ["add loan", "Priya", "2 lakh", "sankda", "1 year"]


def test_end_to_end_priya(converse, store):
    results = converse(*PRIYA_FLOW, "yes")
    steps = [r.state.current_step for r in results[:5]]

    assert results[0].intent == "loan_intent"
    assert steps == [Step.NAME, Step.AMOUNT, Step.RATE, Step.DURATION, Step.CONFIRM]
    assert results[2].state.draft.amount == 200000
    assert results[3].state.draft.interest_rate == 12
    assert results[3].state.draft.interest_method == InterestMethod.SANKDA
    assert results[4].state.draft.years == 1
    assert results[4].state.mode == Mode.CONFIRMING
    assert "₹224000" in results[4].prompt

    committed = results[5].committed_loan
    assert committed is not None
    assert (committed.borrower_name, committed.amount, committed.interest_rate,
            committed.interest_method, committed.years) == ("Priya", 200000, 12, InterestMethod.SANKDA, 1)
    assert committed.id in results[5].prompt
    assert store.list_loans() == [committed]
    assert results[5].state == ConversationState(language="en")


def test_cancel_during_rate_step(converse, store):
    results = converse("add loan", "Priya", "2 lakh", "cancel")
    final = results[-1]

    assert results[-2].state.current_step == Step.RATE
    assert final.state.mode == Mode.IDLE
    assert final.state.draft == LoanDraft()
    assert final.committed_loan is None
    assert store.list_loans() == []


@pytest.mark.parametrize("answer", ["nahi", "no, cancel it"])
def test_bare_negation_cancels(converse, store, answer):
    final = converse("add loan", "Priya", answer)[-1]
    assert final.intent == "deny"
    assert final.state == ConversationState(language="en")
    assert store.list_loans() == []


@pytest.mark.parametrize("answer, rate, method", [
    ("0% no interest", 0, InterestMethod.YEARLY),
    ("12% yearly, not monthly", 12, InterestMethod.YEARLY),
])
def test_negative_word_inside_rate_answer_keeps_draft(converse, answer, rate, method):
    result = converse("add loan", "Priya", "2 lakh", answer)[-1]
    draft = result.state.draft

    assert result.state.mode == Mode.COLLECTING
    assert result.state.current_step == Step.DURATION
    assert (draft.borrower_name, draft.amount) == ("Priya", 200000)
    assert (draft.interest_rate, draft.interest_method) == (rate, method)


def test_correction_after_negative_word_wins(converse):
    result = converse("add loan", "Priya", "2 lakh", "sankda", "1 saal, nahi 2 saal")[-1]

    assert result.state.mode == Mode.CONFIRMING
    assert result.state.draft.years == 2
    assert "Interest amount: ₹48000" in result.prompt
    assert "Total payable: ₹248000" in result.prompt


def test_borrower_named_like_a_negative_word(converse):
    result = converse("add loan", "Mat")[-1]

    assert result.state.mode == Mode.COLLECTING
    assert result.state.current_step == Step.AMOUNT
    assert result.state.draft.borrower_name == "Mat"


def test_summary_shows_engine_interest(converse):
    result = converse("add loan", "Raj", "10000", "2% monthly", "6 months")[-1]

    assert result.state.mode == Mode.CONFIRMING
    assert "Interest amount: ₹1200" in result.prompt
    assert "Total payable: ₹11200" in result.prompt


@pytest.mark.parametrize("steps_taken", range(0, 6))
def test_exit_resets_from_any_step(converse, steps_taken):
    results = converse(*PRIYA_FLOW[:steps_taken], "bye")
    final = results[-1]

    assert final.intent == "exit"
    assert final.terminate
    assert final.state.mode == Mode.IDLE
    assert final.state.draft == LoanDraft()


def test_step_never_mutates_input(agent):
    state = agent.step(agent.new_state(), "add loan").state
    agent.step(state, "Priya")
    assert state.draft.borrower_name is None
    assert state.current_step == Step.NAME


def test_greeting_opens_menu(converse):
    result = converse("hi")[0]
    assert result.state.engaged
    assert result.state.mode == Mode.IDLE
    assert "add loan" in result.prompt


def test_help_shows_menu(converse):
    result = converse("help")[0]
    assert result.state.mode == Mode.IDLE
    assert "add loan" in result.prompt


def test_unrecognized_is_delegated(converse):
    result = converse("what is the weather today")[0]
    assert result.delegate
    assert result.state.mode == Mode.IDLE


def test_affirm_in_idle_gets_neutral_menu(converse):
    result = converse("yes")[0]
    assert not result.delegate
    assert result.state.mode == Mode.IDLE


def test_one_line_fills_every_slot(converse):
    result = converse("add loan for Raj 50000 at 2% monthly for 1 year")[0]
    draft = result.state.draft

    assert result.state.mode == Mode.CONFIRMING
    assert draft.borrower_name == "Raj"
    assert draft.amount == 50000
    assert draft.interest_method == InterestMethod.MONTHLY
    assert draft.interest_rate == 2
    assert "₹62000" in result.prompt


def test_entity_in_idle_starts_collecting(converse):
    result = converse("Raj ko 50000")[0]
    assert result.state.mode == Mode.COLLECTING
    assert result.state.draft.borrower_name == "Raj"
    assert result.state.draft.amount == 50000
    assert result.state.current_step == Step.RATE


def test_bare_word_in_idle_is_not_a_loan(converse):
    result = converse("pizza")[0]
    assert result.state.mode == Mode.IDLE
    assert result.delegate


def test_miss_reprompts_same_step(converse):
    results = converse("add loan", "Priya", "50")
    assert results[-1].state.current_step == Step.AMOUNT
    assert "100" in results[-1].prompt

    results = converse("add loan", "Priya", "2 lakh", "twelve")
    assert results[-1].state.current_step == Step.RATE
    assert "sankda" in results[-1].prompt


def test_bare_number_in_duration_step_is_years(converse):
    result = converse("add loan", "Priya", "2 lakh", "12%", "2")[-1]
    assert result.state.draft.years == 2
    assert result.state.current_step == Step.CONFIRM


def test_months_duration_keeps_unit(converse):
    result = converse("add loan for Raj 50000 at 12% for 6 months")[0]
    assert result.state.draft.interest_method == InterestMethod.YEARLY
    assert result.state.draft.years == 0.5
    assert result.state.draft.duration_unit == "months"
    assert "6 months" in result.prompt


@pytest.mark.parametrize("rate_text", ["sankda", "15% sankda", "30 percent sankda"])
def test_sankda_override_is_idempotent(converse, rate_text):
    result = converse("add loan", "Priya", "2 lakh", rate_text)[-1]
    assert result.state.draft.interest_rate == 12
    assert LoanDraft(interest_method=InterestMethod.SANKDA, interest_rate=40).interest_rate == 12


def test_confirm_needs_yes_or_no(converse, store):
    results = converse(*PRIYA_FLOW, "maybe")
    assert results[-1].state.mode == Mode.CONFIRMING
    assert store.list_loans() == []


def test_confirm_no_discards(converse, store):
    result = converse(*PRIYA_FLOW, "no")[-1]
    assert result.state.mode == Mode.IDLE
    assert result.committed_loan is None
    assert store.list_loans() == []


class FlakyStore:
    def __init__(self):
        self.fail = True
        self.loans = []

    def create_loan(self, loan):
        if self.fail:
            raise OSError("disk full")
        self.loans.append(loan)
        return loan


def test_persistence_failure_keeps_confirming():
    store = FlakyStore()
    agent = MasterAgent(LoanRecordBuilder(store))
    state = agent.new_state()
    for utterance in PRIYA_FLOW:
        state = agent.step(state, utterance).state

    failed = agent.step(state, "yes")
    assert failed.state.mode == Mode.CONFIRMING
    assert failed.error
    assert failed.committed_loan is None

    store.fail = False
    retried = agent.step(failed.state, "yes")
    assert retried.committed_loan is not None
    assert retried.state.mode == Mode.IDLE
    assert store.loans == [retried.committed_loan]


class BrokenBuilder:
    def build(self, draft):
        raise RuntimeError("boom")


def test_unexpected_error_becomes_generic_reprompt(converse):
    agent = MasterAgent(BrokenBuilder())
    state = converse(*PRIYA_FLOW)[-1].state

    result = agent.step(state, "yes")
    assert result.error == "internal_error"
    assert result.state == state


def test_interim_transcripts_never_move_the_dialogue(agent):
    state = agent.step(agent.new_state(), "add loan").state
    for partial in ["Pri", "Priy", "Priya"]:
        result = agent.handle_transcript(state, TranscriptEvent(transcript=partial, is_final=False))
        assert result.state.current_step == Step.NAME
        assert result.heard == partial
        state = result.state

    final = agent.handle_transcript(state, TranscriptEvent(transcript="Priya", is_final=True))
    assert final.state.current_step == Step.AMOUNT
    assert final.heard == "Priya"


def test_hindi_prompts(builder):
    agent = MasterAgent(builder, language="hi")
    result = agent.step(agent.new_state(), "add loan")
    assert "naam" in result.prompt


def test_committed_loan_due_date(converse):
    loan = converse(*PRIYA_FLOW, "yes")[-1].committed_loan
    assert loan.date_created == datetime(2024, 1, 15, 10, 0)
    assert loan.due_date == datetime(2025, 1, 15, 10, 0)
