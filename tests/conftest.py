from datetime import datetime

import pytest

from byajbook.ledger import InMemoryLedgerStore
from byajbook.loan_builder import LoanRecordBuilder
from byajbook.master_agent import MasterAgent

CREATED = datetime(2024, 1, 15, 10, 0)


@pytest.fixture
def store():
    return InMemoryLedgerStore()


@pytest.fixture
def builder(store):
    ids = iter(f"loan-{n}" for n in range(1, 100))
    return LoanRecordBuilder(store, clock=lambda: CREATED, id_factory=lambda: next(ids))


@pytest.fixture
def agent(builder):
    return MasterAgent(builder, language="en")


@pytest.fixture
def converse(agent):
    """Feed utterances one after another; returns every StepResult."""
    def run(*utterances, state=None):
        state = state or agent.new_state()
        results = []
        for utterance in utterances:
            result = agent.step(state, utterance)
            results.append(result)
            state = result.state
        return results
    return run
