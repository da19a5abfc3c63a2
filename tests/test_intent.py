import pytest

from byajbook.intent import (
    IntentType, after_negation, classify, is_greeting, is_help, matching_intents,
)


@pytest.mark.parametrize("text", ["hi", "Hello!", "namaste", "namastey", "good morning", "kaise ho"])
def test_greetings(text):
    assert classify(text) == IntentType.GREETING


@pytest.mark.parametrize("text", ["bye", "ok bye", "alvida", "thanks bye", "band karo"])
def test_exit(text):
    assert classify(text) == IntentType.EXIT


def test_exit_is_never_a_greeting():
    assert not is_greeting("ok bye")
    assert matching_intents("ok bye") == [IntentType.EXIT, IntentType.AFFIRM]


@pytest.mark.parametrize("text", ["add loan", "new loan", "Raj ko loan dena hai", "udhar dena hai", "add"])
def test_loan_intent(text):
    assert classify(text) == IntentType.LOAN_INTENT


@pytest.mark.parametrize("text", ["yes", "haan", "ok", "theek hai", "no problem", "why not"])
def test_affirm(text):
    assert classify(text) == IntentType.AFFIRM


@pytest.mark.parametrize("text", ["no", "nooo", "nahi", "cancel", "not now"])
def test_deny(text):
    assert classify(text) == IntentType.DENY


def test_deny_wins_over_affirm():
    assert classify("theek nahi") == IntentType.DENY


def test_unrecognized():
    assert classify("what is the weather today") == IntentType.UNRECOGNIZED
    assert classify("") == IntentType.UNRECOGNIZED


def test_greeting_ignored_once_slots_are_filled():
    assert classify("hi", slots_filled=True) == IntentType.UNRECOGNIZED


def test_names_are_not_greetings():
    for name in ["Priya", "Hema", "Namita", "Raj"]:
        assert not is_greeting(name)


def test_help():
    assert is_help("help")
    assert is_help("madad chahiye")
    assert not is_help("add loan")


def test_after_negation():
    assert after_negation("1 saal, nahi 2 saal") == "2 saal"
    assert after_negation("12% yearly, not monthly") == "monthly"
    assert after_negation("no problem, 5000") == ""
    assert after_negation("Priya") == ""
