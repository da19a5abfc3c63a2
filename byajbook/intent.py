import logging
import re
from enum import Enum
from typing import Callable, List, Tuple

from rapidfuzz import fuzz, process

from .utils.config import (
    AFFIRM_PATTERNS, AFFIRM_PHRASES, AFFIRM_WORDS, DENY_PATTERNS, DENY_PHRASES,
    DENY_WORDS, EXIT_PATTERNS, GREETING_FUZZY_THRESHOLD, GREETING_FUZZY_WORDS,
    GREETING_PATTERNS, GREETING_WORDS, HELP_WORDS, LOAN_KEYWORDS, LOAN_PATTERNS,
    LOAN_TRIGGERS, LOAN_TRIGGERS_ALONE,
)
from .utils.text import clean_text, word_pattern

logger = logging.getLogger(__name__)


class IntentType(Enum):
    GREETING = "greeting"
    LOAN_INTENT = "loan_intent"
    AFFIRM = "affirm"
    DENY = "deny"
    EXIT = "exit"
    UNRECOGNIZED = "unrecognized"


def _compile_full(patterns: List[str]) -> List[re.Pattern]:
    return [re.compile(pattern) for pattern in patterns]


_EXIT = _compile_full(EXIT_PATTERNS)
_GREETING = _compile_full(GREETING_PATTERNS)
_DENY = _compile_full(DENY_PATTERNS)
_AFFIRM = _compile_full(AFFIRM_PATTERNS)
_LOAN = _compile_full(LOAN_PATTERNS)

_DENY_WORDS = re.compile(word_pattern(DENY_WORDS + DENY_PHRASES))
_AFFIRM_WORDS = re.compile(word_pattern(AFFIRM_WORDS + AFFIRM_PHRASES))
_LOAN_WORDS = re.compile(word_pattern(LOAN_KEYWORDS))
_HELP_WORDS = re.compile(word_pattern(HELP_WORDS))
# "no problem" / "why not" say yes with a negative word in them
_NEGATED_AFFIRM = re.compile(word_pattern([p for p in AFFIRM_PHRASES if _DENY_WORDS.search(p)]))

# Fuzzy greeting matching only makes sense on short utterances
_FUZZY_MAX_LENGTH = 16


def _strip_punctuation(text: str) -> str:
    return re.sub(r"[!?.,;:]+", " ", text).strip()


def _normalise(text: str) -> str:
    return clean_text(_strip_punctuation(clean_text(text)))


def is_exit(text: str) -> bool:
    text = _normalise(text)
    return any(pattern.fullmatch(text) for pattern in _EXIT)


def is_greeting(text: str) -> bool:
    """
    Salutation check. Anything that also reads as an exit is not a greeting,
    so "ok bye" never re-opens the menu.
    """
    text = _normalise(text)
    if not text or is_exit(text):
        return False
    if text in GREETING_WORDS:
        return True
    if any(pattern.fullmatch(text) for pattern in _GREETING):
        return True
    if len(text) <= _FUZZY_MAX_LENGTH:
        match = process.extractOne(
            text, GREETING_FUZZY_WORDS, scorer=fuzz.ratio,
            score_cutoff=GREETING_FUZZY_THRESHOLD,
        )
        return match is not None
    return False


def is_deny(text: str) -> bool:
    text = _normalise(text)
    if any(pattern.fullmatch(text) for pattern in _DENY):
        return True
    text = _NEGATED_AFFIRM.sub(" ", text)
    return _DENY_WORDS.search(text) is not None


def after_negation(text: str) -> str:
    """What follows the last deny word: "1 saal, nahi 2 saal" -> "2 saal"."""
    text = _NEGATED_AFFIRM.sub(" ", _normalise(text))
    tail = ""
    for match in _DENY_WORDS.finditer(text):
        tail = text[match.end():]
    return tail.strip()


def is_affirm(text: str) -> bool:
    text = _normalise(text)
    if any(pattern.fullmatch(text) for pattern in _AFFIRM):
        return True
    return _AFFIRM_WORDS.search(text) is not None


def is_loan_intent(text: str) -> bool:
    text = _normalise(text)
    if _LOAN_WORDS.search(text):
        return True
    if any(pattern.search(text) for pattern in _LOAN):
        return True
    tokens = text.split()
    if not tokens:
        return False
    if len(tokens) == 1:
        return tokens[0] in LOAN_TRIGGERS_ALONE
    return tokens[0] in LOAN_TRIGGERS


def is_help(text: str) -> bool:
    return _HELP_WORDS.search(_normalise(text)) is not None


# Evaluated in order; the first match wins. Deny sits ahead of affirm so that
# "nahi, theek nahi" never reads as a yes.
INTENT_RULES: List[Tuple[IntentType, Callable[[str], bool]]] = [
    (IntentType.EXIT, is_exit),
    (IntentType.DENY, is_deny),
    (IntentType.LOAN_INTENT, is_loan_intent),
    (IntentType.AFFIRM, is_affirm),
    (IntentType.GREETING, is_greeting),
]


def matching_intents(text: str) -> List[IntentType]:
    """Every category whose vocabulary matches ``text``, in rule order."""
    return [intent for intent, matches in INTENT_RULES if matches(text)]


def classify(text: str, slots_filled: bool = False) -> IntentType:
    """
    Classify an utterance into exactly one intent.

    Args:
        text: Raw user utterance.
        slots_filled: True once any loan slot is in the draft. A greeting is
            then no longer recognised, so a name like "Hema" keeps flowing
            into slot extraction.

    Returns:
        The first matching IntentType, or UNRECOGNIZED.
    """
    for intent, matches in INTENT_RULES:
        if intent == IntentType.GREETING and slots_filled:
            continue
        if matches(text):
            logger.debug(f"Classified {text!r} as {intent.value}")
            return intent
    return IntentType.UNRECOGNIZED
