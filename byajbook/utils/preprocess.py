"""
Pattern-based entity extraction for loan-creation utterances.

Every extractor takes raw text and returns ``Found(value)`` or ``NOT_FOUND``.
A miss is an ordinary value; the dialogue re-prompts on it. Extractors are
independent of each other and of any conversation state, so running all of
them on one sentence ("Raj ko 2 lakh ka loan 12% sankda pe") is valid.
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, List, NamedTuple, Pattern, Tuple, Union

from ..intent import is_greeting
from ..models import InterestMethod
from .config import (
    CURRENCY_PREFIX, MAGNITUDE_WORDS, MAX_NAME_WORDS, MIN_DURATION_YEARS,
    MIN_INTEREST_RATE, MIN_LOAN_AMOUNT, MONTH_UNITS, MONTHLY_WORDS,
    NAME_STOP_WORDS, PERCENT_WORDS, SANKDA_RATE, SANKDA_WORDS,
    YEAR_UNITS,
)
from .text import WORD_CHAR, clean_text, word_pattern

_NUMBER = r"(\d+(?:,\d+)*(?:\.\d+)?)"
_NUMBER_END = r"(?!\d)(?![.,]\d)"


@dataclass(frozen=True)
class Found:
    value: Any

    def __bool__(self):
        return True


class NotFound:
    def __bool__(self):
        return False

    def __repr__(self):
        return "NOT_FOUND"


NOT_FOUND = NotFound()
ExtractionResult = Union[Found, NotFound]


class RateInfo(NamedTuple):
    rate: float
    method: InterestMethod


class Duration(NamedTuple):
    years: float
    unit: str  # "years" or "months"


def _to_number(raw: str) -> float:
    return float(raw.replace(",", ""))


# --- Phone numbers (never amount candidates) ---

PHONE_PATTERN = re.compile(r"(?<!\d)(?:\+?91[\s-]?)?([6-9]\d{9})(?!\d)")


def extract_phone(text: str) -> ExtractionResult:
    match = PHONE_PATTERN.search(text or "")
    if match:
        return Found(match.group(1))
    return NOT_FOUND


# --- Amount ---

def _magnitude(multiplier: int) -> Callable[[re.Match], float]:
    return lambda match: _to_number(match.group(1)) * multiplier


AMOUNT_PATTERNS: List[Tuple[Pattern, Callable[[re.Match], float]]] = [
    (
        re.compile(rf"(?<![\d.,]){_NUMBER}{_NUMBER_END}\s*(?:{words})(?![a-z])"),
        _magnitude(multiplier),
    )
    for words, multiplier in MAGNITUDE_WORDS
] + [
    (
        re.compile(
            rf"(?:{CURRENCY_PREFIX}\s*)?(?<![\d.,]){_NUMBER}{_NUMBER_END}(?!\s*(?:{PERCENT_WORDS}))"
        ),
        lambda match: _to_number(match.group(1)),
    ),
]


def amount_candidates(text: str) -> List[float]:
    """Every amount-like number in ``text`` that clears the loan minimum."""
    text = PHONE_PATTERN.sub(" ", clean_text(text))
    candidates = []
    for pattern, handler in AMOUNT_PATTERNS:
        for match in pattern.finditer(text):
            value = handler(match)
            if value >= MIN_LOAN_AMOUNT:
                candidates.append(value)
    return candidates


def extract_amount(text: str) -> ExtractionResult:
    # Rates and durations are small numbers; the loan amount is the largest
    candidates = amount_candidates(text)
    if candidates:
        return Found(max(candidates))
    return NOT_FOUND


# --- Interest rate + method ---

_SANKDA = re.compile(word_pattern(SANKDA_WORDS))
_PERCENT = re.compile(rf"(\d+(?:\.\d+)?)\s*(?:{PERCENT_WORDS})")
_MONTHLY = re.compile(word_pattern(MONTHLY_WORDS))
# "not monthly" / "monthly nahi" rule the monthly method out
_NEGATED_MONTHLY = re.compile(
    rf"(?<!{WORD_CHAR})(?:not|no|nahi|nahin)\s+{_MONTHLY.pattern}"
    rf"|{_MONTHLY.pattern}\s+(?:nahi|nahin|not)(?!{WORD_CHAR})"
)


def extract_rate(text: str) -> ExtractionResult:
    text = clean_text(text)
    if _SANKDA.search(text):
        return Found(RateInfo(SANKDA_RATE, InterestMethod.SANKDA))

    match = _PERCENT.search(text)
    if not match:
        return NOT_FOUND

    rate = float(match.group(1))
    # "for 6 months" is a duration, not a monthly rate
    period_text = _NEGATED_MONTHLY.sub(" ", text)
    for pattern, _, _ in DURATION_PATTERNS:
        period_text = pattern.sub(" ", period_text)
    if _MONTHLY.search(period_text):
        return Found(RateInfo(rate, InterestMethod.MONTHLY))
    return Found(RateInfo(rate, InterestMethod.YEARLY))


# --- Duration ---

DURATION_PATTERNS: List[Tuple[Pattern, Callable[[float], float], str]] = [
    (re.compile(rf"(\d+(?:\.\d+)?)\s*(?:{YEAR_UNITS})(?!{WORD_CHAR})"), lambda n: n, "years"),
    (re.compile(rf"(\d+(?:\.\d+)?)\s*(?:{MONTH_UNITS})(?!{WORD_CHAR})"), lambda n: n / 12, "months"),
]


def extract_duration(text: str) -> ExtractionResult:
    """Duration in years; "1 saal 6 mahine" adds up to 1.5."""
    text = clean_text(text)
    total = 0.0
    units = []
    for pattern, to_years, unit in DURATION_PATTERNS:
        for match in pattern.finditer(text):
            total += to_years(float(match.group(1)))
            units.append(unit)

    if not units or total <= 0:
        return NOT_FOUND
    unit = "months" if set(units) == {"months"} else "years"
    return Found(Duration(max(MIN_DURATION_YEARS, total), unit))


# --- Borrower name ---

_NAME = r"([a-z][a-z ]*)"
_NAME_LAZY = r"([a-z][a-z ]*?)"

NAME_TEMPLATES: List[Pattern] = [
    re.compile(r"(?:my |borrower'?s? )?name (?:is )?" + _NAME),
    re.compile(r"(?:mera |borrower ka )?naam (?:hai )?" + _NAME),
    re.compile(r"borrower (?:is )?" + _NAME),
    re.compile(r"(?:loan|udhar|paisa) dena " + _NAME_LAZY + r" ko\b"),
    re.compile(r"^" + _NAME_LAZY + r" ko\b"),
    re.compile(r"(?:^| )" + _NAME_LAZY + r" (?:ka|ke liye) (?:loan|udhar)"),
    re.compile(r"(?:loan|udhar|paisa|money) (?:for|to) " + _NAME),
    re.compile(r"\b(?:for|to|ke liye) " + _NAME),
]

_UNIT_WORDS = "|".join(
    [words for words, _ in MAGNITUDE_WORDS] + [YEAR_UNITS, MONTH_UNITS, PERCENT_WORDS]
)

# Quantities are removed before the bare-name fallback ("Raj 50000" -> "Raj")
_QUANTITY = re.compile(
    "|".join([
        PHONE_PATTERN.pattern,
        rf"(?:{CURRENCY_PREFIX}\s*)?\d+(?:[,.]\d+)*(?:\s*(?:{_UNIT_WORDS})(?!{WORD_CHAR}))?",
        rf"(?<!{WORD_CHAR})(?:{CURRENCY_PREFIX})(?!{WORD_CHAR})",
    ])
)


def clean_name(raw: str) -> str:
    """Drop marker/filler words and title-case what is left."""
    words = [
        word for word in raw.split()
        if word.isalpha() and word.isascii() and word.lower() not in NAME_STOP_WORDS
    ]
    return " ".join(word.capitalize() for word in words[:MAX_NAME_WORDS])


def looks_like_name(text: str) -> bool:
    """
    True when the whole utterance can stand as a borrower name.

    Short (at most 4 words), alphabetic, outside the non-name vocabulary and
    not a greeting. A bare "hi" or "no" is never a borrower.
    """
    text = clean_text(text)
    tokens = text.split()
    if not tokens or len(tokens) > MAX_NAME_WORDS:
        return False
    if not all(token.isalpha() and token.isascii() and 2 <= len(token) <= 20 for token in tokens):
        return False
    if any(token in NAME_STOP_WORDS for token in tokens):
        return False
    return not is_greeting(text)


def extract_name(text: str, bare: bool = True) -> ExtractionResult:
    """
    Borrower name from a marker template ("naam Priya", "Raj ko ...") or,
    when ``bare`` is set, from the whole utterance once quantities are gone.
    """
    text = clean_text(text)

    for template in NAME_TEMPLATES:
        match = template.search(text)
        if match:
            name = clean_name(match.group(1))
            if len(name) > 1:
                return Found(name)

    if not bare:
        return NOT_FOUND

    remainder = clean_text(_QUANTITY.sub(" ", text))
    if looks_like_name(remainder):
        name = clean_name(remainder)
        if len(name) > 1:
            return Found(name)
    return NOT_FOUND


# --- Slot validation ---

def validate_amount(amount: float) -> bool:
    return amount is not None and amount >= MIN_LOAN_AMOUNT


def validate_rate(rate: float) -> bool:
    return rate is not None and rate >= MIN_INTEREST_RATE


def validate_duration(years: float) -> bool:
    return years is not None and years >= MIN_DURATION_YEARS
