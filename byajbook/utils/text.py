import re
import unicodedata
from typing import Iterable

# Devanagari vowel signs are not \w, so word edges are spelled out
WORD_CHAR = r"[\wऀ-ॿ]"


def clean_text(text: str) -> str:
    """Lower-case, NFC-normalise and collapse whitespace."""
    text = unicodedata.normalize("NFC", text or "")
    return re.sub(r"\s+", " ", text).strip().lower()


def word_pattern(words: Iterable[str]) -> str:
    """Alternation matching any of ``words`` as whole words or phrases."""
    alternatives = "|".join(
        re.escape(word) for word in sorted(set(words), key=len, reverse=True)
    )
    return rf"(?<!{WORD_CHAR})(?:{alternatives})(?!{WORD_CHAR})"
