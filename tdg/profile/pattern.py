"""
Pattern Extraction

Converts a sample string into its structural pattern:
- One character class symbol per character position
- Vowels and consonants are kept apart for letters
- Every character maps to exactly one class, so extraction never fails
"""

import unicodedata
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Tuple

VOWELS = frozenset("aeiouAEIOU")


class CharacterClass(Enum):
    """Character classes and the symbol used for each in a pattern"""
    VOWEL_UPPER = "V"
    CONSONANT_UPPER = "C"
    VOWEL_LOWER = "v"
    CONSONANT_LOWER = "c"
    NUMERIC = "#"
    PUNCTUATION = "p"
    WHITESPACE = "S"
    OTHER = "~"

    @property
    def symbol(self) -> str:
        return self.value


@dataclass(frozen=True)
class ExtractedSample:
    """Pattern of a sample plus its characters in position order"""
    pattern: str
    characters: Tuple[str, ...]

    def __len__(self) -> int:
        return len(self.pattern)


def _is_vowel(ch: str) -> bool:
    # strip accents so that 'É' counts like 'E'
    base = unicodedata.normalize("NFD", ch)[0]
    return base in VOWELS


@lru_cache(maxsize=4096)
def classify(ch: str) -> CharacterClass:
    """
    Classify a single character

    Args:
        ch: A string of length one

    Returns:
        The character class of ``ch``
    """
    if ch.isspace():
        return CharacterClass.WHITESPACE

    if ch.isdigit():
        return CharacterClass.NUMERIC

    if ch.isalpha():
        if ch.isupper():
            return CharacterClass.VOWEL_UPPER if _is_vowel(ch) else CharacterClass.CONSONANT_UPPER
        if ch.islower():
            return CharacterClass.VOWEL_LOWER if _is_vowel(ch) else CharacterClass.CONSONANT_LOWER
        return CharacterClass.OTHER

    if unicodedata.category(ch).startswith("P"):
        return CharacterClass.PUNCTUATION

    return CharacterClass.OTHER


def pattern_of(sample: str) -> str:
    """Return the pattern symbols of ``sample`` as a string"""
    return "".join(classify(ch).symbol for ch in sample)


def extract(sample: str) -> ExtractedSample:
    """
    Decompose a sample into its pattern and positional characters

    Args:
        sample: Any string, including the empty string

    Returns:
        ExtractedSample whose pattern has the same length as ``sample``
    """
    return ExtractedSample(pattern=pattern_of(sample), characters=tuple(sample))
