"""Heuristic English-likeness validator."""

import re
from typing import Iterable, List, Optional, Tuple

from ..generators.dictionary_generator import load_known_words
from ..models import ValidationResult
from ..utils.word_validator import is_likely_english
from . import heuristics

BASIC_ENGLISH = re.compile(r'^[a-z]+$', re.IGNORECASE)

# (pattern, confidence penalty, issue, suggestion)
STRUCTURAL_CHECKS: Tuple[Tuple[re.Pattern, float, str, str], ...] = (
    (
        re.compile(r'^(?=.*[aeiou])(?=.*[bcdfghjklmnpqrstvwxyz])[a-z]+$', re.IGNORECASE),
        0.2,
        "Unnatural phonetic pattern for English",
        "Mix vowels and consonants",
    ),
    (
        re.compile(r'^([bcdfghjklmnpqrstvwxyz]*[aeiou]){2,}[bcdfghjklmnpqrstvwxyz]*$', re.IGNORECASE),
        0.15,
        "Unnatural sound flow",
        "Use at least two vowel sounds",
    ),
    (
        re.compile(r'^(?!.*[zxq]{3,})(?!.*[jkvwxz]{4,})[a-z]+$', re.IGNORECASE),
        0.25,
        "Appears unnaturally invented",
        "Break up runs of rare letters",
    ),
)


def _clamp(value: float) -> float:
    return min(1.0, max(0.0, value))


class EnglishValidator:
    """Decides whether a word is a usable English-like candidate.

    The result depends only on the word and the known-word set, so calling
    ``validate`` twice gives the same answer.
    """

    VALID_CONFIDENCE = 0.75
    RARITY_THRESHOLD = 0.3
    KNOWN_WORD_CONFIDENCE = 0.95

    def __init__(self, known_words: Optional[Iterable[str]] = None):
        if known_words is None:
            self._known = load_known_words()
        else:
            self._known = frozenset(w.lower() for w in known_words)

    def is_known(self, word: str) -> bool:
        return word.lower() in self._known

    def validate(self, word: str) -> ValidationResult:
        """Validate a word. Never raises; always returns a full result."""
        if not isinstance(word, str):
            word = ''

        issues: List[str] = []
        suggestions: List[str] = []
        confidence = 1.0
        looks_english = True

        if not BASIC_ENGLISH.match(word):
            issues.append("Contains non-English characters")
            suggestions.append("Use letters a-z only")
            confidence -= 0.3

        # Known words skip the confidence penalties below but still collect issues
        known = self.is_known(word)
        if known:
            confidence = self.KNOWN_WORD_CONFIDENCE
        elif not is_likely_english(word):
            issues.append("Does not appear to be a valid English word")
            confidence -= 0.5
            looks_english = False

        for pattern, penalty, issue, suggestion in STRUCTURAL_CHECKS:
            if not pattern.match(word):
                issues.append(issue)
                suggestions.append(suggestion)
                if not known:
                    confidence -= penalty

        rarity_score = heuristics.rarity(word)
        market_potential = heuristics.market_potential(word)
        confidence = _clamp(confidence)

        if rarity_score < self.RARITY_THRESHOLD:
            issues.append("Too common - not rare enough")
            suggestions.append("Try a longer form or rarer letters")

        is_valid = (
            looks_english
            and confidence >= self.VALID_CONFIDENCE
            and rarity_score >= self.RARITY_THRESHOLD
        )

        return ValidationResult(
            is_valid=is_valid,
            confidence=confidence,
            issues=tuple(issues),
            suggestions=tuple(suggestions),
            rarity_score=rarity_score,
            market_potential=market_potential,
        )
