"""Heuristic word scores.

Every function here is pure: it reads the word, never mutates anything and
always returns a value in [0, 1]. The same word always gets the same score.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict

from ..utils.word_validator import vowel_ratio

UNCOMMON_LETTERS = re.compile(r'[zjqxkvw]', re.IGNORECASE)
UNNATURAL_RUNS = re.compile(
    r'([zxq]{2,}|[aeiou]{3,}|[bcdfghjklmnpqrstvwxyz]{4,})', re.IGNORECASE
)
HARD_CLUSTER = re.compile(r'[bcdfghjklmnpqrstvwxyz]{4,}', re.IGNORECASE)
REPEATED_LETTER_OR_DIGRAPH = re.compile(r'(.)\1|(..)\2')
STRONG_START = re.compile(r'^[b-df-hj-np-tv-z]', re.IGNORECASE)
STRONG_END = re.compile(r'[aeiou][b-df-hj-np-tv-z]$', re.IGNORECASE)
CHILDISH = re.compile(r'(oo|ee|aa|ii|uu){2,}|[xyz]{3,}', re.IGNORECASE)
PROFESSIONAL = re.compile(r'^[A-Z]?[a-z]+$')
ENDS_WITH_VOWEL = re.compile(r'[aeiou]$', re.IGNORECASE)
ENDS_WITH_CONSONANT = re.compile(r'[b-df-hj-np-tv-z]$', re.IGNORECASE)


def _clamp(value: float) -> float:
    return min(1.0, max(0.0, value))


def rarity(word: str) -> float:
    """Longer words and rare letters score higher; unnatural runs cost 0.2."""
    length = len(word)
    if length == 0:
        return 0.0

    score = 0.0
    if length >= 8:
        score += 0.3
    elif length >= 6:
        score += 0.2
    elif length >= 4:
        score += 0.1

    uncommon = len(UNCOMMON_LETTERS.findall(word))
    if uncommon:
        score += (uncommon / length) * 0.4

    if UNNATURAL_RUNS.search(word):
        score -= 0.2

    return _clamp(score)


def pronounceability(word: str) -> float:
    ratio = vowel_ratio(word)
    score = 0.5

    # Balanced vowel ratio
    if 0.3 <= ratio <= 0.5:
        score += 0.3
    elif 0.25 <= ratio <= 0.6:
        score += 0.15

    if not HARD_CLUSTER.search(word):
        score += 0.2

    return _clamp(score)


def memorability(word: str) -> float:
    score = 0.0

    # Ideal length to remember
    if 4 <= len(word) <= 8:
        score += 0.4
    elif 3 <= len(word) <= 10:
        score += 0.2

    if REPEATED_LETTER_OR_DIGRAPH.search(word):
        score += 0.3

    if STRONG_START.search(word):
        score += 0.15
    if STRONG_END.search(word):
        score += 0.15

    return _clamp(score)


def professionalism(word: str) -> float:
    score = 0.5

    if not CHILDISH.search(word):
        score += 0.3

    if PROFESSIONAL.match(word) and len(word) >= 4:
        score += 0.2

    return _clamp(score)


def linguistic_flexibility(word: str) -> float:
    """Rough guess at how many parts of speech the word could play."""
    score = 0.0

    if len(word) >= 3 and ENDS_WITH_VOWEL.search(word):
        score += 0.2  # verb-like
    if len(word) >= 3 and ENDS_WITH_CONSONANT.search(word):
        score += 0.2  # noun-like
    if len(word) >= 4:
        score += 0.1  # adjective-like

    return _clamp(score)


def market_potential(word: str) -> float:
    # The weights add up past 1.0 on top of the 0.5 base; the clamp is what bounds it.
    potential = (
        0.5
        + pronounceability(word) * 0.3
        + memorability(word) * 0.3
        + professionalism(word) * 0.2
        + linguistic_flexibility(word) * 0.2
    )
    return _clamp(potential)


@dataclass(frozen=True)
class HeuristicScores:
    """Full heuristic breakdown for one word."""
    word: str
    rarity: float
    pronounceability: float
    memorability: float
    professionalism: float
    linguistic_flexibility: float
    market_potential: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'word': self.word,
            'breakdown': {
                'rarity': round(self.rarity, 3),
                'pronounceability': round(self.pronounceability, 3),
                'memorability': round(self.memorability, 3),
                'professionalism': round(self.professionalism, 3),
                'linguistic_flexibility': round(self.linguistic_flexibility, 3),
            },
            'market_potential': round(self.market_potential, 3),
        }


def score_word(word: str) -> HeuristicScores:
    """Calculate every heuristic for a word."""
    return HeuristicScores(
        word=word,
        rarity=rarity(word),
        pronounceability=pronounceability(word),
        memorability=memorability(word),
        professionalism=professionalism(word),
        linguistic_flexibility=linguistic_flexibility(word),
        market_potential=market_potential(word),
    )
