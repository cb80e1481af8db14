"""Word shape checks shared by the generators, the crawler and the validator."""

import re
from typing import List

# Difficult consonant clusters to avoid
DIFFICULT_CLUSTERS = {
    'xq', 'zx', 'qx', 'vx', 'bx', 'dx', 'fx', 'gx', 'hx', 'jx', 'kx', 'lx',
    'mx', 'nx', 'px', 'rx', 'sx', 'tx', 'wx', 'zq', 'qz', 'vq', 'qv',
    'bq', 'dq', 'fq', 'gq', 'hq', 'jq', 'kq', 'lq', 'mq', 'nq', 'pq',
    'rq', 'sq', 'tq', 'wq', 'xhr', 'xhl', 'xhn', 'zhr', 'zhl', 'zhn',
    'pfr', 'pfl', 'scht', 'tsch', 'dsch', 'czk', 'szc', 'szcz'
}

VOWELS = set('aeiou')
CONSONANTS = set('bcdfghjklmnpqrstvwxyz')
# 'y' counts as a vowel when judging rhythm ("sky", "rhythm")
RHYTHM_VOWELS = set('aeiouy')

_LETTERS_ONLY = re.compile(r'^[a-z]+$')
_TRIPLE_LETTER = re.compile(r'(.)\1\1')
_CONSONANT_LETTERS = re.compile(r'[bcdfghjklmnpqrstvwxyz]', re.IGNORECASE)
_VOWEL_LETTERS = re.compile(r'[aeiou]', re.IGNORECASE)
_CONSONANT_RUNS = re.compile(r'[bcdfghjklmnpqrstvwxyz]+', re.IGNORECASE)
_SILENT_ENDING = re.compile(r'(?:[^laeiouy]es|ed|[^laeiouy]e)$')
_SYLLABLE_NUCLEUS = re.compile(r'[aeiouy]{1,2}')


def _max_run(word: str, letters: set) -> int:
    longest = 0
    current = 0
    for c in word:
        if c in letters:
            current += 1
            longest = max(longest, current)
        else:
            current = 0
    return longest


def max_consonant_run(word: str) -> int:
    """Length of the longest run of consonant letters (y included)."""
    runs = _CONSONANT_RUNS.findall(word)
    return max((len(run) for run in runs), default=0)


def vowel_ratio(word: str) -> float:
    if not word:
        return 0.0
    return len(_VOWEL_LETTERS.findall(word)) / len(word)


def cv_pattern(word: str) -> str:
    """Map consonants to 'C' and vowels to 'V'; other characters pass through."""
    return _VOWEL_LETTERS.sub('V', _CONSONANT_LETTERS.sub('C', word))


def count_syllables(word: str) -> int:
    word = word.lower()
    if len(word) <= 3:
        return 1

    word = _SILENT_ENDING.sub('', word)
    if word.startswith('y'):
        word = word[1:]

    return max(1, len(_SYLLABLE_NUCLEUS.findall(word)))


def extract_patterns(word: str, with_syllables: bool = True) -> List[str]:
    """Structural tags for a word; the CV shape always comes first."""
    patterns = [cv_pattern(word)]

    if len(word) >= 2:
        patterns.append(f"start:{word[:2]}")
        patterns.append(f"end:{word[-2:]}")

    if with_syllables:
        patterns.append(f"syllables:{count_syllables(word)}")

    return patterns


def is_likely_english(word: str) -> bool:
    """Cheap "looks English" check: letter rhythm plus forbidden runs.

    Used as the pre-filter before full validation, so it must stay fast.
    """
    word = word.lower()
    if len(word) < 2 or not _LETTERS_ONLY.match(word):
        return False

    # Must have at least one vowel sound
    if not any(c in RHYTHM_VOWELS for c in word):
        return False

    if _TRIPLE_LETTER.search(word):
        return False

    # q without u almost never happens
    for i, c in enumerate(word):
        if c == 'q' and word[i + 1:i + 2] != 'u':
            return False

    for cluster in DIFFICULT_CLUSTERS:
        if cluster in word:
            return False

    # Too many consecutive consonants (max 3) or vowels (max 2)
    consonants = CONSONANTS - {'y'}
    if _max_run(word, consonants) > 3:
        return False
    if _max_run(word, VOWELS) > 2:
        return False

    ratio = sum(1 for c in word if c in RHYTHM_VOWELS) / len(word)
    if ratio < 0.2 or ratio > 0.7:
        return False

    # Vowel/consonant alternation
    if len(word) >= 4:
        switches = sum(
            1 for a, b in zip(word, word[1:])
            if (a in RHYTHM_VOWELS) != (b in RHYTHM_VOWELS)
        )
        if switches / (len(word) - 1) < 0.3:
            return False

    return True


class WordValidator:
    """Length-bounded "looks English" check used by the generators."""

    def __init__(self, min_length: int = 3, max_length: int = 12):
        self.min_length = min_length
        self.max_length = max_length

    def is_valid(self, word: str) -> bool:
        """Check if word passes the length bounds and the shape heuristic."""
        word = word.lower().strip()

        if not self._check_length(word):
            return False
        return is_likely_english(word)

    def _check_length(self, word: str) -> bool:
        return self.min_length <= len(word) <= self.max_length
