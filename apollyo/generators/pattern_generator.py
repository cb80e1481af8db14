"""Template-driven synthetic word generator."""

import random
from typing import Dict, List, Optional

from ..utils.word_validator import WordValidator


class PatternGenerator:
    """Builds made-up words from weighted consonant/vowel templates."""

    # Syllable templates and their relative weight
    TEMPLATES: Dict[str, float] = {
        'CV': 0.8,
        'CVC': 0.9,
        'VC': 0.7,
        'CVCV': 0.85,
        'VCVC': 0.75,
        'CVCC': 0.8,
        'CCVC': 0.7,
        'CVVC': 0.6,
        'CCVCC': 0.75,
        'CVCVC': 0.8,
    }

    # Ordered by frequency in English
    CONSONANTS = 'tnrsldcmpbfghvwykjxqz'
    VOWELS = 'eaiouy'

    def __init__(self, min_length: int = 3, max_length: int = 12, rng: Optional[random.Random] = None):
        self.validator = WordValidator(min_length=min_length, max_length=max_length)
        self.min_length = min_length
        self.max_length = max_length
        self._rng = rng or random.Random()

    def _draw(self, alphabet: str) -> str:
        # random()^1.5 leans hard towards the front of the alphabet
        index = int(self._rng.random() ** 1.5 * len(alphabet))
        return alphabet[index]

    def build_word(self, template: str, min_length: Optional[int] = None, max_length: Optional[int] = None) -> str:
        """Fill a template, pad up to ``min_length`` and cut at ``max_length``.

        Cutting can leave a dangling consonant from the next syllable; the
        validator is expected to reject the bad ones.
        """
        min_length = self.min_length if min_length is None else min_length
        max_length = self.max_length if max_length is None else max_length

        letters = []
        for symbol in template:
            if symbol == 'C':
                letters.append(self._draw(self.CONSONANTS))
            elif symbol == 'V':
                letters.append(self._draw(self.VOWELS))

        while len(letters) < min_length:
            if self._rng.random() > 0.5:
                letters.append(self._draw(self.CONSONANTS))
            else:
                letters.append(self._draw(self.VOWELS))

        return ''.join(letters[:max_length])

    def select_weighted_template(self, bias_factor: float = 0.0) -> str:
        """Weighted draw over the template table.

        A positive ``bias_factor`` pushes the draw towards the later, less
        common templates.
        """
        total = sum(self.TEMPLATES.values())
        remaining = (self._rng.random() + bias_factor * 0.3) * total

        for template, weight in self.TEMPLATES.items():
            remaining -= weight
            if remaining <= 0:
                return template

        return 'CVC'

    def generate(self, count: int, bias_factor: float = 0.0) -> List[str]:
        """Generate up to ``count`` English-looking words within the length bounds."""
        words: List[str] = []
        max_attempts = count * 3

        for _ in range(max_attempts):
            if len(words) >= count:
                break
            template = self.select_weighted_template(bias_factor)
            word = self.build_word(template)
            if self.validator.is_valid(word):
                words.append(word)

        return words
