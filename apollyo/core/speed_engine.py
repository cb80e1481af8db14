"""Speed mode: internal word generation under flexible filters."""

import logging
import math
import random
from typing import Callable, Dict, List, Optional, Set

from ..filters.filter_manager import passes_flexible_filters
from ..filters.learning import LearningSnapshot
from ..generators.dictionary_generator import DictionaryGenerator
from ..generators.pattern_generator import PatternGenerator
from ..models import Filters, Scores, WordMetadata, WordResult
from ..scoring import heuristics
from ..scoring.english_validator import EnglishValidator
from ..scoring.ranking import diversify, rank
from ..utils.word_validator import count_syllables, extract_patterns
from .session_store import SessionStore

logger = logging.getLogger(__name__)


class SpeedEngine:
    """Mixes dictionary samples, affixed variants and synthetic words.

    Word analyses are memoized for the life of the engine.
    """

    SOURCE_TAG = 'internal-generation'

    DICTIONARY_SHARE = 0.6
    PATTERN_SHARE = 0.1
    BASE_WORDS = 50
    BASE_WORD_LENGTH = (3, 8)

    ACCEPT_SCORE = 0.7
    # Synthetic words are noisier
    PATTERN_ACCEPT_SCORE = 0.8
    RELAXATION = 0.05

    MIN_CONFIDENCE = 0.75

    def __init__(
        self,
        session: SessionStore,
        validator: Optional[EnglishValidator] = None,
        dictionary: Optional[DictionaryGenerator] = None,
        rng: Optional[random.Random] = None,
    ):
        self.session = session
        self.validator = validator or EnglishValidator()
        self._rng = rng or random.Random()
        self.dictionary = dictionary or DictionaryGenerator(rng=self._rng)
        self._cache: Dict[str, WordResult] = {}

    def analyze(self, word: str) -> WordResult:
        """Validate and score a word; rejected words get an overall score of 0."""
        if word in self._cache:
            return self._cache[word]

        validation = self.validator.validate(word)
        if not validation.is_valid or validation.confidence < self.MIN_CONFIDENCE:
            scores = Scores(rarity=0.0, market_potential=0.0, confidence=validation.confidence, overall=0.0)
            patterns: List[str] = []
        else:
            scores = Scores(
                rarity=validation.rarity_score,
                market_potential=validation.market_potential,
                confidence=validation.confidence,
                overall=validation.confidence * 0.6 + validation.rarity_score * 0.4,
                memorability=heuristics.memorability(word),
                pronunciation=heuristics.pronounceability(word),
            )
            patterns = extract_patterns(word)

        result = WordResult(
            word=word,
            source='generated',
            scores=scores,
            metadata=WordMetadata(
                length=len(word),
                patterns=patterns,
                validation=validation,
                syllables=count_syllables(word),
                sources=[self.SOURCE_TAG],
            ),
        )
        self._cache[word] = result
        return result

    def generate(
        self,
        filters: Filters,
        count: int = 1000,
        learning: Optional[LearningSnapshot] = None,
        exclude: Optional[Set[str]] = None,
        deadline: Optional[Callable[[], None]] = None,
    ) -> List[WordResult]:
        """Generate up to ``count`` ranked words inside the filters.

        Words in ``exclude`` are skipped; it defaults to every word the session
        has already returned. ``deadline``, when given, is called between the
        candidate phases and raises once the caller's time is up.
        """
        strategy = self.session.pick_strategy()
        learning = learning or LearningSnapshot()
        min_length, max_length = filters.length.min, filters.length.max
        if exclude is None:
            exclude = self.session.returned_words()

        accept_score = self.ACCEPT_SCORE
        pattern_accept_score = self.PATTERN_ACCEPT_SCORE
        if strategy.name == 'filter_relaxation':
            accept_score -= self.RELAXATION
            pattern_accept_score -= self.RELAXATION

        results: List[WordResult] = []
        seen: Set[str] = set()

        def admit(word: str, threshold: float):
            if word in seen or word in exclude:
                return
            seen.add(word)
            if not passes_flexible_filters(word, filters) or not learning.allows(word):
                return
            result = self.analyze(word)
            if result.overall >= threshold:
                results.append(result)

        # Dictionary sample
        for word in self.dictionary.random_words(
            math.floor(count * self.DICTIONARY_SHARE), min_length, max_length, exclude=exclude,
        ):
            admit(word, accept_score)
        if deadline is not None:
            deadline()

        # Affixed variants of short base words
        base_min, base_max = self.BASE_WORD_LENGTH
        for base in self.dictionary.random_words(self.BASE_WORDS, base_min, base_max):
            for word in self.dictionary.valid_variations(base, min_length, max_length):
                admit(word, accept_score)
        if deadline is not None:
            deadline()

        # Synthetic words
        bias = self._rng.random() if strategy.name == 'pattern_variation' else 0.0
        generator = PatternGenerator(min_length=min_length, max_length=max_length, rng=self._rng)
        for word in generator.generate(math.floor(count * self.PATTERN_SHARE), bias_factor=bias):
            admit(word, pattern_accept_score)
        if deadline is not None:
            deadline()

        # Cap buckets on the final candidate set
        top = rank(results, learning)[:count]
        ranked = diversify(top, strategy.name == 'pattern_variation', learning)

        self.session.record_search('speed', filters.to_dict(), [r.word for r in ranked], [self.SOURCE_TAG])
        self.session.update_strategy_success(strategy.name, len(ranked) >= count * 0.5)

        logger.info("Speed mode generated %d words from %d candidates", len(ranked), len(seen))
        return ranked
