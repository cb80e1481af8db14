"""Mode-specific filter building, validation and application."""

import dataclasses
from typing import Any, Dict, List, Optional

from ..errors import ValidationError
from ..models import (
    DIFFICULTIES,
    MODES,
    AdvancedFilters,
    Filters,
    FlexibleFilters,
    LinguisticFilter,
    ScoreRange,
    SearchConfig,
    WordResult,
    require_advanced,
)
from ..scoring import heuristics
from ..utils.word_validator import count_syllables, is_likely_english, max_consonant_run, vowel_ratio

MIN_LENGTH = 1
MAX_LENGTH = 20
MIN_RESULTS = 10
MAX_RESULTS = 10000
MIN_DEPTH = 1
MAX_DEPTH = 5

DEFAULT_LENGTH = {'min': 3, 'max': 12}
DEFAULT_RARITY = {'min': 0.3, 'max': 1.0}
DEFAULT_MARKET_POTENTIAL = {'min': 0.5}
DEFAULT_LINGUISTIC = {'allowCompounds': True, 'requireVowels': True, 'maxConsonantCluster': 4}


def filters_for_mode(mode: str, raw: Optional[Dict[str, Any]] = None) -> Filters:
    """Build the filter variant for a mode.

    Speed mode keeps only the flexible fields; hyper mode gets the advanced
    defaults for anything the caller left out.
    """
    raw = dict(raw or {})
    if mode == 'speed':
        return FlexibleFilters.from_dict({
            'length': raw.get('length') or DEFAULT_LENGTH,
            'pattern': raw.get('pattern') or {},
        })
    if mode == 'hyper':
        raw.setdefault('length', DEFAULT_LENGTH)
        if not raw.get('rarity'):
            raw['rarity'] = DEFAULT_RARITY
        if not raw.get('marketPotential') and not raw.get('market_potential'):
            raw['marketPotential'] = DEFAULT_MARKET_POTENTIAL
        if not raw.get('linguistic'):
            raw['linguistic'] = DEFAULT_LINGUISTIC
        return AdvancedFilters.from_dict(raw)
    raise ValidationError(f"Invalid mode {mode!r}. Must be 'speed' or 'hyper'")


def _check_unit(errors: List[str], value: Optional[float], name: str):
    if value is not None and not 0.0 <= value <= 1.0:
        errors.append(f"{name} must be between 0 and 1")


def validate_filters(filters: Filters):
    """Raise ValidationError listing every problem with ``filters``."""
    errors: List[str] = []

    length = filters.length
    if length.min < MIN_LENGTH:
        errors.append(f"Minimum length must be at least {MIN_LENGTH}")
    if length.max > MAX_LENGTH:
        errors.append(f"Maximum length cannot exceed {MAX_LENGTH}")
    if length.min > length.max:
        errors.append(f"Invalid length range: min greater than max ({length.min} > {length.max})")

    if filters.phonetic and filters.phonetic.vowel_ratio:
        ratio = filters.phonetic.vowel_ratio
        _check_unit(errors, ratio.min, "Vowel ratio min")
        _check_unit(errors, ratio.max, "Vowel ratio max")

    if isinstance(filters, AdvancedFilters):
        if filters.rarity:
            _check_unit(errors, filters.rarity.min, "Rarity min")
            _check_unit(errors, filters.rarity.max, "Rarity max")
            if filters.rarity.min > filters.rarity.max:
                errors.append("Invalid rarity range: min greater than max")
        _check_unit(errors, filters.market_potential, "Market potential min")
        _check_unit(errors, filters.memorability, "Memorability min")
        if filters.brandability:
            _check_unit(errors, filters.brandability.min_score, "Brandability min score")
        if filters.quality:
            _check_unit(errors, filters.quality.min_confidence, "Quality min confidence")
        if filters.pronunciation:
            pron = filters.pronunciation
            if pron.difficulty not in DIFFICULTIES:
                errors.append(f"Pronunciation difficulty must be one of {', '.join(DIFFICULTIES)}")
            if (
                pron.syllable_min is not None and pron.syllable_max is not None
                and pron.syllable_min > pron.syllable_max
            ):
                errors.append("Invalid syllable range: min greater than max")
        if filters.linguistic and filters.linguistic.max_consonant_cluster < 1:
            errors.append("Max consonant cluster must be at least 1")

    if errors:
        raise ValidationError("Invalid filters: " + "; ".join(errors), errors)


def optimize_filters(filters: Filters) -> Filters:
    """Apply the documented clamps and return a new filter object."""
    length = filters.length
    if length.max - length.min > 12:
        filters = dataclasses.replace(filters, length=dataclasses.replace(length, max=length.min + 10))

    if isinstance(filters, AdvancedFilters):
        # Ease off very strict thresholds
        if filters.rarity and filters.rarity.min > 0.9:
            filters = dataclasses.replace(filters, rarity=dataclasses.replace(filters.rarity, min=0.8))
        if filters.market_potential is not None and filters.market_potential > 0.9:
            filters = dataclasses.replace(filters, market_potential=0.7)

    return filters


def relax_filters(filters: AdvancedFilters, amount: float = 0.05) -> AdvancedFilters:
    """Lower the rarity and market-potential floors a little."""
    rarity = filters.rarity
    if rarity:
        rarity = ScoreRange(min=max(0.0, rarity.min - amount), max=rarity.max)
    market = filters.market_potential
    if market is not None:
        market = max(0.0, market - amount)
    return dataclasses.replace(filters, rarity=rarity, market_potential=market)


def build_search_config(data: Dict[str, Any], default_max_results: int = 1000) -> SearchConfig:
    """Validate an inbound request and build its SearchConfig."""
    if not isinstance(data, dict):
        raise ValidationError("Search request must be an object")

    mode = data.get('mode')
    if mode not in MODES:
        raise ValidationError("Invalid mode. Must be 'speed' or 'hyper'")

    max_results = data.get('maxResults', data.get('max_results'))
    if max_results is None:
        max_results = default_max_results
    if isinstance(max_results, bool) or not isinstance(max_results, int) \
            or not MIN_RESULTS <= max_results <= MAX_RESULTS:
        raise ValidationError(f"Max results must be between {MIN_RESULTS} and {MAX_RESULTS}")

    depth = data.get('depth')
    if depth is not None and (
        isinstance(depth, bool) or not isinstance(depth, int) or not MIN_DEPTH <= depth <= MAX_DEPTH
    ):
        raise ValidationError(f"Depth must be between {MIN_DEPTH} and {MAX_DEPTH}")

    raw_filters = data.get('filters') or {}
    if not isinstance(raw_filters, dict):
        raise ValidationError("filters must be an object")

    filters = filters_for_mode(mode, raw_filters)
    validate_filters(filters)

    return SearchConfig(mode=mode, filters=filters, max_results=max_results, depth=depth)


# ------------------------------- Word predicates -------------------------------

def pronunciation_difficulty(word: str) -> str:
    """'hard' with any 3+ consonant cluster, 'easy' with a 0.35-0.5 vowel ratio, else 'medium'."""
    if max_consonant_run(word) >= 3:
        return 'hard'
    if 0.35 <= vowel_ratio(word) <= 0.5:
        return 'easy'
    return 'medium'


def _has_double_consonant(word: str) -> bool:
    return any(a == b and a not in 'aeiou' for a, b in zip(word, word[1:]))


def passes_flexible_filters(word: str, filters: Filters) -> bool:
    """Length bounds, literal patterns and phonetic shape."""
    if not filters.length.contains(len(word)):
        return False
    if not filters.pattern.matches(word):
        return False

    phonetic = filters.phonetic
    if phonetic:
        if phonetic.vowel_ratio and not phonetic.vowel_ratio.contains(vowel_ratio(word)):
            return False
        if not phonetic.allow_double_consonants and _has_double_consonant(word):
            return False

    return True


def passes_linguistic_filters(word: str, linguistic: Optional[LinguisticFilter]) -> bool:
    if not linguistic:
        return True
    if linguistic.require_vowels and not any(c in 'aeiou' for c in word):
        return False
    if max_consonant_run(word) > linguistic.max_consonant_cluster:
        return False
    return True


def passes_basic_filters(word: str, filters: Filters) -> bool:
    """Cheap checks run on every crawled line before full validation."""
    if not is_likely_english(word):
        return False
    if not passes_flexible_filters(word, filters):
        return False
    if isinstance(filters, AdvancedFilters):
        return passes_linguistic_filters(word, filters.linguistic)
    return True


def passes_advanced_filters(result: WordResult, filters: Filters) -> bool:
    """Score-based checks not already enforced by ``passes_basic_filters``."""
    filters = require_advanced(filters)
    scores = result.scores

    if filters.rarity and not filters.rarity.contains(scores.rarity):
        return False

    if filters.market_potential is not None and scores.market_potential < filters.market_potential:
        return False

    if filters.brandability and scores.market_potential < filters.brandability.min_score:
        return False

    pronunciation = filters.pronunciation
    if pronunciation:
        if pronunciation.difficulty != 'any' and \
                pronunciation_difficulty(result.word) != pronunciation.difficulty:
            return False
        syllables = count_syllables(result.word)
        if pronunciation.syllable_min is not None and syllables < pronunciation.syllable_min:
            return False
        if pronunciation.syllable_max is not None and syllables > pronunciation.syllable_max:
            return False

    if filters.memorability is not None and heuristics.memorability(result.word) < filters.memorability:
        return False

    quality = filters.quality
    if quality:
        if scores.confidence < quality.min_confidence:
            return False
        if quality.require_natural_flow and "Unnatural sound flow" in result.metadata.validation.issues:
            return False

    return True
