"""Data types shared by the generators, crawler and orchestrator."""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Union

from .errors import ValidationError

MODES = ('speed', 'hyper')
DIFFICULTIES = ('easy', 'medium', 'hard', 'any')


# ------------------------------- Scoring results -------------------------------

@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one word."""
    is_valid: bool
    confidence: float
    issues: Tuple[str, ...] = ()
    suggestions: Tuple[str, ...] = ()
    rarity_score: float = 0.0
    market_potential: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'isValid': self.is_valid,
            'confidence': round(self.confidence, 4),
            'issues': list(self.issues),
            'suggestions': list(self.suggestions),
            'rarityScore': round(self.rarity_score, 4),
            'marketPotential': round(self.market_potential, 4),
        }


@dataclass(frozen=True)
class Scores:
    rarity: float
    market_potential: float
    confidence: float
    overall: float
    memorability: Optional[float] = None
    pronunciation: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'rarity': round(self.rarity, 4),
            'marketPotential': round(self.market_potential, 4),
            'confidence': round(self.confidence, 4),
            'overall': round(self.overall, 4),
        }
        if self.memorability is not None:
            result['memorability'] = round(self.memorability, 4)
        if self.pronunciation is not None:
            result['pronunciation'] = round(self.pronunciation, 4)
        return result


@dataclass
class WordMetadata:
    length: int
    patterns: List[str]
    validation: ValidationResult
    sources: Optional[List[str]] = None
    count: Optional[int] = None
    syllables: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            'length': self.length,
            'patterns': list(self.patterns),
            'validation': self.validation.to_dict(),
        }
        if self.sources is not None:
            result['sources'] = list(self.sources)
        if self.count is not None:
            result['count'] = self.count
        if self.syllables is not None:
            result['syllables'] = self.syllables
        return result


@dataclass
class WordResult:
    """A scored candidate word.

    Scores are fixed once the word is scored; only ``metadata.sources`` and
    ``metadata.count`` grow when the same word arrives from another origin.
    """
    word: str
    source: str  # 'generated' or 'crawled'
    scores: Scores
    metadata: WordMetadata

    @property
    def overall(self) -> float:
        return self.scores.overall

    @property
    def dominant_pattern(self) -> str:
        return self.metadata.patterns[0] if self.metadata.patterns else 'unknown'

    def to_dict(self) -> Dict[str, Any]:
        return {
            'word': self.word,
            'source': self.source,
            'scores': self.scores.to_dict(),
            'metadata': self.metadata.to_dict(),
        }


# ------------------------------- Filters -------------------------------

def _get(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Read the first present key; accepts camelCase and snake_case spellings."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _number(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{name} must be a number, got {value!r}")
    return float(value)


def _integer(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or int(value) != value:
        raise ValidationError(f"{name} must be an integer, got {value!r}")
    return int(value)


def _section(data: Dict[str, Any], *keys: str) -> Optional[Dict[str, Any]]:
    value = _get(data, *keys)
    if value is None:
        return None
    if not isinstance(value, dict):
        raise ValidationError(f"{keys[0]} must be an object")
    return value


@dataclass(frozen=True)
class LengthRange:
    min: int = 3
    max: int = 12

    def contains(self, length: int) -> bool:
        return self.min <= length <= self.max

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LengthRange':
        return cls(
            min=_integer(_get(data, 'min', default=cls.min), 'length.min'),
            max=_integer(_get(data, 'max', default=cls.max), 'length.max'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {'min': self.min, 'max': self.max}


@dataclass(frozen=True)
class ScoreRange:
    """Inclusive range of a [0, 1] score."""
    min: float = 0.0
    max: float = 1.0

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max

    @classmethod
    def from_dict(cls, data: Dict[str, Any], name: str) -> 'ScoreRange':
        return cls(
            min=_number(_get(data, 'min', default=0.0), f'{name}.min'),
            max=_number(_get(data, 'max', default=1.0), f'{name}.max'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {'min': self.min, 'max': self.max}


@dataclass(frozen=True)
class PatternConstraints:
    """Literal substring constraints."""
    starts_with: Optional[str] = None
    ends_with: Optional[str] = None
    contains: Optional[str] = None
    excludes: Optional[str] = None

    def matches(self, word: str) -> bool:
        if self.starts_with and not word.startswith(self.starts_with):
            return False
        if self.ends_with and not word.endswith(self.ends_with):
            return False
        if self.contains and self.contains not in word:
            return False
        if self.excludes and self.excludes in word:
            return False
        return True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PatternConstraints':
        values = {}
        for attr, keys in (
            ('starts_with', ('startsWith', 'starts_with')),
            ('ends_with', ('endsWith', 'ends_with')),
            ('contains', ('contains',)),
            ('excludes', ('excludes',)),
        ):
            value = _get(data, *keys)
            if value is not None and not isinstance(value, str):
                raise ValidationError(f"pattern.{keys[0]} must be a string")
            values[attr] = value.lower() if value else None
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        result = {}
        if self.starts_with:
            result['startsWith'] = self.starts_with
        if self.ends_with:
            result['endsWith'] = self.ends_with
        if self.contains:
            result['contains'] = self.contains
        if self.excludes:
            result['excludes'] = self.excludes
        return result


@dataclass(frozen=True)
class PhoneticFilter:
    vowel_ratio: Optional[ScoreRange] = None
    allow_double_consonants: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PhoneticFilter':
        ratio = _section(data, 'vowelRatio', 'vowel_ratio')
        return cls(
            vowel_ratio=ScoreRange.from_dict(ratio, 'phonetic.vowelRatio') if ratio else None,
            allow_double_consonants=bool(
                _get(data, 'allowDoubleConsonants', 'allow_double_consonants', default=True)
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {'allowDoubleConsonants': self.allow_double_consonants}
        if self.vowel_ratio:
            result['vowelRatio'] = self.vowel_ratio.to_dict()
        return result


@dataclass(frozen=True)
class PronunciationFilter:
    difficulty: str = 'any'
    syllable_min: Optional[int] = None
    syllable_max: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PronunciationFilter':
        syllables = _section(data, 'syllableCount', 'syllable_count') or {}
        syllable_min = _get(syllables, 'min')
        syllable_max = _get(syllables, 'max')
        return cls(
            difficulty=str(_get(data, 'difficulty', default='any')),
            syllable_min=_integer(syllable_min, 'pronunciation.syllableCount.min')
            if syllable_min is not None else None,
            syllable_max=_integer(syllable_max, 'pronunciation.syllableCount.max')
            if syllable_max is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {'difficulty': self.difficulty}
        if self.syllable_min is not None or self.syllable_max is not None:
            result['syllableCount'] = {'min': self.syllable_min, 'max': self.syllable_max}
        return result


@dataclass(frozen=True)
class LinguisticFilter:
    allow_compounds: bool = True
    require_vowels: bool = True
    max_consonant_cluster: int = 4
    preferred_prefixes: Tuple[str, ...] = ()
    preferred_suffixes: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LinguisticFilter':
        return cls(
            allow_compounds=bool(_get(data, 'allowCompounds', 'allow_compounds', default=True)),
            require_vowels=bool(_get(data, 'requireVowels', 'require_vowels', default=True)),
            max_consonant_cluster=_integer(
                _get(data, 'maxConsonantCluster', 'max_consonant_cluster', default=4),
                'linguistic.maxConsonantCluster',
            ),
            preferred_prefixes=tuple(_get(data, 'preferredPrefixes', 'preferred_prefixes', default=())),
            preferred_suffixes=tuple(_get(data, 'preferredSuffixes', 'preferred_suffixes', default=())),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'allowCompounds': self.allow_compounds,
            'requireVowels': self.require_vowels,
            'maxConsonantCluster': self.max_consonant_cluster,
            'preferredPrefixes': list(self.preferred_prefixes),
            'preferredSuffixes': list(self.preferred_suffixes),
        }


@dataclass(frozen=True)
class BrandabilityFilter:
    min_score: float = 0.0
    require_unique: bool = False
    check_trademark: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BrandabilityFilter':
        return cls(
            min_score=_number(_get(data, 'minScore', 'min_score', default=0.0), 'brandability.minScore'),
            require_unique=bool(_get(data, 'requireUnique', 'require_unique', default=False)),
            check_trademark=bool(_get(data, 'checkTrademark', 'check_trademark', default=False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'minScore': self.min_score,
            'requireUnique': self.require_unique,
            'checkTrademark': self.check_trademark,
        }


@dataclass(frozen=True)
class QualityFilter:
    min_confidence: float = 0.0
    require_natural_flow: bool = False
    exclude_gibberish: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'QualityFilter':
        return cls(
            min_confidence=_number(
                _get(data, 'minConfidence', 'min_confidence', default=0.0), 'quality.minConfidence'
            ),
            require_natural_flow=bool(_get(data, 'requireNaturalFlow', 'require_natural_flow', default=False)),
            exclude_gibberish=bool(_get(data, 'excludeGibberish', 'exclude_gibberish', default=False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'minConfidence': self.min_confidence,
            'requireNaturalFlow': self.require_natural_flow,
            'excludeGibberish': self.exclude_gibberish,
        }


@dataclass(frozen=True)
class FlexibleFilters:
    """Speed-mode filters: length and literal patterns only."""
    kind: ClassVar[str] = 'flexible'

    length: LengthRange = field(default_factory=LengthRange)
    pattern: PatternConstraints = field(default_factory=PatternConstraints)
    phonetic: Optional[PhoneticFilter] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FlexibleFilters':
        length = _section(data, 'length')
        pattern = _section(data, 'pattern')
        phonetic = _section(data, 'phonetic')
        return cls(
            length=LengthRange.from_dict(length) if length else LengthRange(),
            pattern=PatternConstraints.from_dict(pattern) if pattern else PatternConstraints(),
            phonetic=PhoneticFilter.from_dict(phonetic) if phonetic else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {'length': self.length.to_dict(), 'pattern': self.pattern.to_dict()}
        if self.phonetic:
            result['phonetic'] = self.phonetic.to_dict()
        return result


@dataclass(frozen=True)
class AdvancedFilters:
    """Hyper-mode filters: the flexible fields plus score and linguistic constraints.

    ``brandability.min_score`` is checked against market potential. The other
    brandability flags, ``quality.exclude_gibberish``, ``linguistic.allow_compounds``,
    the preferred prefixes and suffixes and ``domain_category`` are carried for
    the request shape only; no stage filters on them.
    """
    kind: ClassVar[str] = 'advanced'

    length: LengthRange = field(default_factory=LengthRange)
    pattern: PatternConstraints = field(default_factory=PatternConstraints)
    phonetic: Optional[PhoneticFilter] = None
    rarity: Optional[ScoreRange] = None
    market_potential: Optional[float] = None
    pronunciation: Optional[PronunciationFilter] = None
    memorability: Optional[float] = None
    linguistic: Optional[LinguisticFilter] = None
    brandability: Optional[BrandabilityFilter] = None
    quality: Optional[QualityFilter] = None
    domain_category: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AdvancedFilters':
        base = FlexibleFilters.from_dict(data)
        rarity = _section(data, 'rarity')
        market = _section(data, 'marketPotential', 'market_potential')
        pronunciation = _section(data, 'pronunciation')
        memorability = _section(data, 'memorability')
        linguistic = _section(data, 'linguistic')
        brandability = _section(data, 'brandability')
        quality = _section(data, 'quality')
        categories = _get(data, 'domainCategory', 'domain_category', default=())
        if isinstance(categories, str):
            categories = (categories,)
        return cls(
            length=base.length,
            pattern=base.pattern,
            phonetic=base.phonetic,
            rarity=ScoreRange.from_dict(rarity, 'rarity') if rarity else None,
            market_potential=_number(_get(market, 'min', default=0.0), 'marketPotential.min')
            if market else None,
            pronunciation=PronunciationFilter.from_dict(pronunciation) if pronunciation else None,
            memorability=_number(_get(memorability, 'min', default=0.0), 'memorability.min')
            if memorability else None,
            linguistic=LinguisticFilter.from_dict(linguistic) if linguistic else None,
            brandability=BrandabilityFilter.from_dict(brandability) if brandability else None,
            quality=QualityFilter.from_dict(quality) if quality else None,
            domain_category=tuple(categories),
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {'length': self.length.to_dict(), 'pattern': self.pattern.to_dict()}
        if self.phonetic:
            result['phonetic'] = self.phonetic.to_dict()
        if self.rarity:
            result['rarity'] = self.rarity.to_dict()
        if self.market_potential is not None:
            result['marketPotential'] = {'min': self.market_potential}
        if self.pronunciation:
            result['pronunciation'] = self.pronunciation.to_dict()
        if self.memorability is not None:
            result['memorability'] = {'min': self.memorability}
        if self.linguistic:
            result['linguistic'] = self.linguistic.to_dict()
        if self.brandability:
            result['brandability'] = self.brandability.to_dict()
        if self.quality:
            result['quality'] = self.quality.to_dict()
        if self.domain_category:
            result['domainCategory'] = list(self.domain_category)
        return result


Filters = Union[FlexibleFilters, AdvancedFilters]


def require_advanced(filters: Filters) -> AdvancedFilters:
    """Return ``filters`` if it is the advanced variant, else fail loudly."""
    if not isinstance(filters, AdvancedFilters):
        raise ValidationError(
            f"Advanced filters are required here, got {filters.kind} filters"
        )
    return filters


@dataclass(frozen=True)
class SearchConfig:
    """A validated inbound search request."""
    mode: str
    filters: Filters
    max_results: int = 1000
    depth: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'mode': self.mode,
            'filters': self.filters.to_dict(),
            'maxResults': self.max_results,
            'depth': self.depth,
        }
