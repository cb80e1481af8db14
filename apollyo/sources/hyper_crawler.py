"""Hyper mode: crawl public word lists and keep what survives the advanced filters."""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Set

from ..core.session_store import SessionStore, Strategy
from ..errors import SourceFetchError
from ..filters.filter_manager import passes_advanced_filters, passes_basic_filters, relax_filters
from ..filters.learning import LearningSnapshot
from ..models import Filters, Scores, WordMetadata, WordResult, require_advanced
from ..scoring import heuristics
from ..scoring.english_validator import EnglishValidator
from ..scoring.ranking import diversify, rank
from ..utils.word_validator import extract_patterns
from .fetcher import DEFAULT_SOURCES, CrawlSource, SourceFetcher

logger = logging.getLogger(__name__)


@dataclass
class CrawlStats:
    total_crawled: int = 0
    valid_words: int = 0
    sources: List[str] = field(default_factory=list)
    duration_ms: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'totalCrawled': self.total_crawled,
            'validWords': self.valid_words,
            'sources': list(self.sources),
            'durationMs': self.duration_ms,
        }


@dataclass
class CrawlResult:
    words: List[WordResult]
    stats: CrawlStats

    def to_dict(self) -> Dict[str, Any]:
        return {'words': [w.to_dict() for w in self.words], 'stats': self.stats.to_dict()}


class HyperCrawler:
    """Crawls sources one at a time; a failing source is logged and skipped."""

    def __init__(
        self,
        session: SessionStore,
        fetcher: Optional[SourceFetcher] = None,
        validator: Optional[EnglishValidator] = None,
        sources: Optional[Sequence[CrawlSource]] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.session = session
        self.fetcher = fetcher or SourceFetcher()
        self.validator = validator or EnglishValidator()
        self.sources = list(sources or DEFAULT_SOURCES)
        self._clock = clock

    def select_sources(self, strategy: Strategy, depth: int) -> List[CrawlSource]:
        """Order the sources for this crawl according to the strategy."""
        if strategy.name == 'source_rotation':
            least_used = set(self.session.least_used_sources([s.url for s in self.sources], depth + 2))
            return [s for s in self.sources if s.url in least_used]

        if strategy.name == 'time_based_variation':
            offset = time.localtime(self._clock()).tm_hour % len(self.sources)
            return self.sources[offset:] + self.sources[:offset]

        return sorted(self.sources, key=lambda s: s.priority)

    def adjust_depth(self, strategy: Strategy, depth: int) -> int:
        if strategy.name == 'depth_adjustment':
            return min(depth + 1, len(self.sources))
        return depth

    def score(self, word: str, source_url: str) -> Optional[WordResult]:
        """Validate and score one crawled word; None if the validator rejects it."""
        validation = self.validator.validate(word)
        if not validation.is_valid:
            return None

        return WordResult(
            word=word,
            source='crawled',
            scores=Scores(
                rarity=validation.rarity_score,
                market_potential=validation.market_potential,
                confidence=validation.confidence,
                overall=(
                    validation.confidence * 0.3
                    + validation.rarity_score * 0.4
                    + validation.market_potential * 0.3
                ),
                memorability=heuristics.memorability(word),
                pronunciation=heuristics.pronounceability(word),
            ),
            metadata=WordMetadata(
                length=len(word),
                patterns=extract_patterns(word, with_syllables=False),
                validation=validation,
                sources=[source_url],
                count=1,
            ),
        )

    def extract_words(self, lines: Iterable[str], filters: Filters, source_url: str) -> List[WordResult]:
        """Cheap filters first, full validation only for the survivors."""
        words = []
        for line in lines:
            word = line.strip().lower()
            if not passes_basic_filters(word, filters):
                continue
            result = self.score(word, source_url)
            if result is not None:
                words.append(result)
        return words

    async def crawl(
        self,
        filters: Filters,
        max_results: int = 5000,
        depth: int = 3,
        learning: Optional[LearningSnapshot] = None,
        exclude: Optional[Set[str]] = None,
    ) -> CrawlResult:
        """Fetch sources in strategy order and return the filtered, ranked words.

        Words in ``exclude`` are dropped; it defaults to every word the session
        has already returned.
        """
        started = self._clock()
        filters = require_advanced(filters)
        learning = learning or LearningSnapshot()
        if exclude is None:
            exclude = self.session.returned_words()

        strategy = self.session.pick_strategy()
        if strategy.name == 'filter_relaxation':
            filters = relax_filters(filters)

        selected = self.select_sources(strategy, depth)
        adjusted_depth = self.adjust_depth(strategy, depth)

        merged: Dict[str, WordResult] = {}
        sources_used: List[str] = []

        for source in selected[:adjusted_depth]:
            try:
                lines = await self.fetcher.fetch_lines(source)
            except SourceFetchError as e:
                logger.warning("Skipping source: %s", e)
                continue

            new_words = [
                w for w in self.extract_words(lines, filters, source.url)
                if w.word not in exclude and learning.allows(w.word)
            ]
            for result in new_words:
                existing = merged.get(result.word)
                if existing is None:
                    merged[result.word] = result
                else:
                    existing.metadata.sources = (existing.metadata.sources or []) + (result.metadata.sources or [])
                    existing.metadata.count = (existing.metadata.count or 1) + 1

            sources_used.append(source.url)
            logger.info("Crawled %d new words from %s", len(new_words), source.url)

        filtered = [r for r in merged.values() if passes_advanced_filters(r, filters)]
        top = rank(filtered, learning)[:max_results]
        ranked = diversify(top, strategy.name == 'pattern_variation', learning)

        self.session.record_search('hyper', filters.to_dict(), [r.word for r in ranked], sources_used)
        self.session.update_strategy_success(strategy.name, len(ranked) >= max_results * 0.5)

        stats = CrawlStats(
            total_crawled=len(merged),
            valid_words=len(ranked),
            sources=sources_used,
            duration_ms=int((self._clock() - started) * 1000),
        )
        logger.info(
            "Hyper crawl finished: %d crawled, %d kept, strategy %s, %dms",
            stats.total_crawled, stats.valid_words, strategy.name, stats.duration_ms,
        )
        return CrawlResult(words=ranked, stats=stats)
