"""Search orchestration: analysis, mode dispatch, deadline and merging."""

import asyncio
import dataclasses
import logging
import random
import time
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple, Union

from ..analysis.filter_analyzer import AIAnalysisClient, ProcessingPlan, analyze_and_prepare
from ..config import Settings
from ..errors import ApollyoError, SearchTimeoutError, UnexpectedError, ValidationError
from ..filters.filter_manager import build_search_config, optimize_filters
from ..generators.dictionary_generator import DictionaryGenerator
from ..models import SearchConfig, ValidationResult, WordResult
from ..scoring.english_validator import EnglishValidator
from ..scoring.ranking import rank
from ..sources.fetcher import SourceFetcher
from ..sources.hyper_crawler import HyperCrawler
from ..utils.rate_limiter import RateLimiter
from .session_store import SessionStore
from .snapshot_store import create_snapshot_store
from .speed_engine import SpeedEngine

logger = logging.getLogger(__name__)

SearchRequest = Union[SearchConfig, Dict[str, Any]]


@dataclass
class BothResults:
    speed: List[WordResult]
    hyper: List[WordResult]
    combined: List[WordResult]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'speed': [r.to_dict() for r in self.speed],
            'hyper': [r.to_dict() for r in self.hyper],
            'combined': [r.to_dict() for r in self.combined],
            'metadata': {
                'speedCount': len(self.speed),
                'hyperCount': len(self.hyper),
                'combinedCount': len(self.combined),
            },
        }


def _max_optional(a: Optional[float], b: Optional[float]) -> Optional[float]:
    if a is None:
        return b
    if b is None:
        return a
    return max(a, b)


def merge_results(speed: List[WordResult], hyper: List[WordResult]) -> List[WordResult]:
    """Combine both result streams; shared words keep the max of every score.

    Inputs are left untouched; merged entries are new objects.
    """
    merged: Dict[str, WordResult] = {r.word: r for r in speed}

    for result in hyper:
        existing = merged.get(result.word)
        if existing is None:
            merged[result.word] = result
            continue

        scores = dataclasses.replace(
            existing.scores,
            rarity=max(existing.scores.rarity, result.scores.rarity),
            market_potential=max(existing.scores.market_potential, result.scores.market_potential),
            confidence=max(existing.scores.confidence, result.scores.confidence),
            overall=max(existing.scores.overall, result.scores.overall),
            memorability=_max_optional(existing.scores.memorability, result.scores.memorability),
            pronunciation=_max_optional(existing.scores.pronunciation, result.scores.pronunciation),
        )
        sources = list(existing.metadata.sources or [])
        sources.extend(s for s in (result.metadata.sources or []) if s not in sources)
        metadata = dataclasses.replace(existing.metadata, sources=sources)
        merged[result.word] = dataclasses.replace(existing, scores=scores, metadata=metadata)

    return rank(list(merged.values()))


class SearchOrchestrator:
    """Entry point for searches.

    Owns the session store and both engines. Every search runs under one
    wall-clock deadline; words already returned earlier in the session are
    dropped from the output.
    """

    def __init__(
        self,
        session: Optional[SessionStore] = None,
        speed_engine: Optional[SpeedEngine] = None,
        crawler: Optional[HyperCrawler] = None,
        validator: Optional[EnglishValidator] = None,
        ai_client: Optional[AIAnalysisClient] = None,
        rate_limiter: Optional[RateLimiter] = None,
        request_timeout: float = 120.0,
        default_depth: int = 3,
        default_max_results: int = 1000,
    ):
        self.session = session or SessionStore()
        self.validator = validator or EnglishValidator()
        self.speed_engine = speed_engine or SpeedEngine(self.session, validator=self.validator)
        self.crawler = crawler or HyperCrawler(self.session, validator=self.validator)
        self.ai_client = ai_client
        self.rate_limiter = rate_limiter
        self.request_timeout = request_timeout
        self.default_depth = default_depth
        self.default_max_results = default_max_results

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        openai_key: Optional[str] = None,
        rate_limiter: Optional[RateLimiter] = None,
        rng: Optional[random.Random] = None,
    ) -> 'SearchOrchestrator':
        session = SessionStore(
            create_snapshot_store(settings.session.backend, settings.session.path),
            ttl_hours=settings.session.ttl_hours,
        )
        validator = EnglishValidator()
        dictionary = DictionaryGenerator(
            wordlist_path=settings.dictionary.wordlist_path,
            download_if_missing=settings.dictionary.download,
            rng=rng,
        )
        if rate_limiter is None:
            rate_limiter = RateLimiter(
                limit=settings.rate_limit.limit,
                window=settings.rate_limit.window,
                sweep_interval=settings.rate_limit.sweep_interval,
            )
        ai_client = None
        if openai_key:
            ai_client = AIAnalysisClient(
                openai_key,
                api_url=settings.analysis.api_url,
                model=settings.analysis.model,
                timeout=settings.analysis.timeout,
            )
        return cls(
            session=session,
            speed_engine=SpeedEngine(session, validator=validator, dictionary=dictionary, rng=rng),
            crawler=HyperCrawler(
                session,
                fetcher=SourceFetcher(timeout=settings.fetch.timeout),
                validator=validator,
                sources=settings.sources,
            ),
            validator=validator,
            ai_client=ai_client,
            rate_limiter=rate_limiter,
            request_timeout=settings.search.request_timeout,
            default_depth=settings.search.default_depth,
            default_max_results=settings.search.default_max_results,
        )

    def _config(self, request: SearchRequest, mode: Optional[str] = None) -> SearchConfig:
        if isinstance(request, SearchConfig):
            if mode is None or request.mode == mode:
                return request
            request = request.to_dict()
        data = dict(request)
        if mode is not None:
            data['mode'] = mode
        return build_search_config(data, default_max_results=self.default_max_results)

    async def _with_deadline(self, coro):
        """Await ``coro`` under the request deadline and map errors to the public taxonomy."""
        try:
            return await asyncio.wait_for(coro, timeout=self.request_timeout)
        except asyncio.TimeoutError:
            logger.warning("Search exceeded the %ss deadline", self.request_timeout)
            raise SearchTimeoutError(self.request_timeout)
        except ApollyoError:
            raise
        except Exception as e:
            logger.exception("Search failed unexpectedly")
            raise UnexpectedError() from e

    def _deadline_check(self, started: float):
        """Callable that raises SearchTimeoutError once the request deadline has passed."""
        def check():
            if time.monotonic() - started > self.request_timeout:
                raise SearchTimeoutError(self.request_timeout)
        return check

    async def _run(
        self, config: SearchConfig, previously_returned: Set[str], started: float,
    ) -> List[WordResult]:
        config = dataclasses.replace(config, filters=optimize_filters(config.filters))
        learning = self.session.learning.snapshot()

        plan: ProcessingPlan = await analyze_and_prepare(config, self.ai_client)
        for recommendation in plan.analysis.recommendations:
            logger.info("Recommendation: %s", recommendation)

        if config.mode == 'speed':
            results = self.speed_engine.generate(
                plan.filters, config.max_results, learning,
                exclude=previously_returned, deadline=self._deadline_check(started),
            )
        else:
            depth = config.depth
            if depth is None:
                depth = plan.analysis.crawl_strategy.depth if plan.analysis.crawl_strategy else self.default_depth
            crawl = await self.crawler.crawl(
                plan.filters, config.max_results, depth, learning, exclude=previously_returned,
            )
            results = crawl.words

        unique = [r for r in results if r.word not in previously_returned]
        logger.info(
            "%s search: %d results, %d dropped as session duplicates",
            config.mode, len(unique), len(results) - len(unique),
        )
        return unique

    async def search(self, request: SearchRequest, client_id: str = 'local') -> List[WordResult]:
        """Run one search in the requested mode."""
        if self.rate_limiter is not None:
            self.rate_limiter.check(client_id)
        config = self._config(request)
        # Engines record their own results; dedup against history from before this search
        previously_returned = self.session.returned_words()
        return await self._with_deadline(self._run(config, previously_returned, time.monotonic()))

    async def search_both(self, request: SearchRequest, client_id: str = 'local') -> BothResults:
        """Run speed and hyper on the same filters and merge the results."""
        if self.rate_limiter is not None:
            self.rate_limiter.check(client_id)
        speed_config = self._config(request, mode='speed')
        hyper_config = self._config(request, mode='hyper')
        previously_returned = self.session.returned_words()
        started = time.monotonic()

        async def run_both() -> Tuple[List[WordResult], List[WordResult]]:
            speed, hyper = await asyncio.gather(
                self._run(speed_config, previously_returned, started),
                self._run(hyper_config, previously_returned, started),
            )
            return speed, hyper

        speed, hyper = await self._with_deadline(run_both())
        combined = merge_results(speed, hyper)
        logger.info("Both modes: %d speed, %d hyper, %d combined", len(speed), len(hyper), len(combined))
        return BothResults(speed=speed, hyper=hyper, combined=combined)

    def validate_words(self, words: Iterable[str]) -> List[Tuple[str, ValidationResult]]:
        """Validate each word on its own; no search, no session changes."""
        if isinstance(words, str):
            raise ValidationError("Invalid words parameter")
        words = list(words)
        if not words:
            raise ValidationError("Invalid words parameter")
        return [(word, self.validator.validate(word)) for word in words]

    def learn(self, selected: Iterable[str] = (), rejected: Iterable[str] = (), blacklist: Iterable[str] = ()):
        """Record user feedback for later searches."""
        learning = self.session.learning
        for pattern in blacklist:
            learning.add_blacklist(pattern)
        learning.learn(selected=selected, rejected=rejected)
        self.session.save_learning()

    def session_stats(self) -> Dict[str, Any]:
        return self.session.session_stats()

    def reset_session(self):
        self.session.reset()
        logger.info("Session reset")

    def start(self):
        """Start background housekeeping; call from inside the running event loop."""
        if self.rate_limiter is not None:
            self.rate_limiter.start()

    async def aclose(self):
        if self.rate_limiter is not None:
            await self.rate_limiter.stop()
        await self.crawler.fetcher.aclose()
