"""Shared pytest fixtures."""

import random
from typing import List, Optional

import httpx
import pytest

from apollyo.core.session_store import SessionStore
from apollyo.core.snapshot_store import MemorySnapshotStore
from apollyo.generators.dictionary_generator import DictionaryGenerator
from apollyo.models import Scores, ValidationResult, WordMetadata, WordResult
from apollyo.sources.fetcher import CrawlSource, SourceFetcher

WORDS_URL = "https://words.example.test/list.txt"
BROKEN_URL = "https://broken.example.test/list.txt"

WORD_LIST = "\n".join([
    "jukebox",
    "zigzag",
    "wizard",
    "Kayak ",
    "cat",
    "xqzt",
    "rhythm",
    "",
])


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def anyio_backend():
    return 'asyncio'


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def snapshot_store() -> MemorySnapshotStore:
    return MemorySnapshotStore()


@pytest.fixture
def session(snapshot_store, clock) -> SessionStore:
    return SessionStore(snapshot_store, clock=clock)


@pytest.fixture
def force_strategy(session, clock):
    """Make the next ``pick_strategy()`` return the named strategy."""
    def force(name: str):
        for strategy in session.memory.adaptive_strategies:
            strategy.last_used = 0.0 if strategy.name == name else clock()
    return force


@pytest.fixture
def dictionary(tmp_path, rng) -> DictionaryGenerator:
    # Bundled words only; the extra wordlist path does not exist
    return DictionaryGenerator(wordlist_path=str(tmp_path / "missing.txt"), rng=rng)


@pytest.fixture
def word_handler():
    """httpx handler: WORDS_URL serves WORD_LIST, BROKEN_URL returns 500."""
    def handler(request: httpx.Request) -> httpx.Response:
        if str(request.url) == WORDS_URL:
            return httpx.Response(200, text=WORD_LIST)
        return httpx.Response(500, text="boom")
    return handler


@pytest.fixture
def fetcher(word_handler) -> SourceFetcher:
    return SourceFetcher(transport=httpx.MockTransport(word_handler))


@pytest.fixture
def sources() -> List[CrawlSource]:
    return [CrawlSource(WORDS_URL, 'wordlist', 1), CrawlSource(BROKEN_URL, 'wordlist', 2)]


@pytest.fixture
def make_result():
    """Factory for hand-built WordResults."""
    def make(
        word: str,
        overall: float,
        pattern: Optional[str] = None,
        source: str = 'generated',
        sources: Optional[List[str]] = None,
        rarity: float = 0.5,
        market_potential: float = 0.5,
        confidence: float = 0.9,
    ) -> WordResult:
        validation = ValidationResult(
            is_valid=True,
            confidence=confidence,
            rarity_score=rarity,
            market_potential=market_potential,
        )
        return WordResult(
            word=word,
            source=source,
            scores=Scores(
                rarity=rarity,
                market_potential=market_potential,
                confidence=confidence,
                overall=overall,
            ),
            metadata=WordMetadata(
                length=len(word),
                patterns=[pattern] if pattern else [],
                validation=validation,
                sources=sources,
            ),
        )
    return make
