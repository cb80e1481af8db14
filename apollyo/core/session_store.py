"""Session memory: returned words, source usage and adaptive strategies."""

import functools
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Set

from ..errors import ValidationError
from ..filters.learning import LearningState
from .snapshot_store import MemorySnapshotStore, SnapshotStore

logger = logging.getLogger(__name__)

SESSION_KEY = 'apollyo_session'
LEARNING_KEY = 'apollyo_learning'

# A strategy used within this many seconds counts as "recently used"
RECENT_USE_WINDOW = 60
SUCCESS_WEIGHT = 0.2

# (name, description, priority, initial success rate)
STRATEGY_SEEDS = (
    ('source_rotation', "Rotate between different web sources", 1, 0.8),
    ('pattern_variation', "Vary generation patterns", 2, 0.75),
    ('depth_adjustment', "Adjust crawl depth dynamically", 3, 0.7),
    ('filter_relaxation', "Slightly relax filters for diversity", 4, 0.65),
    ('time_based_variation', "Use time-based seed for randomization", 5, 0.6),
)


@dataclass
class Strategy:
    name: str
    description: str
    priority: int
    success_rate: float
    last_used: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'description': self.description,
            'priority': self.priority,
            'lastUsed': self.last_used,
            'successRate': self.success_rate,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Strategy':
        return cls(
            name=str(data['name']),
            description=str(data.get('description', '')),
            priority=int(data['priority']),
            success_rate=float(data['successRate']),
            last_used=float(data.get('lastUsed', 0.0)),
        )


def default_strategies() -> List[Strategy]:
    return [
        Strategy(name=name, description=desc, priority=priority, success_rate=rate)
        for name, desc, priority, rate in STRATEGY_SEEDS
    ]


@dataclass
class SearchHistory:
    timestamp: float
    mode: str
    filters: Dict[str, Any]
    results_count: int
    sources: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'timestamp': self.timestamp,
            'mode': self.mode,
            'filters': self.filters,
            'resultsCount': self.results_count,
            'sources': list(self.sources),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SearchHistory':
        return cls(
            timestamp=float(data['timestamp']),
            mode=str(data['mode']),
            filters=dict(data.get('filters') or {}),
            results_count=int(data['resultsCount']),
            sources=list(data.get('sources', [])),
        )


@dataclass
class SessionMemory:
    session_id: str
    start_time: float
    searches: List[SearchHistory] = field(default_factory=list)
    returned_words: Set[str] = field(default_factory=set)
    used_sources: Dict[str, int] = field(default_factory=dict)
    adaptive_strategies: List[Strategy] = field(default_factory=default_strategies)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize; the set and the counter map become a list and an object."""
        return {
            'sessionId': self.session_id,
            'startTime': self.start_time,
            'searches': [s.to_dict() for s in self.searches],
            'returnedWords': sorted(self.returned_words),
            'usedSources': dict(self.used_sources),
            'adaptiveStrategies': [s.to_dict() for s in self.adaptive_strategies],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SessionMemory':
        strategies = [Strategy.from_dict(s) for s in data.get('adaptiveStrategies', [])]
        return cls(
            session_id=str(data['sessionId']),
            start_time=float(data['startTime']),
            searches=[SearchHistory.from_dict(s) for s in data.get('searches', [])],
            returned_words=set(data.get('returnedWords', [])),
            used_sources={str(k): int(v) for k, v in dict(data.get('usedSources', {})).items()},
            adaptive_strategies=strategies or default_strategies(),
        )


class SessionStore:
    """Owns one session's memory and writes it through a snapshot store.

    Every mutation is persisted immediately as a full snapshot. A snapshot
    that is missing, older than the TTL, or malformed is treated as absent.
    """

    def __init__(
        self,
        store: Optional[SnapshotStore] = None,
        ttl_hours: float = 24,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store if store is not None else MemorySnapshotStore()
        self.ttl = ttl_hours * 3600
        self._clock = clock
        self.memory = self.restore_or_create()
        self.learning = self._load_learning()

    def _new_session(self) -> SessionMemory:
        now = self._clock()
        session_id = f"session_{int(now * 1000)}_{uuid.uuid4().hex[:9]}"
        return SessionMemory(session_id=session_id, start_time=now)

    def restore_or_create(self) -> SessionMemory:
        """Rehydrate the persisted session if it is still fresh, else start a new one."""
        snapshot = self.store.load(SESSION_KEY)
        if snapshot is not None:
            try:
                memory = SessionMemory.from_dict(snapshot)
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.info("Discarding malformed session snapshot: %s", e)
            else:
                if self._clock() - memory.start_time < self.ttl:
                    logger.debug("Restored session %s", memory.session_id)
                    return memory
                logger.info("Session %s expired, starting a new one", memory.session_id)

        return self._new_session()

    def _load_learning(self) -> LearningState:
        snapshot = self.store.load(LEARNING_KEY)
        if snapshot is None:
            return LearningState()
        try:
            return LearningState.from_dict(snapshot)
        except (KeyError, TypeError, ValueError, AttributeError, ValidationError) as e:
            logger.info("Discarding malformed learning snapshot: %s", e)
            return LearningState()

    def save(self):
        self.store.save(SESSION_KEY, self.memory.to_dict())

    def save_learning(self):
        self.store.save(LEARNING_KEY, self.learning.to_dict())

    # ------------------------------- Strategies -------------------------------

    def pick_strategy(self) -> Strategy:
        """Least recently used first, then highest success rate.

        Differences in ``last_used`` under a minute are treated as ties and
        fall through to the success rate. The sort is stable so the seed
        order breaks exact ties.
        """
        def compare(a: Strategy, b: Strategy) -> float:
            time_diff = a.last_used - b.last_used
            if abs(time_diff) > RECENT_USE_WINDOW:
                return time_diff
            return b.success_rate - a.success_rate

        ranked = sorted(self.memory.adaptive_strategies, key=functools.cmp_to_key(compare))
        strategy = ranked[0]
        strategy.last_used = self._clock()
        self.save()

        logger.info("Using strategy %s (success rate %.2f)", strategy.name, strategy.success_rate)
        return strategy

    def get_strategy(self, name: str) -> Optional[Strategy]:
        for strategy in self.memory.adaptive_strategies:
            if strategy.name == name:
                return strategy
        return None

    def update_strategy_success(self, name: str, success: bool):
        """Fold one outcome into the strategy's moving success rate."""
        strategy = self.get_strategy(name)
        if strategy is None:
            return
        outcome = 1.0 if success else 0.0
        strategy.success_rate = strategy.success_rate * (1 - SUCCESS_WEIGHT) + outcome * SUCCESS_WEIGHT
        self.save()

    # ------------------------------- History -------------------------------

    def record_search(self, mode: str, filters: Dict[str, Any], words: Iterable[str], sources: Iterable[str]):
        words = list(words)
        sources = list(sources)

        self.memory.searches.append(SearchHistory(
            timestamp=self._clock(),
            mode=mode,
            filters=filters,
            results_count=len(words),
            sources=sources,
        ))
        self.memory.returned_words.update(words)
        for source in sources:
            self.memory.used_sources[source] = self.memory.used_sources.get(source, 0) + 1

        self.save()

    def is_word_returned(self, word: str) -> bool:
        return word in self.memory.returned_words

    def filter_duplicates(self, words: Iterable[str]) -> List[str]:
        return [w for w in words if not self.is_word_returned(w)]

    def returned_words(self) -> Set[str]:
        """Copy of the returned-word set as it stands now."""
        return set(self.memory.returned_words)

    def least_used_sources(self, candidates: Iterable[str], n: int) -> List[str]:
        ranked = sorted(candidates, key=lambda source: self.memory.used_sources.get(source, 0))
        return ranked[:n]

    def session_stats(self) -> Dict[str, Any]:
        return {
            'sessionId': self.memory.session_id,
            'duration': self._clock() - self.memory.start_time,
            'totalSearches': len(self.memory.searches),
            'uniqueWords': len(self.memory.returned_words),
            'sourcesUsed': len(self.memory.used_sources),
            'strategies': [s.to_dict() for s in self.memory.adaptive_strategies],
        }

    def reset(self):
        """Start a fresh session with the seed strategies; learning state is kept."""
        self.memory = self._new_session()
        self.save()
