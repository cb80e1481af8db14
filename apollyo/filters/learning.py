"""User feedback accumulated across searches."""

import re
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, List, Set, Tuple

from ..errors import ValidationError
from ..utils.word_validator import extract_patterns


@dataclass(frozen=True)
class LearningSnapshot:
    """Read-only view of the learning state used while ranking one search."""
    rejected_words: FrozenSet[str] = frozenset()
    blacklist: Tuple[re.Pattern, ...] = ()
    preferred_patterns: FrozenSet[str] = frozenset()

    def allows(self, word: str) -> bool:
        if word in self.rejected_words:
            return False
        return not any(pattern.search(word) for pattern in self.blacklist)

    def preferred(self, patterns: Iterable[str]) -> int:
        """Number of the word's structural tags the user has liked before."""
        return sum(1 for p in patterns if p in self.preferred_patterns)


class LearningState:
    """Mutable learning state.

    Engines never read this directly; they take a ``snapshot()`` at the start
    of a search so feedback arriving mid-search cannot change a ranking.
    """

    def __init__(self):
        self.rejected_words: Set[str] = set()
        self.blacklist: List[str] = []
        self.preferred_patterns: Set[str] = set()

    def add_pattern(self, pattern: str):
        """Remember a structural tag (e.g. ``CVCV`` or ``end:er``) as preferred."""
        self.preferred_patterns.add(pattern)

    def add_blacklist(self, pattern: str):
        """Exclude every word matching a regular expression."""
        try:
            re.compile(pattern)
        except re.error as e:
            raise ValidationError(f"Invalid blacklist pattern {pattern!r}: {e}")
        if pattern not in self.blacklist:
            self.blacklist.append(pattern)

    def learn(self, selected: Iterable[str] = (), rejected: Iterable[str] = ()):
        """Fold one round of user feedback into the state."""
        for word in selected:
            word = word.lower()
            self.rejected_words.discard(word)
            # CV shape and ending carry most of the "feel" of a word
            patterns = extract_patterns(word, with_syllables=False)
            self.add_pattern(patterns[0])
            if len(patterns) > 2:
                self.add_pattern(patterns[2])

        for word in rejected:
            self.rejected_words.add(word.lower())

    def snapshot(self) -> LearningSnapshot:
        return LearningSnapshot(
            rejected_words=frozenset(self.rejected_words),
            blacklist=tuple(re.compile(p, re.IGNORECASE) for p in self.blacklist),
            preferred_patterns=frozenset(self.preferred_patterns),
        )

    def clear(self):
        self.rejected_words.clear()
        self.blacklist.clear()
        self.preferred_patterns.clear()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'rejectedWords': sorted(self.rejected_words),
            'blacklist': list(self.blacklist),
            'preferredPatterns': sorted(self.preferred_patterns),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LearningState':
        state = cls()
        state.rejected_words.update(data.get('rejectedWords', []))
        for pattern in data.get('blacklist', []):
            state.add_blacklist(pattern)
        state.preferred_patterns.update(data.get('preferredPatterns', []))
        return state
