"""Dictionary-backed word source for the speed engine."""

import logging
import random
import urllib.request
from functools import lru_cache
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from ..utils.word_validator import VOWELS, WordValidator

logger = logging.getLogger(__name__)

BUNDLED_WORDLIST = Path(__file__).resolve().parent.parent / "data" / "common_words.txt"


@lru_cache(maxsize=None)
def load_known_words(path: Optional[str] = None) -> FrozenSet[str]:
    """Load the known-word set (the bundled list unless a path is given)."""
    wordlist = Path(path) if path else BUNDLED_WORDLIST
    with open(wordlist, 'r') as f:
        return frozenset(w.lower() for line in f for w in line.split() if w.isalpha())


class DictionaryGenerator:
    """Samples dictionary words and expands them into affixed variants."""

    # Affixes used for morphological variants
    SUFFIXES = ['er', 'ly', 'ing', 'ed', 'ness', 'ful', 'ify', 'ize', 'ist', 'able', 'ous', 'y', 'ion']
    PREFIXES = ['re', 'un', 'pre', 'pro', 'out', 'over', 'co']

    WORDS_URL = "https://raw.githubusercontent.com/dwyl/english-words/master/words_alpha.txt"

    def __init__(
        self,
        wordlist_path: Optional[str] = None,
        download_if_missing: bool = False,
        rng: Optional[random.Random] = None,
    ):
        self.wordlist_path = Path(wordlist_path) if wordlist_path else Path("data/wordlists/english_words.txt")
        self.download_if_missing = download_if_missing
        self._rng = rng or random.Random()
        self._words: Set[str] = set()
        self._pools: Dict[Tuple[int, int], List[str]] = {}

    def load_words(self) -> int:
        """Load words from file, downloading if allowed; the bundled list is always included."""
        self._words = set(load_known_words())
        self._pools.clear()

        if self.wordlist_path.exists():
            self._words.update(self._read(self.wordlist_path))
        elif self.download_if_missing:
            self._download_wordlist()

        return len(self._words)

    def _read(self, path: Path) -> Set[str]:
        with open(path, 'r') as f:
            return {line.strip().lower() for line in f if line.strip().isalpha()}

    def _download_wordlist(self):
        """Download English wordlist."""
        logger.info("Downloading wordlist from %s", self.WORDS_URL)
        self.wordlist_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            urllib.request.urlretrieve(self.WORDS_URL, self.wordlist_path)
        except OSError as e:
            logger.warning("Wordlist download failed, using bundled words only: %s", e)
            return

        self._words.update(self._read(self.wordlist_path))
        logger.info("Loaded %d dictionary words", len(self._words))

    @property
    def words(self) -> Set[str]:
        if not self._words:
            self.load_words()
        return self._words

    def _pool(self, min_length: int, max_length: int) -> List[str]:
        key = (min_length, max_length)
        if key not in self._pools:
            self._pools[key] = sorted(w for w in self.words if min_length <= len(w) <= max_length)
        return self._pools[key]

    def random_words(
        self,
        count: int,
        min_length: int = 3,
        max_length: int = 12,
        exclude: Optional[Iterable[str]] = None,
    ) -> List[str]:
        """Random sample of dictionary words inside the length bounds."""
        excluded = set(exclude or ())
        pool = [w for w in self._pool(min_length, max_length) if w not in excluded]
        if count <= 0 or not pool:
            return []
        return self._rng.sample(pool, min(count, len(pool)))

    def variations(self, word: str) -> List[str]:
        """Affixed variants of a base word, e.g. ``craft`` -> ``crafter``, ``recraft``."""
        word = word.lower()
        candidates = []

        for suffix in self.SUFFIXES:
            stem = word
            if suffix[0] in VOWELS or suffix == 'y':
                # drop silent e before a vowel suffix
                if stem.endswith('e'):
                    stem = stem[:-1]
                # double the final consonant of short CVC words
                elif (
                    len(stem) >= 3 and stem[-1] not in VOWELS and stem[-1] not in 'wxy'
                    and stem[-2] in VOWELS and stem[-3] not in VOWELS
                ):
                    stem = stem + stem[-1]
            candidates.append(stem + suffix)

        for prefix in self.PREFIXES:
            candidates.append(prefix + word)

        seen = set()
        unique = []
        for candidate in candidates:
            if candidate != word and candidate not in seen:
                seen.add(candidate)
                unique.append(candidate)
        return unique

    def valid_variations(self, word: str, min_length: int, max_length: int) -> List[str]:
        """Variants that fit the length bounds and look English."""
        validator = WordValidator(min_length=min_length, max_length=max_length)
        return [v for v in self.variations(word) if validator.is_valid(v)]
