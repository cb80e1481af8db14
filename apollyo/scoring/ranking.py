"""Ordering and diversity capping of scored results."""

import math
from typing import Dict, List, Optional

from ..filters.learning import LearningSnapshot
from ..models import WordResult


def rank(results: List[WordResult], learning: Optional[LearningSnapshot] = None) -> List[WordResult]:
    """Descending by overall score; preferred patterns break ties. Stable."""
    if learning is None:
        return sorted(results, key=lambda r: -r.overall)
    return sorted(results, key=lambda r: (-r.overall, -learning.preferred(r.metadata.patterns)))


def diversify(
    results: List[WordResult],
    by_pattern: bool,
    learning: Optional[LearningSnapshot] = None,
) -> List[WordResult]:
    """Rank results, capping each dominant-pattern bucket when ``by_pattern`` is set.

    With N results spread over B buckets, no bucket keeps more than
    ceil(N / B) of its best words.
    """
    if not by_pattern or not results:
        return rank(results, learning)

    groups: Dict[str, List[WordResult]] = {}
    for result in results:
        groups.setdefault(result.dominant_pattern, []).append(result)

    max_per_pattern = math.ceil(len(results) / len(groups))

    diverse: List[WordResult] = []
    for group in groups.values():
        diverse.extend(rank(group, learning)[:max_per_pattern])

    return rank(diverse, learning)
