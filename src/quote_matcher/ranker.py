"""
Ranks a catalog against a single request term.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence, Tuple

from .models import CandidateMatch, CatalogItem
from .scorer import RelevanceScorer

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 15


class Ranker:
    """Linear-scan ranker: score every item, keep positives, best first."""

    def __init__(
        self,
        scorer: Optional[RelevanceScorer] = None,
        max_results: int = DEFAULT_MAX_RESULTS,
        max_workers: Optional[int] = None,
    ):
        if max_results < 1:
            raise ValueError(f"max_results must be positive, got {max_results}")
        self.scorer = scorer or RelevanceScorer()
        self.max_results = max_results
        self.max_workers = max_workers

    def rank(self, catalog: Sequence[CatalogItem], query_text: str) -> Tuple[CandidateMatch, ...]:
        """Top candidates for ``query_text`` in descending score order.

        Equal scores keep catalog order (sorted() is stable).
        """
        if not catalog:
            return ()

        scores = self._score_all(catalog, query_text)
        candidates = [
            CandidateMatch(item=item, score=score)
            for item, score in zip(catalog, scores)
            if score > 0
        ]
        candidates = sorted(candidates, key=lambda c: c.score, reverse=True)[:self.max_results]

        logger.debug(f"Ranked {len(candidates)} candidates for '{query_text}' "
                     f"out of {len(catalog)} catalog items")
        return tuple(candidates)

    def _score_all(self, catalog: Sequence[CatalogItem], query_text: str) -> List[float]:
        if self.max_workers and self.max_workers > 1 and len(catalog) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                # map() yields results in input order
                return list(executor.map(lambda item: self.scorer.score(item, query_text), catalog))
        return [self.scorer.score(item, query_text) for item in catalog]


def rank(
    catalog: Sequence[CatalogItem],
    query_text: str,
    scorer: Optional[RelevanceScorer] = None,
    max_results: int = DEFAULT_MAX_RESULTS,
) -> Tuple[CandidateMatch, ...]:
    """Convenience wrapper around :class:`Ranker`."""
    return Ranker(scorer=scorer, max_results=max_results).rank(catalog, query_text)
