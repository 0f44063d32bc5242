"""
Relevance Scorer

Scores one catalog item against one free-text request by combining
normalization, thesaurus lookup and bounded edit distance into a single
signed number. Scores only compare meaningfully between candidates for the
same request; anything at or below zero is not a candidate.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import FrozenSet, List, Optional, Sequence

from .config import ScoringConfig
from .edit_distance import distance_threshold, levenshtein
from .models import CatalogItem
from .normalizer import normalize, tokenize
from .thesaurus import DEFAULT_THESAURUS, Thesaurus

logger = logging.getLogger(__name__)


class WeightClass(Enum):
    """How much a query token says about the product being requested."""
    STOP_WORD = "stop_word"
    CATEGORY = "category"
    NUMERIC = "numeric"
    SPECIFIC = "specific"


@dataclass
class ScoreBreakdown:
    """Individual contributions that add up to a relevance score."""
    total: float = 0.0
    completeness: float = 0.0
    exact_title: float = 0.0
    token_score: float = 0.0
    perfect_matches: int = 0
    anchor_bonus: float = 0.0
    accessory_penalty: float = 0.0
    rejected: bool = False

    @property
    def is_candidate(self) -> bool:
        return self.total > 0


@lru_cache(maxsize=65536)
def _cached_distance(a: str, b: str) -> int:
    return levenshtein(a, b)


class RelevanceScorer:
    """
    Weighted multi-factor scorer for catalog titles.

    The vocabulary (thesaurus, stop words, category and accessory terms) and
    all weights are injected, so a different locale or a test fixture can
    swap either without touching the algorithm.
    """

    def __init__(self, thesaurus: Optional[Thesaurus] = None, config: Optional[ScoringConfig] = None):
        self.thesaurus = thesaurus or DEFAULT_THESAURUS
        self.config = config or ScoringConfig()

    def score(self, item: CatalogItem, query_text: str) -> float:
        """Relevance of ``item`` for ``query_text``; <= 0 means no candidate."""
        return self.explain(item, query_text).total

    def explain(self, item: CatalogItem, query_text: str) -> ScoreBreakdown:
        """
        Score an item and report how each signal contributed.

        Steps, accumulated into one total:
        1. completeness gate: every significant query token has a synonym
           somewhere in the title
        2. per-token weighted match quality (exact/synonym, prefix, fuzzy)
        3. anchor bias on the first query token
        4. accessory penalty when the title is an accessory nobody asked for
        """
        breakdown = ScoreBreakdown()
        query_tokens = tokenize(query_text)
        if not query_tokens:
            return breakdown

        cfg = self.config
        normalized_query = " ".join(query_tokens)
        title = normalize(item.title)
        title_tokens = title.split(" ") if title else []
        title_token_set = set(title_tokens)

        significant = [t for t in query_tokens if self._is_significant(t)]
        if significant and all(self._appears_in(t, title) for t in significant):
            breakdown.completeness = cfg.completeness_bonus

        if title and title == normalized_query:
            breakdown.exact_title = cfg.exact_title_bonus

        has_evidence = False
        has_content_tokens = False
        for token in query_tokens:
            weight_class = self.weight_class(token)
            quality = self._best_quality(token, weight_class, title_tokens)
            breakdown.token_score += quality * self._weight(weight_class)
            if quality >= 1.0:
                breakdown.perfect_matches += 1
            if weight_class is not WeightClass.STOP_WORD:
                has_content_tokens = True
                if quality > 0:
                    has_evidence = True
        if not has_content_tokens and breakdown.token_score > 0:
            has_evidence = True

        anchor = query_tokens[0]
        anchor_synonyms = self.thesaurus.synonyms_of(anchor)
        if title_tokens and title_tokens[0] in anchor_synonyms:
            breakdown.anchor_bonus = cfg.anchor_start_bonus
        elif not anchor_synonyms.isdisjoint(title_token_set):
            breakdown.anchor_bonus = cfg.anchor_contains_bonus
        elif cfg.rejects_missing_anchor and len(query_tokens) > 1:
            breakdown.rejected = True
            breakdown.total = -1.0
            return breakdown

        if not self.thesaurus.is_accessory_request(anchor):
            if self._has_unrequested_accessory(query_tokens, title_tokens):
                breakdown.accessory_penalty = cfg.accessory_penalty

        if not has_evidence:
            # Nothing in the title speaks for this item
            return breakdown

        breakdown.total = (
            breakdown.completeness
            + breakdown.exact_title
            + breakdown.token_score
            + breakdown.anchor_bonus
            - breakdown.accessory_penalty
        )
        return breakdown

    def weight_class(self, token: str) -> WeightClass:
        """Classify a query token; sizes such as "16cm" count as numeric."""
        if self.thesaurus.is_stop_word(token):
            return WeightClass.STOP_WORD
        if self.thesaurus.is_category_term(token):
            return WeightClass.CATEGORY
        if token[:1].isdigit():
            return WeightClass.NUMERIC
        return WeightClass.SPECIFIC

    def _weight(self, weight_class: WeightClass) -> float:
        cfg = self.config
        return {
            WeightClass.STOP_WORD: cfg.weight_stop_word,
            WeightClass.CATEGORY: cfg.weight_category,
            WeightClass.NUMERIC: cfg.weight_numeric,
            WeightClass.SPECIFIC: cfg.weight_specific,
        }[weight_class]

    def _is_significant(self, token: str) -> bool:
        if self.thesaurus.is_stop_word(token):
            return False
        if token.isdigit() and len(token) <= self.config.short_numeric_length:
            return False
        return True

    def _appears_in(self, token: str, title: str) -> bool:
        return any(synonym in title for synonym in self.thesaurus.synonyms_of(token))

    def _best_quality(self, token: str, weight_class: WeightClass, title_tokens: Sequence[str]) -> float:
        """Best match quality in [0, 1] of ``token`` against any title token."""
        cfg = self.config
        synonyms = self.thesaurus.synonyms_of(token)
        long_enough = len(token) > cfg.min_fuzzy_length
        prefix_allowed = long_enough and weight_class in (WeightClass.CATEGORY, WeightClass.SPECIFIC)
        fuzzy_allowed = long_enough and weight_class is not WeightClass.STOP_WORD
        threshold = distance_threshold(token, cfg.long_token_length)
        fuzzy_forms = self._fuzzy_forms(synonyms) if fuzzy_allowed else frozenset()

        best = 0.0
        for word in title_tokens:
            if word in synonyms:
                return 1.0
            if prefix_allowed and word.startswith(token):
                best = max(best, cfg.prefix_quality)
                continue
            for form in fuzzy_forms:
                if abs(len(form) - len(word)) > threshold:
                    continue
                distance = _cached_distance(form, word)
                if distance <= threshold:
                    quality = max(1.0 - distance * cfg.fuzzy_step, 1.0 - threshold * cfg.fuzzy_step)
                    best = max(best, quality)
        return best

    def _fuzzy_forms(self, synonyms: FrozenSet[str]) -> List[str]:
        # Very short variants ("sen", "tes") are too ambiguous to fuzz
        return sorted(s for s in synonyms if len(s) > self.config.min_fuzzy_length)

    def _has_unrequested_accessory(self, query_tokens: Sequence[str], title_tokens: Sequence[str]) -> bool:
        requested = set()
        for token in query_tokens:
            requested |= self.thesaurus.synonyms_of(token)
        return any(
            self.thesaurus.is_accessory(word) and word not in requested
            for word in title_tokens
        )
