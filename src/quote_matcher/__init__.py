"""
Instrument Quote Matcher

Matches free-text surgical instrument requests against a supply catalog and
assembles ranked, editable quotations.
"""

__version__ = "1.0.0"

from .config import MatcherConfig, ScoringConfig, ScoringPolicy
from .models import (
    CandidateMatch,
    CatalogItem,
    LineResult,
    MatchClassification,
    QueryTerm,
    QuotationRow,
    QuotationSummary,
    Selection,
)
from .normalizer import normalize, tokenize
from .thesaurus import DEFAULT_THESAURUS, Thesaurus
from .edit_distance import levenshtein
from .scorer import RelevanceScorer, ScoreBreakdown
from .ranker import Ranker, rank
from .quotation import Quotation, quote_from_text

__all__ = [
    "MatcherConfig",
    "ScoringConfig",
    "ScoringPolicy",
    "CandidateMatch",
    "CatalogItem",
    "LineResult",
    "MatchClassification",
    "QueryTerm",
    "QuotationRow",
    "QuotationSummary",
    "Selection",
    "normalize",
    "tokenize",
    "DEFAULT_THESAURUS",
    "Thesaurus",
    "levenshtein",
    "RelevanceScorer",
    "ScoreBreakdown",
    "Ranker",
    "rank",
    "Quotation",
    "quote_from_text",
]
