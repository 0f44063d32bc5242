"""
Matcher Configuration

Scoring weights, bonuses and thresholds, the scoring policy variants, and
the runtime settings read from the environment.
"""

import logging
import os
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class ScoringPolicy(Enum):
    """How strictly a multi-word request must agree with a title.

    STRICT rejects multi-token queries whose first token appears nowhere in
    the title. LENIENT never rejects and relies on the weighted sum, with a
    lower completeness bonus.
    """
    STRICT = "strict"
    LENIENT = "lenient"

    @classmethod
    def parse(cls, value: str) -> 'ScoringPolicy':
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown scoring policy '{value}' (expected one of: "
                f"{', '.join(p.value for p in cls)})"
            )


@dataclass(frozen=True)
class ScoringConfig:
    """Weights and thresholds for the relevance scorer."""

    policy: ScoringPolicy = ScoringPolicy.STRICT

    # Whole-title signals
    completeness_bonus: float = 5000.0
    exact_title_bonus: float = 1000.0
    anchor_start_bonus: float = 5000.0
    anchor_contains_bonus: float = 1000.0
    accessory_penalty: float = 4000.0

    # Per-token weights by class
    weight_specific: float = 2000.0
    weight_category: float = 1200.0
    weight_numeric: float = 800.0
    weight_stop_word: float = 100.0

    # Token match quality
    prefix_quality: float = 0.9
    fuzzy_step: float = 0.2

    # Length gates
    min_fuzzy_length: int = 3
    long_token_length: int = 5
    short_numeric_length: int = 2

    @classmethod
    def for_policy(cls, policy: ScoringPolicy) -> 'ScoringConfig':
        if policy is ScoringPolicy.LENIENT:
            return cls(policy=policy, completeness_bonus=3000.0)
        return cls(policy=policy)

    @property
    def rejects_missing_anchor(self) -> bool:
        return self.policy is ScoringPolicy.STRICT


@dataclass
class MatcherConfig:
    """Runtime settings for ranking and item extraction."""

    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    max_results: int = 15
    max_workers: Optional[int] = None
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.5-flash"

    def with_policy(self, policy: ScoringPolicy) -> 'MatcherConfig':
        return replace(self, scoring=ScoringConfig.for_policy(policy))

    @classmethod
    def from_env(cls) -> 'MatcherConfig':
        """Build configuration from QUOTE_MATCHER_* and GEMINI_* variables."""
        config = cls()

        policy = os.environ.get("QUOTE_MATCHER_POLICY")
        if policy:
            config.scoring = ScoringConfig.for_policy(ScoringPolicy.parse(policy))

        config.max_results = _int_from_env("QUOTE_MATCHER_MAX_RESULTS", config.max_results)
        config.max_workers = _int_from_env("QUOTE_MATCHER_WORKERS", config.max_workers)
        config.gemini_api_key = os.environ.get("GEMINI_API_KEY") or None
        config.gemini_model = os.environ.get("QUOTE_MATCHER_GEMINI_MODEL", config.gemini_model)

        logger.debug(f"Loaded matcher config: policy={config.scoring.policy.value}, "
                     f"max_results={config.max_results}, workers={config.max_workers}")
        return config


def _int_from_env(name: str, default: Optional[int]) -> Optional[int]:
    value = os.environ.get(name)
    if not value:
        return default
    try:
        parsed = int(value)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={value!r}")
        return default
    if parsed < 1:
        logger.warning(f"Ignoring non-positive {name}={value!r}")
        return default
    return parsed
