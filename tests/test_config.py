#!/usr/bin/env python3
"""
Tests for matcher configuration.
"""

import os
import unittest
from unittest.mock import patch

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from quote_matcher.config import MatcherConfig, ScoringConfig, ScoringPolicy


class TestScoringPolicy(unittest.TestCase):

    def test_parse(self):
        self.assertIs(ScoringPolicy.parse(" Lenient "), ScoringPolicy.LENIENT)
        self.assertIs(ScoringPolicy.parse("strict"), ScoringPolicy.STRICT)
        with self.assertRaises(ValueError):
            ScoringPolicy.parse("fuzzy")

    def test_for_policy(self):
        strict = ScoringConfig.for_policy(ScoringPolicy.STRICT)
        lenient = ScoringConfig.for_policy(ScoringPolicy.LENIENT)
        self.assertTrue(strict.rejects_missing_anchor)
        self.assertFalse(lenient.rejects_missing_anchor)
        self.assertLess(lenient.completeness_bonus, strict.completeness_bonus)


class TestMatcherConfig(unittest.TestCase):
    """Test cases for MatcherConfig.from_env()."""

    @patch.dict(os.environ, {}, clear=True)
    def test_defaults(self):
        config = MatcherConfig.from_env()
        self.assertIs(config.scoring.policy, ScoringPolicy.STRICT)
        self.assertEqual(config.max_results, 15)
        self.assertIsNone(config.max_workers)
        self.assertIsNone(config.gemini_api_key)
        self.assertEqual(config.gemini_model, "gemini-2.5-flash")

    @patch.dict(os.environ, {
        "QUOTE_MATCHER_POLICY": "lenient",
        "QUOTE_MATCHER_MAX_RESULTS": "5",
        "QUOTE_MATCHER_WORKERS": "4",
        "GEMINI_API_KEY": "secret",
        "QUOTE_MATCHER_GEMINI_MODEL": "gemini-2.0-flash",
    }, clear=True)
    def test_from_env(self):
        config = MatcherConfig.from_env()
        self.assertIs(config.scoring.policy, ScoringPolicy.LENIENT)
        self.assertEqual(config.max_results, 5)
        self.assertEqual(config.max_workers, 4)
        self.assertEqual(config.gemini_api_key, "secret")
        self.assertEqual(config.gemini_model, "gemini-2.0-flash")

    @patch.dict(os.environ, {"QUOTE_MATCHER_MAX_RESULTS": "many", "QUOTE_MATCHER_WORKERS": "0"}, clear=True)
    def test_bad_integers_keep_defaults(self):
        with self.assertLogs("quote_matcher.config", level="WARNING"):
            config = MatcherConfig.from_env()
        self.assertEqual(config.max_results, 15)
        self.assertIsNone(config.max_workers)

    @patch.dict(os.environ, {"QUOTE_MATCHER_POLICY": "fuzzy"}, clear=True)
    def test_unknown_policy(self):
        with self.assertRaises(ValueError):
            MatcherConfig.from_env()

    def test_with_policy(self):
        config = MatcherConfig(max_results=3).with_policy(ScoringPolicy.LENIENT)
        self.assertIs(config.scoring.policy, ScoringPolicy.LENIENT)
        self.assertEqual(config.max_results, 3)


if __name__ == '__main__':
    unittest.main()
