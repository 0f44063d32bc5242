#!/usr/bin/env python3
"""
Tests for request item extraction.
"""

import json
import unittest
from types import SimpleNamespace
from unittest.mock import MagicMock

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from quote_matcher.extractor import (
    ExtractionError,
    GeminiItemExtractor,
    SimpleItemExtractor,
    extract_items_with_fallback,
    naive_split,
    parse_extracted_items,
)
from quote_matcher.models import QueryTerm


class TestSimpleItemExtractor(unittest.TestCase):
    """Test cases for the rule-based extractor."""

    def setUp(self):
        self.extractor = SimpleItemExtractor()

    def test_parse_line(self):
        cases = [
            ("Pinça Kelly Curva 14cm", QueryTerm("Pinça Kelly Curva 14cm", 1)),
            ("Tesoura Mayo 2", QueryTerm("Tesoura Mayo", 2)),
            ("Tesoura Mayo - 4 un", QueryTerm("Tesoura Mayo", 4)),
            ("3x Pinça Kelly", QueryTerm("Pinça Kelly", 3)),
            ("10 unid Cureta de Volkmann", QueryTerm("Cureta de Volkmann", 10)),
            ("Afastador Farabeuf qtd: 6", QueryTerm("Afastador Farabeuf", 6)),
            ("- Bisturi Descartavel n 15", QueryTerm("Bisturi Descartavel n 15", 1)),
            ("2. Cabo para Bisturi n 4", QueryTerm("Cabo para Bisturi n 4", 1)),
            ("Lamina tamanho 11", QueryTerm("Lamina tamanho 11", 1)),
        ]
        for line, expected in cases:
            with self.subTest(line=line):
                self.assertEqual(self.extractor.parse_line(line), expected)

    def test_size_prefix_is_not_a_quantity(self):
        self.assertEqual(self.extractor.parse_line("16 cm afastador"), QueryTerm("16 cm afastador", 1))

    def test_chatter_is_dropped(self):
        for line in ["Bom dia", "Olá, tudo bem", "Obrigado!", "Atenciosamente", "Best regards", "", "   ", "---"]:
            with self.subTest(line=line):
                self.assertIsNone(self.extractor.parse_line(line))

    def test_chatter_prefix_keeps_items(self):
        self.assertEqual(
            self.extractor.parse_line("Segue a lista: Pinça Kelly 2"),
            QueryTerm("Pinça Kelly", 2),
        )

    def test_extract_full_request(self):
        text = (
            "Bom dia, prezados\n"
            "Segue a lista:\n"
            "- AFASTADOR SEMM MUELLER 16CM 4\n"
            "- Cureta de Volkmann; Tesoura Mayo 2\n"
            "Pinça Kelly 16,5cm\n"
            "Obrigado, att"
        )
        terms = self.extractor.extract(text)
        self.assertEqual(terms, [
            QueryTerm("AFASTADOR SEMM MUELLER 16CM", 4),
            QueryTerm("Cureta de Volkmann", 1),
            QueryTerm("Tesoura Mayo", 2),
            QueryTerm("Pinça Kelly 16,5cm", 1),
        ])

    def test_extract_empty(self):
        self.assertEqual(self.extractor.extract(""), [])


class TestFallback(unittest.TestCase):
    """Test cases for extract_items_with_fallback()."""

    def test_naive_split(self):
        self.assertEqual(
            naive_split("Tesoura Mayo, Pinça Kelly\n\nCureta"),
            [QueryTerm("Tesoura Mayo"), QueryTerm("Pinça Kelly"), QueryTerm("Cureta")],
        )

    def test_blank_text(self):
        extractor = MagicMock()
        self.assertEqual(extract_items_with_fallback("  \n ", extractor), [])
        extractor.extract.assert_not_called()

    def test_failure_uses_naive_split(self):
        extractor = MagicMock()
        extractor.extract.side_effect = ExtractionError("bad json")
        self.assertEqual(
            extract_items_with_fallback("Tesoura Mayo 2, Pinça Kelly", extractor),
            [QueryTerm("Tesoura Mayo 2"), QueryTerm("Pinça Kelly")],
        )

    def test_empty_result_uses_naive_split(self):
        extractor = MagicMock()
        extractor.extract.return_value = []
        self.assertEqual(extract_items_with_fallback("Tesoura Mayo", extractor), [QueryTerm("Tesoura Mayo")])

    def test_default_extractor(self):
        self.assertEqual(extract_items_with_fallback("Tesoura Mayo 2"), [QueryTerm("Tesoura Mayo", 2)])


class TestParseExtractedItems(unittest.TestCase):
    """Test cases for parse_extracted_items()."""

    def test_valid_payload(self):
        payload = json.dumps([
            {"name": "Clips Mayo", "quantity": 2},
            {"name": "Afastador Sen Muller", "quantity": "3"},
            {"name": "Pinça Kelly", "quantity": None},
            {"name": "Cureta", "quantity": 0},
            {"name": "", "quantity": 5},
            "not an object",
        ])
        self.assertEqual(parse_extracted_items(payload), [
            QueryTerm("Clips Mayo", 2),
            QueryTerm("Afastador Sen Muller", 3),
            QueryTerm("Pinça Kelly", 1),
            QueryTerm("Cureta", 1),
        ])

    def test_code_fence(self):
        payload = '```json\n[{"name": "Tesoura Mayo", "quantity": 1.0}]\n```'
        self.assertEqual(parse_extracted_items(payload), [QueryTerm("Tesoura Mayo", 1)])

    def test_invalid_payloads(self):
        for payload in [None, "", "not json", '{"name": "Tesoura"}']:
            with self.subTest(payload=payload):
                with self.assertRaises(ExtractionError):
                    parse_extracted_items(payload)


class TestGeminiItemExtractor(unittest.TestCase):
    """Test cases for the Gemini-backed extractor."""

    def test_extract_uses_client(self):
        client = MagicMock()
        client.models.generate_content.return_value = SimpleNamespace(
            text='[{"name": "Afastador Senn Mueller 16cm", "quantity": 4}]'
        )
        extractor = GeminiItemExtractor(api_key="test-key", model="test-model", client=client)

        terms = extractor.extract("Bom dia, 4 afastadores senn mueller 16cm")

        self.assertEqual(terms, [QueryTerm("Afastador Senn Mueller 16cm", 4)])
        kwargs = client.models.generate_content.call_args.kwargs
        self.assertEqual(kwargs["model"], "test-model")
        self.assertIn("4 afastadores senn mueller 16cm", kwargs["contents"])

    def test_empty_response_falls_back(self):
        client = MagicMock()
        client.models.generate_content.return_value = SimpleNamespace(text=None)
        extractor = GeminiItemExtractor(api_key="test-key", client=client)

        with self.assertRaises(ExtractionError):
            extractor.extract("Tesoura Mayo")
        self.assertEqual(extract_items_with_fallback("Tesoura Mayo", extractor), [QueryTerm("Tesoura Mayo")])

    def test_missing_key(self):
        with self.assertRaises(ValueError):
            GeminiItemExtractor(api_key="")


if __name__ == '__main__':
    unittest.main()
