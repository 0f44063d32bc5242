#!/usr/bin/env python3
"""
Tests for the command line interface.
"""

import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from quote_matcher.cli import cli


CATALOG_CSV = (
    "Código,Nome,Preço,Fornecedor\n"
    "AF-16,Afastador Senn Mueller 16cm,\"R$ 42,50\",Cirurgica Brasil\n"
    "TM-R17,Tesoura Mayo Reta 17cm,30.00,MedSupply\n"
    "PK-C14,Pinça Kelly Curva 14cm,\"20,00\",MedSupply\n"
)

REQUEST = "Bom dia, segue a lista:\nAFASTADOR SEMM MUELLER 16CM 4\nCureta de Volkmann 2\nObrigado\n"


class TestCLI(unittest.TestCase):
    """Test cases for the quote and search commands."""

    def setUp(self):
        self.runner = CliRunner()
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.catalog = str(Path(self.tmp.name) / "catalog.csv")
        Path(self.catalog).write_text(CATALOG_CSV, encoding="utf-8")

    @patch.dict(os.environ, {"GEMINI_API_KEY": ""})
    def test_quote_writes_json(self):
        request = Path(self.tmp.name) / "request.txt"
        request.write_text(REQUEST, encoding="utf-8")
        output = Path(self.tmp.name) / "quote.json"

        result = self.runner.invoke(cli, ["quote", self.catalog, str(request), "-o", str(output)])

        self.assertEqual(result.exit_code, 0, result.output)
        data = json.loads(output.read_text(encoding="utf-8"))
        self.assertEqual(data["total"], "170.00")
        self.assertEqual(data["summary"], {"exact": 0, "similar": 1, "notFound": 1})
        self.assertEqual([line["requested"] for line in data["lines"]],
                         ["AFASTADOR SEMM MUELLER 16CM", "Cureta de Volkmann"])

    def test_quote_from_stdin_with_supplier(self):
        output = Path(self.tmp.name) / "quote.json"
        result = self.runner.invoke(
            cli,
            ["quote", self.catalog, "--supplier", "MedSupply", "-o", str(output)],
            input="Tesoura Mayo 2\nAFASTADOR SEMM MUELLER 16CM\n",
        )

        self.assertEqual(result.exit_code, 0, result.output)
        data = json.loads(output.read_text(encoding="utf-8"))
        self.assertEqual(data["supplier"], "MedSupply")
        self.assertEqual(data["total"], "60.00")
        self.assertEqual(len(data["lines"]), 1)

    @patch.dict(os.environ, {"GEMINI_API_KEY": ""})
    def test_gemini_without_key_is_usage_error(self):
        result = self.runner.invoke(cli, ["quote", self.catalog, "--use-gemini"], input="Tesoura Mayo\n")
        self.assertEqual(result.exit_code, 2)

    def test_search(self):
        result = self.runner.invoke(cli, ["search", self.catalog, "tesoura mayo"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("TM-R17", result.output)

    def test_search_explain_and_policy(self):
        result = self.runner.invoke(cli, ["search", self.catalog, "pinca mayo", "--policy", "lenient", "--explain"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("complete=", result.output)

    def test_search_without_candidates(self):
        result = self.runner.invoke(cli, ["search", self.catalog, "cureta de volkmann"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("No candidates found", result.output)

    def test_invalid_policy(self):
        result = self.runner.invoke(cli, ["search", self.catalog, "tesoura", "--policy", "fuzzy"])
        self.assertNotEqual(result.exit_code, 0)


if __name__ == '__main__':
    unittest.main()
