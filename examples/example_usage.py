#!/usr/bin/env python3
"""
Example usage of the Instrument Quote Matcher
Demonstrates ranking and quotation building with a small in-memory catalog.
"""

import json
import sys
from decimal import Decimal
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from quote_matcher import CatalogItem, Ranker, quote_from_text


def create_sample_catalog():
    """Create a sample catalog for demonstration."""
    rows = [
        ("AF-16", "Afastador Senn Mueller 16cm", "42.50", "Cirurgica Brasil"),
        ("AF-FB12", "Afastador Farabeuf 12cm", "38.00", "MedSupply"),
        ("TM-R17", "Tesoura Mayo Reta 17cm", "30.00", "MedSupply"),
        ("TM-C17", "Tesoura Mayo Curva 17cm", "32.00", "Cirurgica Brasil"),
        ("BS-15", "Bisturi Descartavel n 15", "2.00", "MedSupply"),
        ("CB-4", "Cabo para Bisturi n 4", "25.00", "Cirurgica Brasil"),
    ]
    return [
        CatalogItem(id=f"prod-{i}", code=code, title=title, price=Decimal(price), supplier=supplier)
        for i, (code, title, price, supplier) in enumerate(rows)
    ]


def create_sample_request():
    """Create a sample pasted request."""
    return """Bom dia, segue a lista:
    - AFASTADOR SEMM MUELLER 16CM 4
    - 2x Tesoura Mayo
    - Cabo para bisturi
    - Cureta de Volkmann 2
    Obrigado"""


def demonstrate_ranking(catalog):
    """Show the ranked candidates for a few requests."""
    print("=" * 60)
    print("DEMONSTRATION: Ranking")
    print("=" * 60)

    ranker = Ranker()
    for query in ["AFASTADOR SEMM MUELLER 16CM", "bisturi", "Cabo para bisturi"]:
        print(f"\n{query}:")
        for candidate in ranker.rank(catalog, query):
            print(f"  {candidate.score:8.0f}  {candidate.item.title}")


def demonstrate_quotation(catalog):
    """Build a quotation, override a line and print the totals."""
    print("\n" + "=" * 60)
    print("DEMONSTRATION: Quotation")
    print("=" * 60)

    quotation = quote_from_text(create_sample_request(), catalog)
    print(json.dumps(quotation.to_dict(), indent=2, ensure_ascii=False))

    # Swap the straight scissors for the curved ones
    quotation.set_selection(1, "prod-3", 2)
    print(f"\nTotal after override: {quotation.total()}")
    for supplier in quotation.suppliers():
        print(f"  {supplier}: {quotation.total(supplier)}")


def main():
    catalog = create_sample_catalog()
    demonstrate_ranking(catalog)
    demonstrate_quotation(catalog)


if __name__ == "__main__":
    main()
