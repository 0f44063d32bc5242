"""
Quotation Aggregator

Turns a list of requested terms into a multi-line quotation: one ranked
line per term, a default pick per line, operator overrides, supplier
filtering and totals.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .extractor import ItemExtractor, extract_items_with_fallback
from .models import (
    CatalogItem,
    LineResult,
    MatchClassification,
    QueryTerm,
    QuotationRow,
    QuotationSummary,
    Selection,
)
from .normalizer import normalize
from .ranker import Ranker

logger = logging.getLogger(__name__)


def clamp_quantity(value: Any) -> int:
    """Coerce operator input to a quantity of at least 1."""
    try:
        quantity = int(value)
    except (TypeError, ValueError, OverflowError):
        return 1
    return max(1, quantity)


class Quotation:
    """
    Quotation state for one catalog snapshot.

    Every call to build_quotation starts from scratch: previous lines and
    overrides are discarded. Each line holds at most one override; a line
    without one uses its top-ranked candidate at the requested quantity.
    """

    def __init__(self, catalog: Sequence[CatalogItem], ranker: Optional[Ranker] = None):
        self.catalog = list(catalog)
        self.ranker = ranker or Ranker()
        self.lines: List[LineResult] = []
        self._selections: List[Optional[Selection]] = []

    def build_quotation(self, terms: Sequence[QueryTerm]) -> List[LineResult]:
        """Rank every term and auto-select the best match of each line."""
        self.lines = []
        self._selections = []

        for term in terms:
            candidates = self.ranker.rank(self.catalog, term.text)
            self.lines.append(LineResult(term=term, candidates=candidates))
            if candidates:
                self._selections.append(Selection(item_id=candidates[0].item.id, quantity=term.quantity))
            else:
                self._selections.append(None)

        summary = self.summary()
        logger.info(f"Quotation built: {summary.exact} exact, {summary.similar} similar, "
                    f"{summary.not_found} not found")
        return self.lines

    def set_selection(self, line_index: int, item_id: str, quantity: Any = 1) -> Selection:
        """Make ``item_id`` the line's pick, replacing any earlier one."""
        line = self._line(line_index)
        if line.find_item(item_id) is None:
            raise ValueError(f"Item {item_id} is not a candidate for line {line_index}")
        selection = Selection(item_id=item_id, quantity=clamp_quantity(quantity))
        self._selections[line_index] = selection
        return selection

    def clear_selection(self, line_index: int) -> None:
        """Drop the line's override so the default pick applies again."""
        self._line(line_index)
        self._selections[line_index] = None

    def effective_selection(self, line_index: int) -> Tuple[Optional[CatalogItem], int]:
        line = self._line(line_index)
        selection = self._selections[line_index]
        if selection is not None:
            item = line.find_item(selection.item_id)
            if item is not None:
                return item, selection.quantity
        top = line.top_candidate
        if top is not None:
            return top.item, line.requested_quantity
        return None, line.requested_quantity

    def line_total(self, line_index: int) -> Decimal:
        item, quantity = self.effective_selection(line_index)
        if item is None:
            return Decimal('0')
        return (item.price or Decimal('0')) * quantity

    def total(self, supplier: Optional[str] = None) -> Decimal:
        """Sum of price x quantity over lines whose pick matches ``supplier``."""
        total = Decimal('0')
        for index in range(len(self.lines)):
            item, _ = self.effective_selection(index)
            if item is None or not _matches_supplier(item, supplier):
                continue
            total += self.line_total(index)
        return total

    def match_classification(self, line_index: int) -> MatchClassification:
        line = self._line(line_index)
        item, _ = self.effective_selection(line_index)
        if item is None:
            return MatchClassification.NOT_FOUND
        if normalize(item.title) == normalize(line.term.text):
            return MatchClassification.EXACT
        return MatchClassification.SIMILAR

    def summary(self) -> QuotationSummary:
        summary = QuotationSummary()
        for index in range(len(self.lines)):
            classification = self.match_classification(index)
            if classification is MatchClassification.EXACT:
                summary.exact += 1
            elif classification is MatchClassification.SIMILAR:
                summary.similar += 1
            else:
                summary.not_found += 1
        return summary

    def suppliers(self) -> List[str]:
        return sorted({item.supplier for item in self.catalog if item.supplier})

    def export_rows(self, supplier: Optional[str] = None) -> List[QuotationRow]:
        """Rows for a tabular export; with a supplier, only lines picked from it."""
        rows = []
        for index, line in enumerate(self.lines):
            item, quantity = self.effective_selection(index)
            if supplier is not None and (item is None or not _matches_supplier(item, supplier)):
                continue
            unit_price = (item.price or Decimal('0')) if item else Decimal('0')
            rows.append(QuotationRow(
                classification=self.match_classification(index),
                term=line.term.text,
                code=item.code if item else '',
                title=item.title if item else '',
                supplier=item.supplier if item else '',
                quantity=quantity,
                unit_price=_money(unit_price),
                line_total=_money(unit_price * quantity),
            ))
        return rows

    def to_dict(self, supplier: Optional[str] = None) -> Dict[str, Any]:
        """JSON-safe view of the quotation."""
        summary = self.summary()
        return {
            "supplier": supplier,
            "lines": [row.to_dict() for row in self.export_rows(supplier)],
            "total": str(_money(self.total(supplier))),
            "summary": {
                "exact": summary.exact,
                "similar": summary.similar,
                "notFound": summary.not_found,
            },
        }

    def _line(self, line_index: int) -> LineResult:
        if not 0 <= line_index < len(self.lines):
            raise IndexError(f"No quotation line {line_index} (have {len(self.lines)})")
        return self.lines[line_index]


def _matches_supplier(item: CatalogItem, supplier: Optional[str]) -> bool:
    return supplier is None or item.supplier == supplier


def _money(amount: Decimal) -> Decimal:
    return amount.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)


def quote_from_text(
    raw_text: str,
    catalog: Sequence[CatalogItem],
    extractor: Optional[ItemExtractor] = None,
    ranker: Optional[Ranker] = None,
) -> Quotation:
    """Extract the requested items from ``raw_text`` and build a quotation."""
    terms = extract_items_with_fallback(raw_text, extractor)
    quotation = Quotation(catalog, ranker=ranker)
    quotation.build_quotation(terms)
    return quotation
