"""
Data models for the Instrument Quote Matcher.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Dict, Mapping, Optional, Tuple


@dataclass(frozen=True)
class CatalogItem:
    """A purchasable product entry from the supply catalog.

    ``raw`` keeps the original column values of the source row. It is
    carried along for export and debugging and never used for scoring.
    """
    id: str
    title: str
    code: str = ""
    price: Optional[Decimal] = None
    supplier: str = ""
    category: str = ""
    brand: str = ""
    description: str = ""
    raw: Mapping[str, str] = field(default_factory=dict, compare=False, hash=False, repr=False)

    def __post_init__(self):
        # Loaders may hand over floats or strings; totals are Decimal arithmetic
        if self.price is not None and not isinstance(self.price, Decimal):
            object.__setattr__(self, "price", Decimal(str(self.price)))


@dataclass(frozen=True)
class QueryTerm:
    """One requested item: the extracted name and how many units are wanted."""
    text: str
    quantity: int = 1

    def __post_init__(self):
        # Quantities below one are meaningless on a quotation line
        try:
            quantity = int(round(float(self.quantity)))
        except (TypeError, ValueError, OverflowError):
            quantity = 1
        object.__setattr__(self, "quantity", max(1, quantity))


@dataclass(frozen=True)
class CandidateMatch:
    """A catalog item scored positively against a query term."""
    item: CatalogItem
    score: float


@dataclass(frozen=True)
class Selection:
    """The operator's choice for one line."""
    item_id: str
    quantity: int


@dataclass
class LineResult:
    """Ranked candidates for a single query term."""
    term: QueryTerm
    candidates: Tuple[CandidateMatch, ...] = ()

    @property
    def requested_quantity(self) -> int:
        return self.term.quantity

    @property
    def top_candidate(self) -> Optional[CandidateMatch]:
        return self.candidates[0] if self.candidates else None

    def find_item(self, item_id: str) -> Optional[CatalogItem]:
        for candidate in self.candidates:
            if candidate.item.id == item_id:
                return candidate.item
        return None


class MatchClassification(Enum):
    """How well the effective item of a line matches what was asked for."""
    EXACT = "exact"
    SIMILAR = "similar"
    NOT_FOUND = "not_found"


@dataclass
class QuotationRow:
    """One exportable line of a quotation."""
    classification: MatchClassification
    term: str
    code: str
    title: str
    supplier: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal

    def to_dict(self) -> Dict[str, str]:
        return {
            "status": self.classification.value,
            "requested": self.term,
            "code": self.code,
            "title": self.title,
            "supplier": self.supplier,
            "quantity": str(self.quantity),
            "unitPrice": str(self.unit_price),
            "lineTotal": str(self.line_total),
        }


@dataclass
class QuotationSummary:
    """Match statistics for a generated quotation."""
    exact: int = 0
    similar: int = 0
    not_found: int = 0

    @property
    def total_lines(self) -> int:
        return self.exact + self.similar + self.not_found
