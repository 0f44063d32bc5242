"""
Item Extraction

Turns a pasted request ("Bom dia, segue a lista: ...") into (name, quantity)
terms. Two extractors are provided: a rule-based one that works offline and
a Gemini-backed one. Whatever extractor is used, the quotation pipeline goes
through extract_items_with_fallback, which degrades to a plain line/comma
split instead of failing.
"""

import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, List, Optional

from google import genai
from google.genai import types

from .models import QueryTerm
from .normalizer import normalize

logger = logging.getLogger(__name__)


class ExtractionError(Exception):
    """Raised when an extractor cannot produce a usable item list."""


class ItemExtractor(ABC):
    """Anything that turns free text into a list of query terms."""

    @abstractmethod
    def extract(self, text: str) -> List[QueryTerm]:
        raise NotImplementedError


def naive_split(text: str) -> List[QueryTerm]:
    """Last-resort split on line breaks and commas, quantity 1 each."""
    return [
        QueryTerm(text=part.strip(), quantity=1)
        for part in re.split(r'[\n,]+', text or "")
        if part.strip()
    ]


class SimpleItemExtractor(ItemExtractor):
    """Rule-based extractor for pasted instrument lists."""

    def __init__(self):
        # Split on newlines/semicolons, and on commas unless they sit inside a number ("16,5cm")
        self.separator_pattern = re.compile(r'[\r\n;]+|(?<!\d),|,(?!\d)')

        self.bullet_pattern = re.compile(r'^\s*(?:[-*•·>]+|\d{1,3}[.)])\s+')

        # Greetings, sign-offs and filler that never name a product
        self.chatter_pattern = re.compile(
            r'^(?:ola|oi|bom dia|boa tarde|boa noite|prezad[oa]s?|'
            r'segue[m]?|favor cotar|'
            r'obrigad[oa]|grat[oa]|att|atenciosamente|abracos?|abs|'
            r'hello|hi|dear|thanks|thank you|best regards|regards|cheers)\b'
        )

        self.explicit_quantity_pattern = re.compile(
            r'\b(?:qtd|qtde|qty|quant|quantidade|quantity)\.?\s*[:=]?\s*(\d+)\b',
            re.IGNORECASE,
        )

        unit = r'(?:x|un|und|unid|unidades?|pcs?|p[çc]s|pe[çc]as?|cx|caixas?)'
        self.leading_quantity_pattern = re.compile(
            r'^(\d{1,5})\s*' + unit + r'?\.?\s+(?!(?:cm|mm|m|ml|fr|ch)\b)(.+)$',
            re.IGNORECASE,
        )
        self.trailing_quantity_pattern = re.compile(
            r'^(.+?)[\s\-:]+(\d{1,5})\s*' + unit + r'?\.?$',
            re.IGNORECASE,
        )
        # A number right after these is a size or model number, not a quantity
        self.size_markers = {'n', 'no', 'nr', 'numero', 'tam', 'tamanho', 'mod', 'modelo', 'ref'}

    def extract(self, text: str) -> List[QueryTerm]:
        terms = []
        for chunk in self.separator_pattern.split(text or ""):
            term = self.parse_line(chunk)
            if term:
                terms.append(term)
        logger.info(f"Extracted {len(terms)} items from request text")
        return terms

    def parse_line(self, line: str) -> Optional[QueryTerm]:
        """Parse one request line into a term, or None for chatter/blank lines."""
        line = self.bullet_pattern.sub('', line or '').strip()
        if ':' in line:
            # "segue a lista: Pinça Kelly 2"
            head, tail = line.split(':', 1)
            if tail.strip() and self.is_chatter(head):
                line = tail.strip()
        if not line or self.is_chatter(line):
            return None

        quantity = 1
        explicit = self.explicit_quantity_pattern.search(line)
        if explicit:
            quantity = int(explicit.group(1))
            line = (line[:explicit.start()] + line[explicit.end():]).strip()
        else:
            leading = self.leading_quantity_pattern.match(line)
            trailing = self.trailing_quantity_pattern.match(line)
            if leading:
                quantity = int(leading.group(1))
                line = leading.group(2)
            elif trailing and not self._follows_size_marker(trailing.group(1)):
                quantity = int(trailing.group(2))
                line = trailing.group(1)

        name = re.sub(r'\s+', ' ', line).strip(' -:;.')
        if not normalize(name):
            return None
        return QueryTerm(text=name, quantity=max(1, quantity))

    def is_chatter(self, line: str) -> bool:
        normalized = normalize(line)
        if not normalized:
            return True
        return bool(self.chatter_pattern.match(normalized))

    def _follows_size_marker(self, head: str) -> bool:
        tokens = normalize(head).split(" ")
        return bool(tokens) and tokens[-1] in self.size_markers


EXTRACTION_PROMPT = """Extract a list of surgical/medical instruments and supplies from this text: "{text}".

CRITICAL INSTRUCTIONS:
1. IGNORE greetings, sign-offs, and conversational phrases.
2. PRESERVE specific names like "Clips Mayo", "Afastador Sen Muller", "Pinça Kelly". Do NOT remove words like "Clips" or "Mayo".
3. For each item, extract PRODUCT NAME and QUANTITY.
4. If a number follows a product name (e.g., "Mayo clips 2"), that is the quantity.
5. If no quantity is specified, return 1.
6. If multiple items are listed, return each one.

Format: JSON array of objects with "name" and "quantity"."""


class GeminiItemExtractor(ItemExtractor):
    """Extracts items with a Gemini model returning structured JSON."""

    def __init__(self, api_key: str, model: str = "gemini-2.5-flash", client: Any = None):
        if not api_key and client is None:
            raise ValueError("A Gemini API key is required")
        self.model = model
        self.client = client or genai.Client(api_key=api_key)

    def extract(self, text: str) -> List[QueryTerm]:
        response = self.client.models.generate_content(
            model=self.model,
            contents=EXTRACTION_PROMPT.format(text=text),
            config=types.GenerateContentConfig(
                temperature=0.0,
                response_mime_type="application/json",
                response_schema=types.Schema(
                    type=types.Type.ARRAY,
                    items=types.Schema(
                        type=types.Type.OBJECT,
                        properties={
                            "name": types.Schema(type=types.Type.STRING),
                            "quantity": types.Schema(type=types.Type.NUMBER),
                        },
                        required=["name", "quantity"],
                    ),
                ),
            ),
        )
        return parse_extracted_items(getattr(response, "text", None))


def parse_extracted_items(payload: Optional[str]) -> List[QueryTerm]:
    """Convert a model's JSON answer into query terms."""
    if not payload:
        raise ExtractionError("Empty response from extractor")

    clean = payload.strip()
    if clean.startswith("```"):
        clean = clean.strip("`")
        if clean.startswith("json"):
            clean = clean[4:]

    try:
        data = json.loads(clean)
    except json.JSONDecodeError as e:
        raise ExtractionError(f"Extractor returned invalid JSON: {e}")

    if not isinstance(data, list):
        raise ExtractionError("Extractor response is not a JSON array")

    terms = []
    for entry in data:
        if not isinstance(entry, dict):
            continue
        name = str(entry.get("name") or "").strip()
        if not name:
            continue
        terms.append(QueryTerm(text=name, quantity=_coerce_quantity(entry.get("quantity"))))
    return terms


def _coerce_quantity(value: Any) -> int:
    try:
        quantity = int(round(float(value)))
    except (TypeError, ValueError, OverflowError):
        return 1
    return quantity if quantity >= 1 else 1


def extract_items_with_fallback(text: str, extractor: Optional[ItemExtractor] = None) -> List[QueryTerm]:
    """Run ``extractor`` and fall back to a naive split if it fails or finds nothing."""
    if not text or not text.strip():
        return []

    extractor = extractor or SimpleItemExtractor()
    try:
        terms = extractor.extract(text)
    except Exception as e:
        logger.warning(f"Item extraction failed ({type(e).__name__}: {e}), using line split")
        return naive_split(text)

    if not terms:
        logger.warning("Extractor found no items, using line split")
        return naive_split(text)
    return terms
