"""
Catalog Loader

Reads a product spreadsheet export (CSV file or URL) and maps its
arbitrarily named columns onto the fixed catalog schema. Header names are
matched exactly first and then by substring, in Portuguese or English.
"""

import logging
import re
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

import pandas as pd
from babel.numbers import NumberFormatError, parse_decimal

from .models import CatalogItem

logger = logging.getLogger(__name__)


TITLE_COLUMNS = ['nome', 'name', 'produto', 'title', 'item', 'descricao', 'descrição']
CODE_COLUMNS = ['codigo', 'código', 'code', 'id', 'ref', 'referencia', 'referência']
PRICE_COLUMNS = ['preco', 'preço', 'price', 'valor', 'cost', 'unitario', 'venda', 'preço venda']
BRAND_COLUMNS = ['marca', 'brand', 'fabricante', 'lab', 'laboratorio', 'mrc']
SUPPLIER_COLUMNS = ['fornecedor', 'supplier', 'distribuidor', 'vendedor', 'empresa', 'origem', 'loja']
CATEGORY_COLUMNS = ['categoria', 'tipo', 'grupo']
DESCRIPTION_COLUMNS = ['detalhes', 'descricao', 'obs']

DEFAULT_TITLE = 'Produto sem nome'
DEFAULT_BRAND = 'Marca não informada'
DEFAULT_SUPPLIER = 'Fornecedor Direto'
DEFAULT_CATEGORY = 'Geral'


class CatalogLoadError(Exception):
    """The catalog source could not be read as a table."""


def find_column(headers: Sequence[str], keywords: Sequence[str]) -> Optional[str]:
    """Pick the header matching any keyword exactly, else the first containing one."""
    for header in headers:
        if any(header == keyword for keyword in keywords):
            return header
    for header in headers:
        if any(keyword in header for keyword in keywords):
            return header
    return None


def parse_price(raw_value: Optional[str]) -> Decimal:
    """Parse "R$ 1.234,56", "1,234.56" or "42.5" into a Decimal; unparseable -> 0."""
    if raw_value is None:
        return Decimal('0')

    cleaned = re.sub(r'[^\d,.]', '', str(raw_value).strip())
    if not cleaned:
        return Decimal('0')

    try:
        value = parse_decimal(cleaned, locale=_price_locale(cleaned))
    except NumberFormatError:
        logger.warning(f"Invalid price format: {raw_value}")
        return Decimal('0')

    logger.debug(f"Parsed price {raw_value!r} -> {value}")
    return value if value >= 0 else Decimal('0')


def _price_locale(cleaned: str) -> str:
    """Pick the locale whose separators fit the number."""
    if ',' in cleaned and '.' in cleaned:
        # "1.234,56" is Brazilian, "1,234.56" is US
        return 'pt_BR' if cleaned.rfind(',') > cleaned.rfind('.') else 'en_US'
    if ',' in cleaned and len(cleaned.split(',')[-1]) <= 2:
        # "123,45"
        return 'pt_BR'
    return 'en_US'


def read_catalog_frame(source: str) -> pd.DataFrame:
    """Read ``source`` (path or URL) as an all-string DataFrame."""
    try:
        frame = pd.read_csv(source, dtype=str, keep_default_na=False, skip_blank_lines=True)
    except (OSError, ValueError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise CatalogLoadError(f"Could not read catalog from {source}: {e}") from e

    if len(frame.columns) and str(frame.columns[0]).strip().lower().startswith('<!doctype html'):
        raise CatalogLoadError("Catalog source returned an HTML page; the sheet is not public or the link expired")
    return frame


def catalog_from_dataframe(frame: pd.DataFrame) -> List[CatalogItem]:
    """Map the rows of ``frame`` onto catalog items."""
    headers = [str(column).strip().lower() for column in frame.columns]
    frame = frame.copy()
    frame.columns = headers

    title_col = find_column(headers, TITLE_COLUMNS)
    code_col = find_column(headers, CODE_COLUMNS)
    price_col = find_column(headers, PRICE_COLUMNS)
    brand_col = find_column(headers, BRAND_COLUMNS)
    supplier_col = find_column(headers, SUPPLIER_COLUMNS)
    category_col = find_column(headers, CATEGORY_COLUMNS)
    description_col = find_column(headers, DESCRIPTION_COLUMNS)
    logger.info(f"Catalog columns: title={title_col}, code={code_col}, price={price_col}, "
                f"supplier={supplier_col}")

    items = []
    for index, row in enumerate(frame.itertuples(index=False, name=None)):
        raw: Dict[str, str] = {header: _cell(value) for header, value in zip(headers, row)}
        if not any(raw.values()):
            continue

        def field_value(column: Optional[str]) -> str:
            return raw.get(column, '').strip() if column else ''

        first_value = _cell(row[0]).strip() if row else ''
        items.append(CatalogItem(
            id=f"prod-{index}",
            title=field_value(title_col) or first_value or DEFAULT_TITLE,
            code=field_value(code_col) or f"REF-{index}",
            price=parse_price(field_value(price_col)),
            supplier=field_value(supplier_col) or DEFAULT_SUPPLIER,
            category=field_value(category_col) or DEFAULT_CATEGORY,
            brand=field_value(brand_col) or DEFAULT_BRAND,
            description=field_value(description_col),
            raw=raw,
        ))

    return items


def load_catalog(source: str) -> List[CatalogItem]:
    """Load the catalog; an unreadable source yields an empty catalog."""
    try:
        frame = read_catalog_frame(source)
    except CatalogLoadError as e:
        logger.error(f"❌ {e}")
        return []

    items = catalog_from_dataframe(frame)
    logger.info(f"✅ Loaded {len(items)} catalog items from {source}")
    return items


def _cell(value) -> str:
    if value is None:
        return ''
    if isinstance(value, float) and pd.isna(value):
        return ''
    return str(value)
