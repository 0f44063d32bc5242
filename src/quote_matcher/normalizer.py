"""
Text normalization shared by query terms and catalog titles.
"""

import re
from typing import List, Optional

from unidecode import unidecode

_NON_ALNUM = re.compile(r'[^a-z0-9]')
_WHITESPACE = re.compile(r'\s+')


def normalize(text: Optional[str]) -> str:
    """Canonicalize text into a lowercase, accent-free, space-delimited string.

    "Pinça  Kelly-Curva 14cm" -> "pinca kelly curva 14cm"
    """
    if not text:
        return ""

    # unidecode folds accents and symbols such as "º" to plain ASCII
    folded = unidecode(str(text)).lower()
    spaced = _NON_ALNUM.sub(" ", folded)
    return _WHITESPACE.sub(" ", spaced).strip()


def tokenize(text: Optional[str]) -> List[str]:
    """Normalize text and split it into tokens."""
    normalized = normalize(text)
    return normalized.split(" ") if normalized else []
