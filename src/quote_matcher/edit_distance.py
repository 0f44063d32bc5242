"""
Bounded Levenshtein matching for misspelled instrument names.
"""

from Levenshtein import distance


def levenshtein(a: str, b: str) -> int:
    """Classic edit distance; insert, delete and substitute each cost 1."""
    if a == b:
        return 0
    return int(distance(a, b))


def distance_threshold(token: str, long_token_length: int = 5) -> int:
    """Allowed distance for ``token``: 1 for short tokens, 2 for long ones."""
    return 2 if len(token) > long_token_length else 1
