"""
Thesaurus of surgical instrument vocabulary.

Maps canonical terms to the spelling variants, abbreviations and foreign
synonyms that show up in purchase requests, and carries the auxiliary word
sets used to weight query tokens.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Mapping, Optional

from .normalizer import normalize


DEFAULT_SYNONYMS: Dict[str, Iterable[str]] = {
    # Instrument types
    'afastador': ['afastador', 'afastadores', 'afast', 'retractor', 'retrator'],
    'pinca': ['pinca', 'pinça', 'pincas', 'forceps', 'clamp'],
    'tesoura': ['tesoura', 'tesouras', 'tes', 'scissors'],
    'porta': ['porta', 'needle', 'holder'],
    'agulha': ['agulha', 'agulhas', 'needle'],
    'cabo': ['cabo', 'handle'],
    'bisturi': ['bisturi', 'bist', 'scalpel'],
    'lamina': ['lamina', 'lâmina', 'laminas', 'blade'],
    'cureta': ['cureta', 'curetas', 'curette'],
    'espatula': ['espatula', 'espátula', 'spatula'],
    'descolador': ['descolador', 'elevator'],
    'clipe': ['clipe', 'clips', 'clip'],
    'clips': ['clips', 'clipe', 'clip'],
    # Named instruments
    'volkmann': ['volkmann', 'volkman', 'wulkman', 'vulkman', 'vulkmann'],
    'senn': ['senn', 'sen', 'semm', 'sem'],
    'mueller': ['mueller', 'muller', 'müller', 'mulir', 'muler'],
    'metzenbaum': ['metzenbaum', 'metz', 'metzebaum'],
    'mayo': ['mayo', 'maio'],
    'kelly': ['kelly', 'kely'],
    'gelpi': ['gelpi', 'gelpy', 'gelp'],
    'farabeuf': ['farabeuf', 'farabef', 'farabeu'],
    'hegar': ['hegar', 'hegard'],
    'kocher': ['kocher', 'kosher', 'kocker'],
    'crile': ['crile', 'craile'],
    'adson': ['adson', 'adison'],
    'allis': ['allis', 'alis'],
    'babcock': ['babcock', 'babcok', 'babkock'],
    'backhaus': ['backhaus', 'backaus', 'bakhaus'],
    'halsted': ['halsted', 'halstead'],
    'balfour': ['balfour', 'balfur'],
    'deaver': ['deaver', 'dever'],
    'langenbeck': ['langenbeck', 'langembeck', 'langenbek'],
    'hohmann': ['hohmann', 'hohman', 'homann'],
    # Shapes
    'reto': ['reto', 'reta', 'straight'],
    'curvo': ['curvo', 'curva', 'curved'],
    'delicado': ['delicado', 'delicada', 'delicate'],
}

DEFAULT_STOP_WORDS = frozenset([
    'de', 'da', 'do', 'das', 'dos', 'e', 'em', 'com', 'para', 'p', 'a', 'o',
    'as', 'os', 'the', 'for', 'with', 'of', 'and', 'cm', 'mm', 'un', 'und',
    'unid', 'unidade', 'unidades', 'pc', 'pcs', 'peca', 'pecas', 'cx',
    'caixa', 'pct', 'pacote', 'x', 'n', 'no', 'nr', 'num', 'tipo', 'modelo',
    'ref',
])

DEFAULT_CATEGORY_TERMS = frozenset([
    'afastador', 'pinca', 'tesoura', 'porta', 'agulha', 'cabo', 'bisturi',
    'lamina', 'cureta', 'espatula', 'descolador', 'clipe', 'clips',
    'dilatador', 'aspirador', 'cuba', 'bandeja', 'martelo', 'osteotomo',
    'rugina', 'tentacanula', 'estilete', 'sonda', 'trocater', 'valva',
    'especulo', 'retractor', 'forceps', 'scissors', 'clamp', 'handle',
    'needle', 'holder', 'scalpel', 'blade', 'elevator',
])

DEFAULT_ACCESSORY_TERMS = frozenset([
    'cabo', 'capa', 'suporte', 'para', 'p', 'handle', 'cover', 'estojo',
])

DEFAULT_ACCESSORY_ANCHORS = frozenset([
    'cabo', 'capa', 'suporte', 'handle', 'cover', 'estojo',
])


def _normalized_set(words: Iterable[str]) -> FrozenSet[str]:
    return frozenset(w for w in (normalize(word) for word in words) if w)


@dataclass(frozen=True)
class Thesaurus:
    """Immutable vocabulary injected into the scorer.

    ``synonyms`` maps a canonical key to every accepted surface form of it.
    A surface form listed under several keys resolves to the union of those
    groups, so "semm" resolves to the "senn" group just like "senn" does.
    """
    synonyms: Mapping[str, FrozenSet[str]] = field(default_factory=dict)
    stop_words: FrozenSet[str] = frozenset()
    category_terms: FrozenSet[str] = frozenset()
    accessory_terms: FrozenSet[str] = frozenset()
    accessory_anchors: FrozenSet[str] = frozenset()

    def __post_init__(self):
        index: Dict[str, FrozenSet[str]] = {}
        for key, forms in self.synonyms.items():
            group = frozenset(forms) | {key}
            for form in group:
                index[form] = index.get(form, frozenset()) | group
        object.__setattr__(self, '_index', index)

    @classmethod
    def from_mapping(
        cls,
        synonyms: Mapping[str, Iterable[str]],
        stop_words: Iterable[str] = (),
        category_terms: Iterable[str] = (),
        accessory_terms: Iterable[str] = (),
        accessory_anchors: Iterable[str] = (),
    ) -> 'Thesaurus':
        """Build a thesaurus from plain strings, normalizing every entry."""
        normalized: Dict[str, FrozenSet[str]] = {}
        for key, forms in synonyms.items():
            canonical = normalize(key)
            if not canonical:
                continue
            normalized[canonical] = normalized.get(canonical, frozenset()) | _normalized_set(forms)
        return cls(
            synonyms=normalized,
            stop_words=_normalized_set(stop_words),
            category_terms=_normalized_set(category_terms),
            accessory_terms=_normalized_set(accessory_terms),
            accessory_anchors=_normalized_set(accessory_anchors),
        )

    def synonyms_of(self, token: str) -> FrozenSet[str]:
        """Every accepted surface form of ``token``, always including itself."""
        group = self._index.get(token)
        if group is None:
            return frozenset([token])
        return group | {token}

    def are_synonyms(self, a: str, b: str) -> bool:
        return a == b or b in self.synonyms_of(a)

    def is_stop_word(self, token: str) -> bool:
        return token in self.stop_words

    def is_category_term(self, token: str) -> bool:
        return not self.category_terms.isdisjoint(self.synonyms_of(token))

    def is_accessory(self, token: str) -> bool:
        return token in self.accessory_terms

    def is_accessory_request(self, anchor: Optional[str]) -> bool:
        """True when the anchor token itself asks for an accessory (e.g. "cabo")."""
        if not anchor:
            return False
        return not self.accessory_anchors.isdisjoint(self.synonyms_of(anchor))


DEFAULT_THESAURUS = Thesaurus.from_mapping(
    DEFAULT_SYNONYMS,
    stop_words=DEFAULT_STOP_WORDS,
    category_terms=DEFAULT_CATEGORY_TERMS,
    accessory_terms=DEFAULT_ACCESSORY_TERMS,
    accessory_anchors=DEFAULT_ACCESSORY_ANCHORS,
)
