"""Entity Name Normalization

Token-level matching rules for company and contact names. A variant matches
only when its tokens appear as a contiguous, exactly equal run inside the
message tokens; substrings never match ("al" does not match "alan").
"""

import re
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

from backend.app.decision_layer.models import EntityMatchType

MIN_TOKEN_LENGTH = 3

# Tokens too generic to identify a company on their own
STOP_WORDS: frozenset[str] = frozenset({
    "the", "and", "for", "of", "with", "inc", "llc", "ltd", "corp", "co",
    "company", "group", "holdings",
})

_WHITESPACE = re.compile(r"\s+")
_TOKEN_SPLIT = re.compile(r"[\s\-]+")
_POSSESSIVE = re.compile(r"['’]s$")
_NON_WORD = re.compile(r"[^\w&]")
_PARENTHETICAL = re.compile(r"\(([^)]*)\)")


@dataclass(frozen=True)
class NameVariant:
    """A matchable form of an entity name"""
    text: str
    tokens: Tuple[str, ...]
    match_type: EntityMatchType


def normalize(text: str) -> str:
    """Lower-case, trim and collapse internal whitespace"""
    return _WHITESPACE.sub(" ", (text or "").strip().lower())


def tokenize(text: str) -> List[str]:
    """Split on whitespace and hyphens, strip punctuation and possessives"""
    tokens = []
    for raw in _TOKEN_SPLIT.split(normalize(text)):
        token = _NON_WORD.sub("", _POSSESSIVE.sub("", raw))
        if token:
            tokens.append(token)
    return tokens


def build_name_variants(name: str, aliases: Iterable[str] = ()) -> List[NameVariant]:
    """Build every matchable variant of an entity name

    Full-phrase variants: the full name, the base name without parentheses,
    the parenthetical content and each alias. Partial variants: individual
    name tokens of at least three characters that are not stop words.
    """
    phrases: List[str] = [name]

    base_name = _PARENTHETICAL.sub(" ", name)
    phrases.append(base_name)

    for content in _PARENTHETICAL.findall(name):
        phrases.append(content)

    phrases.extend(aliases)

    variants: List[NameVariant] = []
    seen: set[Tuple[str, ...]] = set()

    for phrase in phrases:
        tokens = tuple(tokenize(phrase))
        if not tokens or tokens in seen:
            continue
        seen.add(tokens)
        variants.append(NameVariant(normalize(phrase), tokens, EntityMatchType.FULL))

    # tokenize() drops the parentheses, so this covers parenthetical words too
    for token in tokenize(name):
        if len(token) < MIN_TOKEN_LENGTH or token in STOP_WORDS:
            continue
        if (token,) in seen:
            continue
        seen.add((token,))
        variants.append(NameVariant(token, (token,), EntityMatchType.PARTIAL))

    return variants


def contains_variant(message_tokens: Sequence[str], variant: Sequence[str]) -> bool:
    """True when ``variant`` occurs as a contiguous run of ``message_tokens``"""
    size = len(variant)
    if size == 0 or size > len(message_tokens):
        return False
    target = list(variant)
    for start in range(len(message_tokens) - size + 1):
        if list(message_tokens[start:start + size]) == target:
            return True
    return False
