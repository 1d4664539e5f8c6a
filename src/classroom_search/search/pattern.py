"""Query compilation for fuzzy matching.

A raw query is case-folded, split on whitespace into terms and, for terms
short enough to fit the configured bound, paired with a bitap alphabet table
(one bitmask per character, bit ``i`` set where the term has that character
at position ``i``).

Case folding is applied per character and never changes the length of the
text, so positions found in folded text are valid positions in the original.
Query and candidate text must go through the same ``fold_case`` for scores to
be comparable.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


DEFAULT_MAX_PATTERN_LENGTH = 32


def _fold_char(char: str) -> str:
    folded = char.casefold()
    if len(folded) == 1:
        return folded
    lowered = char.lower()
    if len(lowered) == 1:
        return lowered
    return char


def fold_case(text: str) -> str:
    """Case-fold ``text`` without changing its length.

    Examples:
        >>> fold_case("Intro to Biology")
        'intro to biology'
        >>> len(fold_case("Straße")) == len("Straße")
        True
    """
    if text.isascii():
        return text.lower()
    return "".join(_fold_char(char) for char in text)


def build_alphabet(term: str) -> Mapping[str, int]:
    """Build the bitap alphabet table for ``term``."""
    masks: dict[str, int] = {}
    for position, char in enumerate(term):
        masks[char] = masks.get(char, 0) | (1 << position)
    return MappingProxyType(masks)


@dataclass(frozen=True)
class PatternTerm:
    """One whitespace-separated piece of a compiled query."""

    text: str
    alphabet: Mapping[str, int] | None = field(default=None, compare=False, repr=False)

    @property
    def length(self) -> int:
        return len(self.text)

    @property
    def accelerated(self) -> bool:
        """Whether bitap can be used for this term."""
        return self.alphabet is not None


@dataclass(frozen=True)
class CompiledPattern:
    """Matcher-ready form of a query string."""

    text: str
    terms: tuple[PatternTerm, ...] = ()

    @property
    def length(self) -> int:
        return len(self.text)

    @property
    def is_empty(self) -> bool:
        return not self.terms

    @property
    def is_multi_term(self) -> bool:
        return len(self.terms) > 1

    def __bool__(self) -> bool:
        return not self.is_empty


EMPTY_PATTERN = CompiledPattern(text="")


def compile_term(text: str, *, max_pattern_length: int = DEFAULT_MAX_PATTERN_LENGTH) -> PatternTerm:
    """Compile an already folded term, attaching masks when it fits."""
    if len(text) <= max_pattern_length:
        return PatternTerm(text=text, alphabet=build_alphabet(text))
    return PatternTerm(text=text)


def compile_pattern(query: str, *, max_pattern_length: int = DEFAULT_MAX_PATTERN_LENGTH) -> CompiledPattern:
    """Compile a raw query string.

    Args:
        query: User supplied query, any case and spacing.
        max_pattern_length: Longest term that gets a bitap table. Longer
            terms are still matched, through the edit-distance fallback.

    Returns:
        The compiled pattern, or ``EMPTY_PATTERN`` when the query is blank.
    """
    if not isinstance(query, str):
        return EMPTY_PATTERN

    pieces = fold_case(query).split()
    if not pieces:
        return EMPTY_PATTERN

    terms = tuple(compile_term(piece, max_pattern_length=max_pattern_length) for piece in pieces)
    return CompiledPattern(text=" ".join(pieces), terms=terms)
