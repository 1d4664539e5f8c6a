"""Approximate matching of a compiled query against one field value.

This module scores how closely a piece of text matches a query, allowing a
bounded number of typos (insertions, deletions, substitutions).

Matching order for each query term:
- Exact substring first; the score only reflects where the term starts
- Bitap (shift-and with errors) for terms that carry an alphabet table
- Bounded Levenshtein search (Sellers with Ukkonen's cutoff) for longer terms

Scores live in [0, 1): 0 is a perfect match at the start of the text. A text
that cannot be aligned within the edit budget yields ``NO_MATCH``, never a
score of 1.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
import math
from typing import Final

from classroom_search.search.pattern import CompiledPattern, PatternTerm, fold_case


Span = tuple[int, int]

# Keeps floor(threshold * length) stable against float rounding (0.29 * 100).
_FLOOR_EPSILON = 1e-9


@dataclass(frozen=True)
class ScoringWeights:
    """Tunable constants of the score formula.

    Attributes:
        edit_weight: Multiplier for ``edits / term_length``.
        position_weight: Multiplier for ``start / text_length``.
        max_edit_ratio: Hard cap on edits as a fraction of the term length,
            applied on top of the threshold-derived budget.
    """

    edit_weight: float = 1.0
    position_weight: float = 0.1
    max_edit_ratio: float = 0.5


DEFAULT_SCORING = ScoringWeights()


@dataclass(frozen=True)
class FieldMatch:
    """Score and half-open character spans of a successful match."""

    score: float
    ranges: tuple[Span, ...] = ()


class _NoMatch:
    """Singleton returned when a text does not match at all."""

    _instance: _NoMatch | None = None

    def __new__(cls) -> _NoMatch:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NO_MATCH"


NO_MATCH: Final = _NoMatch()


def max_edits_for(term_length: int, threshold: float, scoring: ScoringWeights = DEFAULT_SCORING) -> int:
    """Edit budget for a term: ``floor(threshold * length)``, capped.

    The cap keeps at least half of the term (by default) and at least one
    character matching, so unrelated words never align.
    """
    if term_length <= 0:
        return 0
    by_threshold = math.floor(threshold * term_length + _FLOOR_EPSILON)
    by_ratio = math.floor(scoring.max_edit_ratio * term_length + _FLOOR_EPSILON)
    return max(0, min(by_threshold, by_ratio, term_length - 1))


def _clamp(value: float) -> float:
    return min(1.0, max(0.0, value))


def exact_score(start: int, term_length: int, text_length: int, scoring: ScoringWeights = DEFAULT_SCORING) -> float:
    """Score of a verbatim occurrence starting at ``start``.

    Zero at the start of the text; later occurrences pay a small position
    penalty which shrinks as the term covers more of the text.
    """
    if start <= 0 or text_length <= 0:
        return 0.0
    coverage = min(1.0, term_length / text_length)
    return _clamp(scoring.position_weight * (start / text_length) * (1.0 - coverage / 2))


def approximate_score(
    edits: int, term_length: int, start: int, text_length: int, scoring: ScoringWeights = DEFAULT_SCORING
) -> float:
    position_penalty = start / text_length if text_length else 0.0
    return _clamp(edits / term_length * scoring.edit_weight + position_penalty * scoring.position_weight)


def bitap_search(text: str, alphabet: Mapping[str, int], length: int, max_edits: int) -> tuple[int, int] | None:
    """Find the fewest-edit occurrence of a term with bitap.

    Args:
        text: Folded text to scan.
        alphabet: Per-character bitmasks of the term.
        length: Term length.
        max_edits: Largest edit count worth reporting.

    Returns:
        ``(edits, end)`` of the earliest occurrence with the fewest edits,
        ``end`` exclusive, or None when nothing fits the budget.
    """
    full = (1 << length) - 1
    accept = 1 << (length - 1)
    # Bit i of states[d]: term[:i + 1] ends here with at most d edits.
    states = [(1 << d) - 1 for d in range(max_edits + 1)]
    best: tuple[int, int] | None = None

    for index, char in enumerate(text):
        char_mask = alphabet.get(char, 0)
        previous_old = states[0]
        states[0] = ((previous_old << 1) | 1) & char_mask
        for d in range(1, max_edits + 1):
            old = states[d]
            states[d] = (
                (((old << 1) | 1) & char_mask)
                | ((previous_old | states[d - 1]) << 1)
                | previous_old
                | 1
            ) & full
            previous_old = old

        limit = max_edits if best is None else best[0] - 1
        for d in range(limit + 1):
            if states[d] & accept:
                best = (d, index + 1)
                break
        if best is not None and best[0] == 0:
            break

    return best


def bounded_search(text: str, term: str, max_edits: int) -> tuple[int, int] | None:
    """Same contract as ``bitap_search`` for terms of any length.

    Column-wise Levenshtein where the term may start anywhere in the text.
    Rows past the last one within ``max_edits`` are not computed.
    """
    m = len(term)
    over = max_edits + 1
    column = [min(i, over) for i in range(m + 1)]
    last = min(max_edits, m)
    best: tuple[int, int] | None = None

    for index, char in enumerate(text):
        limit = min(last + 1, m)
        diag = column[0]
        column[0] = 0
        for i in range(1, limit + 1):
            cost = 0 if term[i - 1] == char else 1
            value = min(column[i] + 1, column[i - 1] + 1, diag + cost)
            diag = column[i]
            column[i] = value

        last = limit
        while last > 0 and column[last] > max_edits:
            last -= 1

        if last == m and (best is None or column[m] < best[0]):
            best = (column[m], index + 1)
            if best[0] == 0:
                break

    return best


def alignment_start(text: str, term: str, end: int, edits: int) -> int:
    """Start of the tightest window ending at ``end`` within ``edits`` of ``term``."""
    m = len(term)
    window_start = max(0, end - m - edits)
    reversed_term = term[::-1]
    column = list(range(m + 1))
    best_value, best_width = column[m], 0

    for width, char in enumerate(reversed(text[window_start:end]), start=1):
        diag = column[0]
        column[0] = width
        for i in range(1, m + 1):
            cost = 0 if reversed_term[i - 1] == char else 1
            value = min(column[i] + 1, column[i - 1] + 1, diag + cost)
            diag = column[i]
            column[i] = value
        if column[m] < best_value:
            best_value, best_width = column[m], width

    return end - best_width


def _scored(score: float, start: int, end: int) -> FieldMatch | _NoMatch:
    # A clamped score of 1 means the field is no better than no match
    if score >= 1.0:
        return NO_MATCH
    return FieldMatch(score=score, ranges=((start, end),))


def match_term(
    folded_text: str,
    term: PatternTerm,
    max_edits: int,
    scoring: ScoringWeights = DEFAULT_SCORING,
) -> FieldMatch | _NoMatch:
    """Match a single compiled term against already folded text."""
    text_length = len(folded_text)
    if not text_length or not term.length:
        return NO_MATCH

    start = folded_text.find(term.text)
    if start != -1:
        return _scored(exact_score(start, term.length, text_length, scoring), start, start + term.length)

    if max_edits <= 0:
        return NO_MATCH

    if term.alphabet is not None:
        found = bitap_search(folded_text, term.alphabet, term.length, max_edits)
    else:
        found = bounded_search(folded_text, term.text, max_edits)
    if found is None:
        return NO_MATCH

    edits, end = found
    start = alignment_start(folded_text, term.text, end, edits)
    return _scored(approximate_score(edits, term.length, start, text_length, scoring), start, end)


def merge_ranges(ranges: Iterable[Span]) -> tuple[Span, ...]:
    """Sort spans and merge the ones that overlap or touch."""
    merged: list[Span] = []
    for start, end in sorted(ranges):
        if merged and start <= merged[-1][1]:
            merged[-1] = (merged[-1][0], max(merged[-1][1], end))
        else:
            merged.append((start, end))
    return tuple(merged)


def match_text(
    text: str,
    pattern: CompiledPattern,
    threshold: float,
    *,
    scoring: ScoringWeights = DEFAULT_SCORING,
) -> FieldMatch | _NoMatch:
    """Match a compiled query against one field value.

    Multi-term queries that do not occur verbatim are matched term by term;
    the field score is the mean of the term scores, counting 1.0 for every
    term that did not match.

    Args:
        text: Original (unfolded) field text.
        pattern: Compiled query.
        threshold: Index threshold; sets the per-term edit budget.
        scoring: Score formula constants.

    Returns:
        A FieldMatch with spans into ``text``, or ``NO_MATCH``.
    """
    if pattern.is_empty or not text:
        return NO_MATCH

    folded = fold_case(text)

    if not pattern.is_multi_term:
        term = pattern.terms[0]
        return match_term(folded, term, max_edits_for(term.length, threshold, scoring), scoring)

    start = folded.find(pattern.text)
    if start != -1:
        phrase = _scored(exact_score(start, pattern.length, len(folded), scoring), start, start + pattern.length)
        if phrase is not NO_MATCH:
            return phrase

    scores: list[float] = []
    spans: list[Span] = []
    for term in pattern.terms:
        result = match_term(folded, term, max_edits_for(term.length, threshold, scoring), scoring)
        if result is NO_MATCH:
            scores.append(1.0)
            continue
        scores.append(result.score)
        spans.extend(result.ranges)

    if not spans:
        return NO_MATCH
    return FieldMatch(score=sum(scores) / len(scores), ranges=merge_ranges(spans))
