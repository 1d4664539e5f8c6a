"""Fuzzy search over classroom records (courses, assignments, announcements)."""

from classroom_search.domain.search import FieldHit, MatchResult
from classroom_search.search.fuzzy import NO_MATCH, FieldMatch, ScoringWeights, match_text
from classroom_search.search.index import ConfigurationError, SearchIndex, build_index
from classroom_search.search.pattern import EMPTY_PATTERN, CompiledPattern, compile_pattern
from classroom_search.search.ranking import search
from classroom_search.search.schema import FieldSpec, extract_field


__version__ = "0.1.0"

__all__ = [
    "EMPTY_PATTERN",
    "NO_MATCH",
    "CompiledPattern",
    "ConfigurationError",
    "FieldHit",
    "FieldMatch",
    "FieldSpec",
    "MatchResult",
    "ScoringWeights",
    "SearchIndex",
    "build_index",
    "compile_pattern",
    "extract_field",
    "match_text",
    "search",
]
