"""Domain value objects."""

from classroom_search.domain.search import FieldHit, MatchResult


__all__ = ["FieldHit", "MatchResult"]
