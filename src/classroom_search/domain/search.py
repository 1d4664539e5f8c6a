"""Domain models for search results.

Value objects are immutable (frozen=True). A result keeps a reference to the
caller's record object; it never copies or mutates it.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class FieldHit(BaseModel):
    """Value object describing how one field of a record matched.

    ``ranges`` are half-open ``(start, end)`` character spans into ``value``,
    ready for highlighting.
    """

    model_config = ConfigDict(frozen=True)

    field: str
    value: str
    score: float
    ranges: tuple[tuple[int, int], ...] = ()


class MatchResult(BaseModel):
    """Value object for a single ranked record.

    Score is in [0, 1]; 0 is a perfect match and lower is better.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    record: Any
    ref_index: int
    key: Any = None
    score: float
    matches: tuple[FieldHit, ...] = Field(default_factory=tuple)

    @property
    def best_hit(self) -> FieldHit | None:
        """Field hit with the lowest score, if any."""
        if not self.matches:
            return None
        return min(self.matches, key=lambda hit: hit.score)
