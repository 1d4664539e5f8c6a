"""Ranking of records against a query.

Runs the matcher over every configured field of every record, folds the
field scores into one record score and returns the records that pass the
index threshold, best first. Records tie-break on their original position.
"""

from __future__ import annotations

from collections.abc import Sequence
import logging
from typing import TYPE_CHECKING

from classroom_search.domain.search import FieldHit, MatchResult
from classroom_search.search.fuzzy import NO_MATCH, match_text
from classroom_search.search.pattern import compile_pattern


if TYPE_CHECKING:
    from classroom_search.search.index import SearchIndex


logger = logging.getLogger(__name__)

COMBINE_POLICIES = ("best", "weightedAverage")


def combine_scores(weighted_scores: Sequence[tuple[float, float]], policy: str = "best") -> float:
    """Fold ``(weight, score)`` pairs of the matched fields into one score.

    - ``best``: lowest ``score ** weight``; heavier fields pull scores down
    - ``weightedAverage``: ``sum(weight * score) / sum(weight)``
    """
    if not weighted_scores:
        return 1.0
    if policy == "weightedAverage":
        total_weight = sum(weight for weight, _ in weighted_scores)
        return sum(weight * score for weight, score in weighted_scores) / total_weight
    return min(score**weight for weight, score in weighted_scores)


def search(index: SearchIndex, query: str, *, limit: int | None = None) -> list[MatchResult]:
    """Rank the records of ``index`` against ``query``.

    Args:
        index: Immutable index to query.
        query: Raw query string; blank queries match nothing.
        limit: Keep at most this many results.

    Returns:
        Matching records sorted by ascending score; empty when none match.
    """
    pattern = compile_pattern(query, max_pattern_length=index.max_pattern_length)
    if pattern.is_empty:
        logger.debug("Blank query, returning no results")
        return []

    results: list[MatchResult] = []
    for position, record in enumerate(index.records):
        hits: list[FieldHit] = []
        weighted: list[tuple[float, float]] = []
        for spec in index.fields:
            text = spec.extract(record)
            if not text:
                continue
            found = match_text(text, pattern, index.threshold, scoring=index.scoring)
            if found is NO_MATCH:
                continue
            hits.append(FieldHit(field=spec.name, value=text, score=found.score, ranges=found.ranges))
            weighted.append((spec.weight, found.score))

        if not hits:
            continue

        score = combine_scores(weighted, index.combine)
        if score > index.threshold:
            continue

        results.append(
            MatchResult(
                record=record,
                ref_index=position,
                key=index.keys[position],
                score=score,
                matches=tuple(hits),
            )
        )

    # list.sort is stable: equal scores keep insertion order
    results.sort(key=lambda result: result.score)
    if limit is not None:
        results = results[: max(0, limit)]

    logger.debug("Query %r matched %d of %d records", pattern.text, len(results), len(index.records))
    return results
