"""Immutable search index over a snapshot of records.

An index pairs the records with the fields to search, the score threshold,
the field-combination policy and the scoring constants. It is built once by
``build_index`` and is read-only afterwards, so it can be shared between
callers without locking. To pick up new records, build a new index and swap
the reference.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
import logging
import math
from typing import TYPE_CHECKING, Any

from classroom_search.search.fuzzy import DEFAULT_SCORING, ScoringWeights
from classroom_search.search.pattern import DEFAULT_MAX_PATTERN_LENGTH
from classroom_search.search.ranking import COMBINE_POLICIES, search
from classroom_search.search.schema import FieldSpec, resolve_path


if TYPE_CHECKING:
    from classroom_search.config import SearchSettings
    from classroom_search.domain.search import MatchResult


logger = logging.getLogger(__name__)

KeyFunc = Callable[[Any], Any]
FieldDefinition = FieldSpec | str | Mapping[str, Any]


class ConfigurationError(ValueError):
    """Raised when an index cannot be built from the given options."""


@dataclass(frozen=True)
class SearchIndex:
    """Read-only pairing of records and search options.

    Use ``build_index`` rather than constructing this directly; it validates
    the options and snapshots the records.
    """

    records: tuple[Any, ...]
    fields: tuple[FieldSpec, ...]
    threshold: float
    combine: str = "best"
    keys: tuple[Any, ...] = field(default=(), repr=False)
    max_pattern_length: int = DEFAULT_MAX_PATTERN_LENGTH
    scoring: ScoringWeights = DEFAULT_SCORING

    def __post_init__(self) -> None:
        # Records without explicit keys are identified by position
        if len(self.keys) != len(self.records):
            object.__setattr__(self, "keys", tuple(range(len(self.records))))

    def __len__(self) -> int:
        return len(self.records)

    def search(self, query: str, *, limit: int | None = None) -> list[MatchResult]:
        """Rank the indexed records against ``query``; see ``ranking.search``."""
        return search(self, query, limit=limit)


def _coerce_fields(fields: Iterable[FieldDefinition] | None) -> tuple[FieldSpec, ...]:
    if fields is None or isinstance(fields, (str, FieldSpec, Mapping)):
        msg = "fields must be a non-empty list of field definitions"
        raise ConfigurationError(msg)

    specs: list[FieldSpec] = []
    for definition in fields:
        try:
            spec = FieldSpec.coerce(definition)
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc
        if not spec.path and spec.getter is None:
            msg = "Field path must not be empty"
            raise ConfigurationError(msg)
        if not math.isfinite(spec.weight) or spec.weight <= 0:
            msg = f"Field weight must be a positive number, got {spec.weight!r} for {spec.path!r}"
            raise ConfigurationError(msg)
        specs.append(spec)

    if not specs:
        msg = "At least one field is required to build a search index"
        raise ConfigurationError(msg)
    return tuple(specs)


def _validate_threshold(threshold: Any) -> float:
    if isinstance(threshold, bool) or not isinstance(threshold, (int, float)):
        msg = f"Threshold must be a number in (0, 1], got {threshold!r}"
        raise ConfigurationError(msg)
    value = float(threshold)
    if not (0.0 < value <= 1.0):
        msg = f"Threshold must be in (0, 1], got {value}"
        raise ConfigurationError(msg)
    return value


def _resolve_keys(records: Sequence[Any], key: str | KeyFunc | None) -> tuple[Any, ...]:
    if key is None:
        return tuple(range(len(records)))

    keys: list[Any] = []
    for position, record in enumerate(records):
        value = key(record) if callable(key) else resolve_path(record, key)
        keys.append(position if value is None else value)
    return tuple(keys)


def build_index(
    records: Iterable[Any],
    fields: Iterable[FieldDefinition],
    threshold: float | None = None,
    *,
    combine: str | None = None,
    key: str | KeyFunc | None = None,
    settings: SearchSettings | None = None,
) -> SearchIndex:
    """Build an immutable index over a snapshot of ``records``.

    Args:
        records: Items to search. Copied into a tuple; later changes to the
            caller's collection are not seen.
        fields: FieldSpecs, ``"path^weight"`` strings or ``{"name", "weight"}``
            mappings.
        threshold: Maximum score of a returned result, in (0, 1]. Defaults to
            the configured threshold.
        combine: ``"best"`` or ``"weightedAverage"``. Defaults to the
            configured policy.
        key: Dotted path or callable giving each record's identity. Records
            default to their position.
        settings: Configuration; loaded from the environment when omitted.

    Raises:
        ConfigurationError: On empty fields, bad weights, a threshold outside
            (0, 1] or an unknown combine policy.
    """
    if settings is None:
        from classroom_search.config import SearchSettings

        settings = SearchSettings()

    specs = _coerce_fields(fields)
    resolved_threshold = _validate_threshold(settings.threshold if threshold is None else threshold)

    policy = settings.combine if combine is None else combine
    if policy not in COMBINE_POLICIES:
        msg = f"Unknown combine policy {policy!r}; expected one of {', '.join(COMBINE_POLICIES)}"
        raise ConfigurationError(msg)

    snapshot = tuple(records)
    index = SearchIndex(
        records=snapshot,
        fields=specs,
        threshold=resolved_threshold,
        combine=policy,
        keys=_resolve_keys(snapshot, key),
        max_pattern_length=settings.max_pattern_length,
        scoring=settings.scoring(),
    )
    logger.info(
        "Built search index: %d records, threshold=%.2f, combine=%s",
        len(snapshot),
        resolved_threshold,
        policy,
        extra={"fields": [spec.to_dict() for spec in specs]},
    )
    return index
