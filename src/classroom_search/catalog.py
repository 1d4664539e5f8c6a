"""Search presets for the classroom entity kinds.

Each kind names the record fields worth matching and the threshold used when
searching it. Records are the JSON objects returned by the classroom API
(courses, course work, announcements); only the listed fields are read.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from classroom_search.search.index import ConfigurationError, SearchIndex, build_index
from classroom_search.search.schema import FieldSpec


if TYPE_CHECKING:
    from classroom_search.config import SearchSettings


@dataclass(frozen=True)
class EntityProfile:
    """Fields, threshold and identity of one searchable entity kind."""

    kind: str
    fields: tuple[FieldSpec, ...]
    threshold: float = 0.4
    key_field: str = "id"
    label_field: str = "name"
    # List key of the API list response wrapping the records
    response_key: str = ""


PROFILES: dict[str, EntityProfile] = {
    "courses": EntityProfile(
        kind="courses",
        fields=(FieldSpec("name"),),
        label_field="name",
        response_key="courses",
    ),
    "assignments": EntityProfile(
        kind="assignments",
        fields=(FieldSpec("title"), FieldSpec("description")),
        label_field="title",
        response_key="courseWork",
    ),
    "announcements": EntityProfile(
        kind="announcements",
        fields=(FieldSpec("text"),),
        label_field="text",
        response_key="announcements",
    ),
}


def get_profile(kind: str) -> EntityProfile:
    try:
        return PROFILES[kind]
    except KeyError:
        msg = f"Unknown entity kind {kind!r}; expected one of {', '.join(sorted(PROFILES))}"
        raise ConfigurationError(msg) from None


def build_entity_index(
    kind: str,
    records: Iterable[Any],
    *,
    threshold: float | None = None,
    combine: str | None = None,
    settings: SearchSettings | None = None,
) -> SearchIndex:
    """Build an index over classroom records of the given kind.

    Records are keyed by their ``id`` (falling back to their position).
    """
    profile = get_profile(kind)
    return build_index(
        records,
        profile.fields,
        profile.threshold if threshold is None else threshold,
        combine=combine,
        key=profile.key_field,
        settings=settings,
    )
