"""
Field definitions for searchable records.

A FieldSpec names one text field of a record and how much it counts when a
record matches on several fields. Each spec resolves its value through an
explicit accessor: the default accessor walks a dotted path, descending into
mappings by key, sequences by integer index and other objects by attribute.

Field values are always strings. Missing paths, ``None`` and any non-string
value resolve to the empty string, which never matches.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any


Getter = Callable[[Any], Any]

_MISSING = object()


def _step(current: Any, segment: str) -> Any:
    if isinstance(current, Mapping):
        return current.get(segment, _MISSING)
    if isinstance(current, Sequence) and not isinstance(current, (str, bytes, bytearray)):
        try:
            return current[int(segment)]
        except (ValueError, IndexError):
            return _MISSING
    return getattr(current, segment, _MISSING)


def resolve_path(record: Any, path: str) -> Any:
    """Walk ``path`` (dot separated) into ``record``; ``None`` when absent."""
    current = record
    for segment in path.split("."):
        if current is None:
            return None
        current = _step(current, segment)
        if current is _MISSING:
            return None
    return current


def extract_field(record: Any, path: str) -> str:
    """Return the text stored at ``path`` or an empty string."""
    value = resolve_path(record, path)
    return value if isinstance(value, str) else ""


@dataclass(frozen=True)
class FieldSpec:
    """
    Searchable text field.

    Args:
        path: Dotted path of the field (e.g. "name", "course.name")
        weight: Relative importance of the field (default: 1.0)
        getter: Optional accessor replacing the dotted path lookup
    """

    path: str
    weight: float = 1.0
    getter: Getter | None = field(default=None, compare=False, repr=False)

    @property
    def name(self) -> str:
        return self.path

    def extract(self, record: Any) -> str:
        """Return this field's text for ``record``; never raises on bad data."""
        if self.getter is None:
            return extract_field(record, self.path)
        try:
            value = self.getter(record)
        except (AttributeError, KeyError, IndexError, TypeError):
            return ""
        return value if isinstance(value, str) else ""

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.path, "weight": self.weight}

    @classmethod
    def parse(cls, text: str) -> FieldSpec:
        """Parse ``"path"`` or ``"path^weight"``."""
        path, sep, weight = text.partition("^")
        path = path.strip()
        if not sep:
            return cls(path=path)
        try:
            return cls(path=path, weight=float(weight))
        except ValueError as exc:
            msg = f"Invalid field weight in {text!r}"
            raise ValueError(msg) from exc

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FieldSpec:
        path = data.get("name", data.get("path"))
        if not isinstance(path, str):
            msg = f"Field definition needs a name: {dict(data)!r}"
            raise ValueError(msg)
        try:
            weight = float(data.get("weight", 1.0))
        except (TypeError, ValueError) as exc:
            msg = f"Invalid field weight for {path!r}: {data.get('weight')!r}"
            raise ValueError(msg) from exc
        return cls(path=path, weight=weight, getter=data.get("getter"))

    @classmethod
    def coerce(cls, value: FieldSpec | str | Mapping[str, Any]) -> FieldSpec:
        """Accept a FieldSpec, a ``"path^weight"`` string or a mapping."""
        if isinstance(value, FieldSpec):
            return value
        if isinstance(value, str):
            return cls.parse(value)
        if isinstance(value, Mapping):
            return cls.from_dict(value)
        msg = f"Unsupported field definition: {value!r}"
        raise ValueError(msg)
