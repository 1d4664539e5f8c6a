"""CLI for fuzzy searching a JSON file of classroom records."""

from __future__ import annotations

import argparse
from collections.abc import Sequence
import logging
from pathlib import Path
import sys
from typing import Any

import orjson
from pydantic import ValidationError

from classroom_search.catalog import PROFILES, build_entity_index, get_profile
from classroom_search.config import SearchSettings
from classroom_search.domain.search import MatchResult
from classroom_search.observability import bind_search_context, configure_logging
from classroom_search.search.index import ConfigurationError, SearchIndex, build_index
from classroom_search.search.ranking import COMBINE_POLICIES
from classroom_search.search.schema import resolve_path
from classroom_search.search.snippet import build_preview


logger = logging.getLogger(__name__)


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="classroom-search",
        description="Fuzzy search courses, assignments or announcements stored as JSON",
    )
    parser.add_argument("query", help="Search query (case-insensitive, typos allowed)")
    parser.add_argument(
        "--records",
        type=Path,
        required=True,
        help="JSON file with a list of records or an API list response ('-' reads stdin)",
    )
    target = parser.add_mutually_exclusive_group()
    target.add_argument(
        "--kind",
        choices=sorted(PROFILES),
        help="Entity kind; selects the searched fields (default: courses)",
    )
    target.add_argument(
        "--field",
        dest="fields",
        action="append",
        metavar="PATH[^WEIGHT]",
        help="Field to search, repeatable (e.g. --field title^2 --field description)",
    )
    parser.add_argument("--threshold", type=float, help="Maximum score of a result, in (0, 1]")
    parser.add_argument("--combine", choices=COMBINE_POLICIES, help="How field scores are combined")
    parser.add_argument("--limit", type=int, help="Maximum number of results")
    parser.add_argument(
        "--style",
        choices=("plain", "html"),
        default="plain",
        help="Highlight style of the preview (default: plain)",
    )
    parser.add_argument(
        "--preview-chars",
        type=int,
        default=50,
        help="Characters of matched text shown per result (default: 50)",
    )
    return parser


def _read_payload(path: Path) -> Any:
    if str(path) == "-":
        return orjson.loads(sys.stdin.buffer.read())
    return orjson.loads(path.read_bytes())


def _unwrap_records(payload: Any, response_key: str) -> list[Any]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        if response_key and isinstance(payload.get(response_key), list):
            return payload[response_key]
        lists = [value for value in payload.values() if isinstance(value, list)]
        if len(lists) == 1:
            return lists[0]
        if not lists:
            # Empty list responses omit the list key entirely
            return []
    msg = "Records must be a JSON list or an object wrapping one list"
    raise ValueError(msg)


def _build_index(args: argparse.Namespace, records: list[Any], settings: SearchSettings) -> SearchIndex:
    if args.fields:
        return build_index(
            records,
            args.fields,
            args.threshold,
            combine=args.combine,
            key="id",
            settings=settings,
        )
    return build_entity_index(
        args.kind or "courses",
        records,
        threshold=args.threshold,
        combine=args.combine,
        settings=settings,
    )


def _format_result(rank: int, result: MatchResult, label_field: str, args: argparse.Namespace) -> dict[str, Any]:
    hit = result.best_hit
    label = resolve_path(result.record, label_field)
    return {
        "rank": rank,
        "key": result.key,
        "score": round(result.score, 3),
        "label": label if isinstance(label, str) else None,
        "field": hit.field if hit else None,
        "preview": build_preview(hit.value, hit.ranges, max_chars=args.preview_chars, style=args.style)
        if hit
        else "",
    }


def _run(args: argparse.Namespace, settings: SearchSettings) -> int:
    response_key = "" if args.fields else get_profile(args.kind or "courses").response_key
    try:
        records = _unwrap_records(_read_payload(args.records), response_key)
    except OSError as exc:
        logger.error("Cannot read records file %s: %s", args.records, exc)
        return 1
    except (orjson.JSONDecodeError, ValueError) as exc:
        logger.error("Invalid records file %s: %s", args.records, exc)
        return 1

    try:
        index = _build_index(args, records, settings)
    except ConfigurationError as exc:
        logger.error("Invalid search options: %s", exc)
        return 2

    results = index.search(args.query, limit=args.limit)
    if not results:
        logger.info("No matches found", extra={"records": len(index)})

    label_field = index.fields[0].path if args.fields else get_profile(args.kind or "courses").label_field
    for rank, result in enumerate(results, start=1):
        payload = _format_result(rank, result, label_field, args)
        sys.stdout.write(orjson.dumps(payload).decode("utf-8") + "\n")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_argument_parser()
    args = parser.parse_args(argv)

    try:
        settings = SearchSettings()
    except ValidationError as exc:
        sys.stderr.write(f"Invalid configuration: {exc}\n")
        return 2

    configure_logging(settings.log_level, settings.log_json)

    kind = "fields" if args.fields else args.kind or "courses"
    with bind_search_context(kind=kind, query=args.query):
        return _run(args, settings)


if __name__ == "__main__":
    sys.exit(main())
