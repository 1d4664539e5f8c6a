"""Highlighting and previews for matched field values.

Matched ranges come from the matcher as half-open ``(start, end)`` spans
into the original text, so highlighting is plain slicing.

Smart Defaults:
- Plain style wraps matches as [[text]], html style as <mark>text</mark>
- Previews of long text start shortly before the first match, with "..."
  marking trimmed ends
"""

from __future__ import annotations

from collections.abc import Sequence


ELLIPSIS = "..."


def _wrap(fragment: str, style: str) -> str:
    if style == "html":
        return f"<mark>{fragment}</mark>"
    return f"[[{fragment}]]"


def _clip_ranges(ranges: Sequence[tuple[int, int]], length: int) -> list[tuple[int, int]]:
    clipped: list[tuple[int, int]] = []
    for start, end in sorted(ranges):
        start, end = max(0, start), min(length, end)
        if clipped and start < clipped[-1][1]:
            start = clipped[-1][1]
        if start >= end:
            continue
        clipped.append((start, end))
    return clipped


def highlight_ranges(text: str, ranges: Sequence[tuple[int, int]], style: str = "plain") -> str:
    """Wrap each matched span of ``text``.

    Args:
        text: The field value.
        ranges: Half-open spans to mark; out-of-bounds parts are ignored.
        style: "plain" for [[text]] or "html" for <mark>text</mark>.

    Returns:
        Text with highlighted spans.
    """
    if not text or not ranges:
        return text

    pieces: list[str] = []
    cursor = 0
    for start, end in _clip_ranges(ranges, len(text)):
        pieces.append(text[cursor:start])
        pieces.append(_wrap(text[start:end], style))
        cursor = end
    pieces.append(text[cursor:])
    return "".join(pieces)


def build_preview(
    text: str,
    ranges: Sequence[tuple[int, int]] = (),
    max_chars: int = 50,
    style: str | None = None,
) -> str:
    """Build a short preview of ``text`` near its first match.

    Args:
        text: The full field value.
        ranges: Matched spans; the window starts a little before the first.
        max_chars: Maximum characters of original text kept.
        style: Highlight style, or None to leave the preview unmarked.

    Returns:
        The preview, with "..." where text was trimmed.
    """
    if not text:
        return ""

    spans = _clip_ranges(ranges, len(text))
    if len(text) <= max_chars:
        start, end = 0, len(text)
    else:
        anchor = spans[0][0] if spans else 0
        start = max(0, min(anchor - max_chars // 4, len(text) - max_chars))
        end = start + max_chars

    body = text[start:end]
    if style is not None:
        local = [(s - start, e - start) for s, e in spans if s < end and e > start]
        body = highlight_ranges(body, local, style=style)

    prefix = ELLIPSIS if start > 0 else ""
    suffix = ELLIPSIS if end < len(text) else ""
    return f"{prefix}{body}{suffix}"
