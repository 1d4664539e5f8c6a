"""
Fuzzy search package.

This package provides a pure-Python fuzzy matching stack:
- pattern: Query compilation (case folding, terms, bitap tables)
- schema: Field definitions and dotted-path extraction
- fuzzy: Approximate matcher (bitap, bounded Levenshtein) and scoring
- ranking: Per-record aggregation, threshold filtering and ordering
- index: Immutable search index and its builder
- snippet: Highlighting of matched ranges
"""
