"""Centralized configuration for classroom-search using Pydantic Settings."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from classroom_search.search.fuzzy import ScoringWeights


CombinePolicy = Literal["best", "weightedAverage"]


class SearchSettings(BaseSettings):
    """Strictly typed search configuration loaded from environment variables.

    Every field can be overridden with a ``CLASSROOM_SEARCH_`` prefixed
    variable (e.g. ``CLASSROOM_SEARCH_THRESHOLD=0.3``) or a ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_prefix="CLASSROOM_SEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    # Matching
    threshold: float = Field(
        default=0.4, gt=0.0, le=1.0, description="Maximum score (0 = perfect) for a record to be returned"
    )
    combine: CombinePolicy = Field(
        default="best", description="How field scores combine: best field wins, or weighted average"
    )
    max_pattern_length: int = Field(
        default=32, ge=1, le=64, description="Longest query term matched with bitap; longer terms use a DP fallback"
    )

    # Scoring weights
    edit_weight: float = Field(default=1.0, gt=0.0, description="Weight of edits / term length in the score")
    position_weight: float = Field(default=0.1, ge=0.0, description="Weight of match start / text length")
    max_edit_ratio: float = Field(
        default=0.5, gt=0.0, le=1.0, description="Cap on edits as a fraction of the term length"
    )

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON logs")

    def scoring(self) -> ScoringWeights:
        """Score formula constants for the matcher."""
        return ScoringWeights(
            edit_weight=self.edit_weight,
            position_weight=self.position_weight,
            max_edit_ratio=self.max_edit_ratio,
        )
