"""Pydantic schemas for LLM-produced narratives and build ideas.

Both models accept a validation context carrying the length of the
sequence they point into (``signal_count`` / ``narrative_count``), so an
index the model invented is caught when the record is built:

    Narrative.model_validate(raw, context={"signal_count": len(signals)})
"""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from solscout.schemas.signals import Metric

logger = logging.getLogger(__name__)


class TrendDirection(str, Enum):
    ACCELERATING = "Accelerating"
    STABLE = "Stable"
    DECELERATING = "Decelerating"
    EMERGING = "Emerging"

    @classmethod
    def parse(cls, value: Any) -> TrendDirection:
        """Map free text onto a trend, defaulting to ``Emerging``."""
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().lower()
        return _TREND_ALIASES.get(key, cls.EMERGING)

    @property
    def css_class(self) -> str:
        return _TREND_CSS[self]


_TREND_ALIASES = {
    "accelerating": TrendDirection.ACCELERATING,
    "stable": TrendDirection.STABLE,
    "steady": TrendDirection.STABLE,
    "decelerating": TrendDirection.DECELERATING,
    "declining": TrendDirection.DECELERATING,
    "emerging": TrendDirection.EMERGING,
    "nascent": TrendDirection.EMERGING,
    "early": TrendDirection.EMERGING,
}

_TREND_CSS = {
    TrendDirection.ACCELERATING: "text-green-400",
    TrendDirection.STABLE: "text-blue-400",
    TrendDirection.DECELERATING: "text-red-400",
    TrendDirection.EMERGING: "text-yellow-400",
}


def _context_bound(info: ValidationInfo, key: str) -> int | None:
    context = info.context if isinstance(info.context, dict) else {}
    bound = context.get(key)
    return int(bound) if bound is not None else None


class Narrative(BaseModel):
    """A trend claim backed by signal indices."""

    title: str
    summary: str
    confidence: float
    supporting_signals: list[int] = Field(default_factory=list)
    trend: TrendDirection = TrendDirection.EMERGING
    key_metrics: list[Metric] = Field(default_factory=list)

    @field_validator("confidence")
    @classmethod
    def _clamp_confidence(cls, value: float) -> float:
        if math.isnan(value):
            return 0.0
        return min(max(value, 0.0), 1.0)

    @field_validator("trend", mode="before")
    @classmethod
    def _parse_trend(cls, value: Any) -> TrendDirection:
        return TrendDirection.parse(value)

    @field_validator("supporting_signals")
    @classmethod
    def _drop_unknown_signals(cls, value: list[int], info: ValidationInfo) -> list[int]:
        signal_count = _context_bound(info, "signal_count")
        if signal_count is None:
            return value
        kept = [index for index in value if 0 <= index < signal_count]
        if len(kept) != len(value):
            dropped = [index for index in value if not 0 <= index < signal_count]
            logger.warning(
                "Dropping out-of-range supporting signal indices %s (signal_count=%d)",
                dropped,
                signal_count,
            )
        return kept


class BuildIdea(BaseModel):
    """A product concept tied to one narrative."""

    title: str
    description: str
    target_user: str
    mvp_scope: str
    competitive_landscape: str
    timing_rationale: str
    narrative_index: int

    @field_validator("narrative_index")
    @classmethod
    def _check_narrative_index(cls, value: int, info: ValidationInfo) -> int:
        narrative_count = _context_bound(info, "narrative_count")
        if narrative_count is not None and not 0 <= value < narrative_count:
            raise ValueError(
                f"narrative_index {value} out of range for {narrative_count} narratives"
            )
        return value
