"""Pydantic schemas for collected signals and their aggregated groups."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SignalSource(str, Enum):
    """Origin of a signal. Declaration order is the fixed collection order."""

    GITHUB = "GitHub"
    SOLANA_ONCHAIN = "SolanaOnchain"
    SOCIAL = "Social"

    @property
    def label(self) -> str:
        return _SOURCE_LABELS[self]


_SOURCE_LABELS = {
    SignalSource.GITHUB: "GitHub",
    SignalSource.SOLANA_ONCHAIN: "Solana Onchain",
    SignalSource.SOCIAL: "Social",
}


class Metric(BaseModel):
    """A named numeric measurement."""

    model_config = ConfigDict(frozen=True)

    name: str
    value: float
    unit: str = ""

    def display(self) -> str:
        if not self.unit:
            return f"{self.name}: {self.value:.1f}"
        return f"{self.name}: {self.value:.1f} {self.unit}"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Signal(BaseModel):
    """One timestamped fact from one origin.

    The position of a signal in the collected list is its index; every
    later structure refers to signals by that index.
    """

    model_config = ConfigDict(frozen=True)

    source: SignalSource
    category: str
    title: str
    description: str
    metrics: list[Metric] = Field(default_factory=list)
    url: str | None = None
    timestamp: datetime = Field(default_factory=_utcnow)


class SignalGroup(BaseModel):
    """Signals sharing a normalized category, with cross-source statistics."""

    category: str
    signals: list[int]
    source_diversity: int
    total_signals: int
    key_metrics: list[Metric] = Field(default_factory=list)
