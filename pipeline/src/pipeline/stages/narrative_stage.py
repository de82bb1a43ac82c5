"""Narrative stage - first LLM pass turning aggregated signals into ranked narratives."""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field
from solscout.schemas.narratives import Narrative
from solscout.schemas.signals import Metric
from solscout.services.llm_client import LLMClient

from pipeline.prompts.narratives import SYSTEM_PROMPT, build_synthesis_message

logger = logging.getLogger(__name__)


class RawNarrative(BaseModel):
    """Narrative exactly as the model returns it; no domain checks yet."""

    title: str
    summary: str
    confidence: float
    supporting_signals: list[int]
    trend: str | None = None
    key_metrics: list[Metric] = Field(default_factory=list)


class SynthesisResponse(BaseModel):
    narratives: list[RawNarrative]


def _to_narrative(raw: RawNarrative, signal_count: int) -> Narrative:
    return Narrative.model_validate(raw.model_dump(), context={"signal_count": signal_count})


async def run_narrative_stage(
    llm: LLMClient,
    signals_json: str,
    *,
    signal_count: int,
) -> list[Narrative]:
    """Identify narratives, preserving the order the model returned them in.

    Confidence is clamped, unknown trends become ``Emerging`` and
    supporting indices outside ``[0, signal_count)`` are dropped.
    """
    logger.info("Sending %d signals to LLM for narrative identification", signal_count)
    response = await llm.complete_as(
        SYSTEM_PROMPT, build_synthesis_message(signals_json), SynthesisResponse
    )
    narratives = [_to_narrative(raw, signal_count) for raw in response.narratives]
    logger.info("Identified narratives: %d", len(narratives))
    return narratives
