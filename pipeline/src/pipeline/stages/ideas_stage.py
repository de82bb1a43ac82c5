"""Ideas stage - second LLM pass turning narratives into build ideas."""

from __future__ import annotations

import json
import logging

from pydantic import BaseModel, ValidationError
from solscout.schemas.narratives import BuildIdea, Narrative
from solscout.services.llm_client import LLMClient

from pipeline.prompts.ideas import SYSTEM_PROMPT, build_ideas_message

logger = logging.getLogger(__name__)


class RawIdea(BaseModel):
    title: str
    description: str
    target_user: str
    mvp_scope: str
    competitive_landscape: str
    timing_rationale: str
    narrative_index: int


class IdeasResponse(BaseModel):
    ideas: list[RawIdea]


def narratives_to_json(narratives: list[Narrative]) -> str:
    return json.dumps([n.model_dump(mode="json") for n in narratives], indent=2)


async def run_ideas_stage(llm: LLMClient, narratives: list[Narrative]) -> list[BuildIdea]:
    """Generate build ideas; ideas pointing at a missing narrative are dropped."""
    logger.info("Generating build ideas for %d narratives", len(narratives))
    response = await llm.complete_as(
        SYSTEM_PROMPT, build_ideas_message(narratives_to_json(narratives)), IdeasResponse
    )

    ideas: list[BuildIdea] = []
    for raw in response.ideas:
        try:
            ideas.append(
                BuildIdea.model_validate(
                    raw.model_dump(), context={"narrative_count": len(narratives)}
                )
            )
        except ValidationError as exc:
            logger.warning("Dropping build idea '%s': %s", raw.title, exc.errors()[0]["msg"])
    logger.info("Generated build ideas: %d", len(ideas))
    return ideas
