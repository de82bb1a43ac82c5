"""Pipeline orchestrator - collect, aggregate, synthesize, ideate, render."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path

from solscout.config import Settings, get_settings
from solscout.schemas.narratives import BuildIdea, Narrative
from solscout.schemas.signals import Signal, SignalGroup, SignalSource
from solscout.services.http_client import HttpClient
from solscout.services.llm_client import LLMClient, build_llm_client
from solscout.services.pipeline_settings import PipelineSettings, load_pipeline_settings

from pipeline.sources import github, social, solana_rpc
from pipeline.stages.aggregation_stage import run_aggregation_stage
from pipeline.stages.collection_stage import CollectorFn, run_collection_stage
from pipeline.stages.ideas_stage import run_ideas_stage
from pipeline.stages.narrative_stage import run_narrative_stage
from pipeline.stages.report_stage import render_report, write_report

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    signals: list[Signal]
    groups: list[SignalGroup]
    narratives: list[Narrative]
    build_ideas: list[BuildIdea]
    report_path: Path | None = None
    stage_seconds: dict[str, float] = field(default_factory=dict)

    @property
    def source_count(self) -> int:
        return len({s.source for s in self.signals})


def build_collectors(
    settings: Settings,
    pipeline_settings: PipelineSettings,
    http: HttpClient,
) -> list[tuple[SignalSource, CollectorFn]]:
    """Enabled collectors in their fixed merge order: GitHub, Solana, Social."""
    collectors: list[tuple[SignalSource, CollectorFn]] = []
    if pipeline_settings.github.enabled:
        collectors.append(
            (
                SignalSource.GITHUB,
                partial(github.collect, pipeline_settings.github, http, settings.github_token or None),
            )
        )
    if pipeline_settings.solana.enabled:
        collectors.append(
            (SignalSource.SOLANA_ONCHAIN, partial(solana_rpc.collect, pipeline_settings.solana, http))
        )
    if pipeline_settings.social.enabled:
        collectors.append((SignalSource.SOCIAL, partial(social.collect, pipeline_settings.social, http)))
    return collectors


async def collect_signals(
    settings: Settings | None = None,
    pipeline_settings: PipelineSettings | None = None,
    *,
    http: HttpClient | None = None,
    require_signals: bool = False,
) -> list[Signal]:
    """Run only the collection stage."""
    settings = settings or get_settings()
    pipeline_settings = pipeline_settings or load_pipeline_settings()
    own_http = http is None
    http = http or HttpClient(user_agent=settings.user_agent, timeout=settings.http_timeout)
    try:
        return await run_collection_stage(
            build_collectors(settings, pipeline_settings, http),
            timeout=settings.collector_timeout,
            require_signals=require_signals,
        )
    finally:
        if own_http:
            await http.close()


async def run_pipeline(
    settings: Settings | None = None,
    pipeline_settings: PipelineSettings | None = None,
    *,
    output_path: str | Path | None = None,
    llm: LLMClient | None = None,
    http: HttpClient | None = None,
) -> PipelineResult:
    """Run the full batch pipeline once.

    Each stage consumes the complete output of the previous one; any
    failure other than a single collector's propagates to the caller.
    """
    settings = settings or get_settings()
    pipeline_settings = pipeline_settings or load_pipeline_settings()
    pipeline_settings.validate_for_run()

    own_http = http is None
    own_llm = llm is None
    http = http or HttpClient(user_agent=settings.user_agent, timeout=settings.http_timeout)
    stage_seconds: dict[str, float] = {}
    try:
        llm = llm or build_llm_client(settings)

        started = time.monotonic()
        signals = await collect_signals(
            settings, pipeline_settings, http=http, require_signals=True
        )
        stage_seconds["collection"] = time.monotonic() - started

        started = time.monotonic()
        groups, signals_json = run_aggregation_stage(signals)
        stage_seconds["aggregation"] = time.monotonic() - started

        started = time.monotonic()
        narratives = await run_narrative_stage(llm, signals_json, signal_count=len(signals))
        stage_seconds["narratives"] = time.monotonic() - started

        started = time.monotonic()
        build_ideas = await run_ideas_stage(llm, narratives)
        stage_seconds["ideas"] = time.monotonic() - started

        html = render_report(signals, narratives, build_ideas)
        report_path = write_report(output_path or pipeline_settings.output.path, html)
    finally:
        if own_llm and llm is not None:
            await llm.close()
        if own_http:
            await http.close()

    logger.info(
        "Pipeline stage timings: %s",
        ", ".join(f"{name}={seconds:.1f}s" for name, seconds in stage_seconds.items()),
    )
    return PipelineResult(
        signals=signals,
        groups=groups,
        narratives=narratives,
        build_ideas=build_ideas,
        report_path=report_path,
        stage_seconds=stage_seconds,
    )
