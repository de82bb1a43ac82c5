"""Pipeline entry point for running as a module: python -m pipeline."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from solscout.config import LLMProvider, Settings, get_settings
from solscout.services.pipeline_settings import load_pipeline_settings

from pipeline.orchestrator import collect_signals, run_pipeline

logger = logging.getLogger("pipeline")


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m pipeline",
        description="Solana narrative detection and idea generation tool.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Run the full narrative pipeline and write the HTML report.")
    run.add_argument("-c", "--config", default="config.toml", help="Path to config file.")
    run.add_argument("-o", "--output", default=None, help="Output path for the HTML report.")
    run.add_argument(
        "--provider",
        choices=[p.value for p in LLMProvider],
        default=None,
        help="LLM provider override.",
    )
    run.add_argument("--model", default=None, help="LLM model override.")

    signals = sub.add_parser("signals", help="Collect signals only and print them as JSON.")
    signals.add_argument("-c", "--config", default="config.toml", help="Path to config file.")
    return parser


def _apply_overrides(settings: Settings, provider: str | None, model: str | None) -> Settings:
    update: dict[str, object] = {}
    if provider:
        update["llm_provider"] = LLMProvider(provider)
    if model:
        update["llm_model"] = model
    return settings.model_copy(update=update) if update else settings


async def _run(args: argparse.Namespace) -> None:
    settings = _apply_overrides(get_settings(), args.provider, args.model)
    pipeline_settings = load_pipeline_settings(args.config)
    result = await run_pipeline(settings, pipeline_settings, output_path=args.output)

    print(f"Report generated: {result.report_path}")
    print(f"  {len(result.signals)} signals from {result.source_count} sources")
    print(f"  {len(result.narratives)} narratives identified")
    print(f"  {len(result.build_ideas)} build ideas generated")


async def _signals(args: argparse.Namespace) -> None:
    signals = await collect_signals(get_settings(), load_pipeline_settings(args.config))
    print(json.dumps([s.model_dump(mode="json") for s in signals], indent=2))


def main(argv: list[str] | None = None) -> int:
    args = _parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, get_settings().log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        stream=sys.stderr if args.command == "signals" else sys.stdout,
    )
    try:
        if args.command == "run":
            asyncio.run(_run(args))
        else:
            asyncio.run(_signals(args))
    except Exception as exc:
        logger.error("Pipeline failed: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
