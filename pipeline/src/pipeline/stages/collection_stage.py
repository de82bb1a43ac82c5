"""Collection stage - run every source collector concurrently and merge the results."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence

from solscout.errors import NoSignalsError
from solscout.schemas.signals import Signal, SignalSource

logger = logging.getLogger(__name__)

CollectorFn = Callable[[], Awaitable[list[Signal]]]


async def _run_collector(source: SignalSource, collector: CollectorFn, timeout: float | None) -> list[Signal]:
    try:
        return await asyncio.wait_for(collector(), timeout=timeout)
    except TimeoutError as exc:
        raise TimeoutError(f"{source.label} collector timed out after {timeout}s") from exc


async def run_collection_stage(
    collectors: Sequence[tuple[SignalSource, CollectorFn]],
    *,
    timeout: float | None = None,
    require_signals: bool = True,
) -> list[Signal]:
    """Run collectors concurrently; merge in collector order, not completion order.

    A failing collector is logged and excluded. When nothing at all was
    collected ``NoSignalsError`` is raised unless ``require_signals`` is off.
    """
    logger.info("Collecting signals from %d sources", len(collectors))
    results = await asyncio.gather(
        *(_run_collector(source, collector, timeout) for source, collector in collectors),
        return_exceptions=True,
    )

    signals: list[Signal] = []
    for (source, _), result in zip(collectors, results):
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                raise result
            logger.error("%s collection failed: %s", source.label, result)
            continue
        logger.info("%s signals collected: %d", source.label, len(result))
        signals.extend(result)

    if not signals and require_signals:
        raise NoSignalsError(
            "No signals collected from any source. Check API keys and network connectivity."
        )
    logger.info("Total signals collected: %d", len(signals))
    return signals
