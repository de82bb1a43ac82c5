"""Aggregation stage - group signals by category and rank by cross-source support."""

from __future__ import annotations

import json
import logging
from typing import Any

from solscout.schemas.signals import Metric, Signal, SignalGroup

logger = logging.getLogger(__name__)

CATEGORY_ALIASES = {
    "defi": "DeFi",
    "decentralized finance": "DeFi",
    "nft": "NFT",
    "nfts": "NFT",
    "non-fungible token": "NFT",
    "non-fungible tokens": "NFT",
    "depin": "DePIN",
    "decentralized physical infrastructure": "DePIN",
    "gaming": "Gaming",
    "gamefi": "Gaming",
    "game fi": "Gaming",
    "rwa": "RWA",
    "real world assets": "RWA",
    "real-world assets": "RWA",
    "dao": "DAO",
    "daos": "DAO",
    "decentralized autonomous organization": "DAO",
}


def normalize_category(category: str) -> str:
    """Map a free-text category onto its canonical label; unknown text passes through."""
    return CATEGORY_ALIASES.get(category.strip().lower(), category)


def _roll_up_metrics(category: str, signals: list[Signal], indices: list[int]) -> list[Metric]:
    sums: dict[str, float] = {}
    units: dict[str, str] = {}
    for index in indices:
        for metric in signals[index].metrics:
            if metric.name not in sums:
                sums[metric.name] = 0.0
                units[metric.name] = metric.unit
            elif metric.unit != units[metric.name]:
                # Summed anyway; the first contributing unit is kept.
                logger.warning(
                    "Unit mismatch for metric '%s' in category '%s': '%s' vs '%s'",
                    metric.name,
                    category,
                    units[metric.name],
                    metric.unit,
                )
            sums[metric.name] += metric.value
    return [Metric(name=name, value=value, unit=units[name]) for name, value in sums.items()]


def aggregate(signals: list[Signal]) -> list[SignalGroup]:
    """Partition signals by normalized category and rank the groups.

    Ordering: source diversity desc, then group size desc, then category
    name, so identical input always yields identical output.
    """
    by_category: dict[str, list[int]] = {}
    for index, signal in enumerate(signals):
        by_category.setdefault(normalize_category(signal.category), []).append(index)

    groups = [
        SignalGroup(
            category=category,
            signals=indices,
            source_diversity=len({signals[i].source for i in indices}),
            total_signals=len(indices),
            key_metrics=_roll_up_metrics(category, signals, indices),
        )
        for category, indices in by_category.items()
    ]
    groups.sort(key=lambda g: (-g.source_diversity, -g.total_signals, g.category))
    return groups


def signals_to_digest(signals: list[Signal], groups: list[SignalGroup]) -> list[dict[str, Any]]:
    """Build the serializable per-group summary sent to the synthesis stage."""
    digest: list[dict[str, Any]] = []
    for group in groups:
        details = []
        for index in group.signals:
            signal = signals[index]
            details.append(
                {
                    "index": index,
                    "source": signal.source.label,
                    "title": signal.title,
                    "description": signal.description,
                    "metrics": [
                        {"name": m.name, "value": m.value, "unit": m.unit} for m in signal.metrics
                    ],
                    "url": signal.url,
                    "timestamp": signal.timestamp.isoformat(),
                }
            )
        digest.append(
            {
                "category": group.category,
                "signal_count": group.total_signals,
                "source_diversity": group.source_diversity,
                "signals": details,
            }
        )
    return digest


def signals_to_json(signals: list[Signal], groups: list[SignalGroup]) -> str:
    return json.dumps(signals_to_digest(signals, groups), indent=2)


def run_aggregation_stage(signals: list[Signal]) -> tuple[list[SignalGroup], str]:
    groups = aggregate(signals)
    logger.info("Signal groups formed: %d from %d signals", len(groups), len(signals))
    for group in groups[:5]:
        logger.info(
            "Group '%s': %d signals across %d sources",
            group.category,
            group.total_signals,
            group.source_diversity,
        )
    return groups, signals_to_json(signals, groups)
