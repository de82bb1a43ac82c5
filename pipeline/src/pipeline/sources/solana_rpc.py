"""Solana on-chain metrics collector over JSON-RPC."""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import BaseModel, Field, ValidationError
from solscout.errors import ApiError, SolscoutError
from solscout.schemas.signals import Metric, Signal, SignalSource
from solscout.services.http_client import HttpClient
from solscout.services.pipeline_settings import SolanaSettings

logger = logging.getLogger(__name__)

EXPLORER_URL = "https://explorer.solana.com/"
LAMPORTS_PER_SOL = 1_000_000_000


class PerformanceSample(BaseModel):
    num_transactions: int = Field(alias="numTransactions")
    num_non_vote_transactions: int | None = Field(default=None, alias="numNonVoteTransactions")
    num_slots: int = Field(alias="numSlots")
    sample_period_secs: int = Field(alias="samplePeriodSecs")


class EpochInfo(BaseModel):
    epoch: int
    slot_index: int = Field(alias="slotIndex")
    slots_in_epoch: int = Field(alias="slotsInEpoch")
    absolute_slot: int = Field(alias="absoluteSlot")
    transaction_count: int | None = Field(default=None, alias="transactionCount")


class SupplyValue(BaseModel):
    total: int
    circulating: int
    non_circulating: int = Field(alias="nonCirculating")


async def rpc_call(http: HttpClient, rpc_url: str, method: str, params: list[Any]) -> Any:
    """Issue one JSON-RPC 2.0 request and return its ``result``."""
    body = json.dumps({"jsonrpc": "2.0", "id": 1, "method": method, "params": params})
    raw = await http.post_json_raw(rpc_url, body)
    try:
        response = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ApiError(f"parse RPC {method}: {exc}", url=rpc_url) from exc
    error = response.get("error") if isinstance(response, dict) else None
    if error:
        message = error.get("message", error) if isinstance(error, dict) else error
        raise ApiError(f"solana-rpc {method}: {message}", url=rpc_url)
    if not isinstance(response, dict) or response.get("result") is None:
        raise ApiError(f"RPC response for {method} missing result", url=rpc_url)
    return response["result"]


def _performance_signal(samples: list[PerformanceSample]) -> Signal | None:
    samples = [s for s in samples if s.sample_period_secs > 0]
    if not samples:
        return None
    avg_tps = sum(s.num_transactions / s.sample_period_secs for s in samples) / len(samples)
    avg_non_vote_tps = sum(
        s.num_non_vote_transactions / s.sample_period_secs
        for s in samples
        if s.num_non_vote_transactions is not None
    ) / len(samples)
    return Signal(
        source=SignalSource.SOLANA_ONCHAIN,
        category="Network Performance",
        title=f"Solana TPS: {avg_tps:.0f} total, {avg_non_vote_tps:.0f} non-vote",
        description=(
            f"Average over {len(samples)} recent samples. Non-vote TPS indicates real user "
            "activity vs consensus overhead."
        ),
        metrics=[
            Metric(name="avg_tps", value=avg_tps, unit="tx/s"),
            Metric(name="avg_non_vote_tps", value=avg_non_vote_tps, unit="tx/s"),
        ],
        url=EXPLORER_URL,
    )


def _epoch_signal(epoch: EpochInfo) -> Signal:
    progress = epoch.slot_index / epoch.slots_in_epoch * 100.0 if epoch.slots_in_epoch else 0.0
    tx_note = (
        f" Total transactions: {epoch.transaction_count}"
        if epoch.transaction_count is not None
        else ""
    )
    return Signal(
        source=SignalSource.SOLANA_ONCHAIN,
        category="Network State",
        title=f"Epoch {epoch.epoch} - {progress:.1f}% complete",
        description=(
            f"Slot {epoch.slot_index}/{epoch.slots_in_epoch}, "
            f"absolute slot {epoch.absolute_slot}.{tx_note}"
        ),
        metrics=[
            Metric(name="epoch", value=float(epoch.epoch)),
            Metric(name="epoch_progress", value=progress, unit="%"),
            Metric(name="absolute_slot", value=float(epoch.absolute_slot), unit="slot"),
        ],
        url=EXPLORER_URL,
    )


def _supply_signal(supply: SupplyValue) -> Signal:
    circulating_sol = supply.circulating / LAMPORTS_PER_SOL
    circulating_pct = supply.circulating / supply.total * 100.0 if supply.total else 0.0
    return Signal(
        source=SignalSource.SOLANA_ONCHAIN,
        category="Token Economics",
        title=f"SOL Supply: {circulating_sol / 1e6:.1f}M circulating ({circulating_pct:.1f}%)",
        description=(
            f"Total: {supply.total / LAMPORTS_PER_SOL / 1e6:.1f}M SOL, "
            f"Circulating: {circulating_sol / 1e6:.1f}M SOL, "
            f"Non-circulating: {supply.non_circulating / LAMPORTS_PER_SOL / 1e6:.1f}M SOL"
        ),
        metrics=[
            Metric(name="circulating_sol", value=circulating_sol, unit="SOL"),
            Metric(name="circulating_pct", value=circulating_pct, unit="%"),
        ],
    )


async def collect(settings: SolanaSettings, http: HttpClient) -> list[Signal]:
    """Network performance, epoch and supply signals plus per-program activity.

    The three network-level calls are required; a tracked program whose
    lookup fails is skipped.
    """
    rpc_url = settings.rpc_url
    signals: list[Signal] = []

    try:
        samples_raw = await rpc_call(
            http, rpc_url, "getRecentPerformanceSamples", [settings.performance_samples]
        )
        samples = [PerformanceSample.model_validate(s) for s in samples_raw]
        epoch = EpochInfo.model_validate(await rpc_call(http, rpc_url, "getEpochInfo", []))
        supply_raw = await rpc_call(http, rpc_url, "getSupply", [])
        supply = SupplyValue.model_validate(supply_raw["value"])
    except (ValidationError, KeyError, TypeError) as exc:
        raise ApiError(f"Unexpected Solana RPC payload: {exc}", url=rpc_url) from exc

    performance = _performance_signal(samples)
    if performance is not None:
        signals.append(performance)
    signals.append(_epoch_signal(epoch))
    signals.append(_supply_signal(supply))

    for program in settings.tracked_programs:
        try:
            signatures = await rpc_call(
                http,
                rpc_url,
                "getSignaturesForAddress",
                [program.address, {"limit": settings.signature_limit}],
            )
        except SolscoutError as e:
            logger.warning("Failed to get program activity for %s: %s", program.name, e)
            continue
        count = len(signatures) if isinstance(signatures, list) else 0
        signals.append(
            Signal(
                source=SignalSource.SOLANA_ONCHAIN,
                category=program.category,
                title=f"{program.name}: {count} recent transactions",
                description=(
                    f"Program {program.name} ({program.address}) had {count} transactions "
                    "in recent history."
                ),
                metrics=[Metric(name="recent_tx_count", value=float(count), unit="txs")],
                url=f"https://explorer.solana.com/address/{program.address}",
            )
        )

    logger.info("Collected Solana onchain signals: %d", len(signals))
    return signals
