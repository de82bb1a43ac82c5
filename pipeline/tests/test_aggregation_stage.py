"""Tests for category normalization and signal aggregation."""

import json
import logging

import pytest
from solscout.schemas.signals import SignalSource

from pipeline.stages.aggregation_stage import (
    aggregate,
    normalize_category,
    run_aggregation_stage,
    signals_to_digest,
)

GITHUB = SignalSource.GITHUB
SOLANA = SignalSource.SOLANA_ONCHAIN
SOCIAL = SignalSource.SOCIAL


@pytest.mark.parametrize(
    ("raw", "canonical"),
    [
        ("DeFi", "DeFi"),
        ("decentralized finance", "DeFi"),
        ("DECENTRALIZED FINANCE", "DeFi"),
        ("nfts", "NFT"),
        ("Non-Fungible Tokens", "NFT"),
        ("depin", "DePIN"),
        ("GameFi", "Gaming"),
        ("real-world assets", "RWA"),
        ("daos", "DAO"),
        ("  defi ", "DeFi"),
        ("Network Performance", "Network Performance"),
        ("Blog: Helius", "Blog: Helius"),
    ],
)
def test_normalize_category(raw, canonical):
    assert normalize_category(raw) == canonical


@pytest.mark.parametrize(
    "raw",
    ["DeFi", "defi", "nft", "DePIN", "gaming", "RWA", "DAO", "Token Economics", " padded ", ""],
)
def test_normalize_category_is_idempotent(raw):
    once = normalize_category(raw)
    assert normalize_category(once) == once


def test_three_spellings_from_three_sources_form_one_group(make_signal):
    signals = [
        make_signal(GITHUB, "DeFi"),
        make_signal(SOLANA, "decentralized finance"),
        make_signal(SOCIAL, "defi"),
    ]
    groups = aggregate(signals)
    assert len(groups) == 1
    assert groups[0].category == "DeFi"
    assert groups[0].source_diversity == 3
    assert groups[0].total_signals == 3
    assert groups[0].signals == [0, 1, 2]


def test_every_signal_belongs_to_exactly_one_group(make_signal):
    signals = [
        make_signal(GITHUB, "DeFi"),
        make_signal(SOLANA, "NFT"),
        make_signal(SOLANA, "nfts"),
        make_signal(SOCIAL, "Blog: A"),
        make_signal(GITHUB, "AI Agents"),
        make_signal(SOLANA, "defi"),
    ]
    groups = aggregate(signals)
    assert sum(g.total_signals for g in groups) == len(signals)
    members = sorted(i for g in groups for i in g.signals)
    assert members == list(range(len(signals)))


def test_aggregate_empty_input():
    assert aggregate([]) == []


def test_ranking_by_diversity_then_size_then_name(make_signal):
    signals = [
        make_signal(SOLANA, "Zeta"),
        make_signal(SOLANA, "Zeta"),
        make_signal(SOLANA, "Zeta"),
        make_signal(GITHUB, "Beta"),
        make_signal(SOLANA, "Alpha"),
        make_signal(GITHUB, "DeFi"),
        make_signal(SOCIAL, "DeFi"),
    ]
    assert [g.category for g in aggregate(signals)] == ["DeFi", "Zeta", "Alpha", "Beta"]


def test_aggregate_is_deterministic(make_signal):
    signals = [
        make_signal(GITHUB, "b", metrics=[("stars", 1, "stars")]),
        make_signal(SOLANA, "a", metrics=[("stars", 2, "stars")]),
        make_signal(SOCIAL, "c"),
        make_signal(GITHUB, "a", metrics=[("stars", 3, "stars")]),
    ]
    assert aggregate(signals) == aggregate(list(signals))


def test_metric_roll_up_sums_by_name_keeping_first_unit(make_signal, caplog):
    signals = [
        make_signal(GITHUB, "DeFi", metrics=[("stars", 10, "stars"), ("tvl", 1.5, "M USD")]),
        make_signal(SOLANA, "defi", metrics=[("stars", 5, "stars")]),
        make_signal(SOCIAL, "DeFi", metrics=[("tvl", 500, "K USD")]),
    ]
    with caplog.at_level(logging.WARNING):
        (group,) = aggregate(signals)
    by_name = {m.name: m for m in group.key_metrics}
    assert [m.name for m in group.key_metrics] == ["stars", "tvl"]
    assert by_name["stars"].value == 15
    assert by_name["stars"].unit == "stars"
    assert by_name["tvl"].value == 501.5
    assert by_name["tvl"].unit == "M USD"
    assert "Unit mismatch for metric 'tvl'" in caplog.text


def test_digest_shape(make_signal):
    signals = [
        make_signal(SOLANA, "Network State", title="Epoch 700", metrics=[("epoch", 700, "")]),
        make_signal(GITHUB, "DeFi", title="repos"),
        make_signal(SOCIAL, "defi", title="blog"),
    ]
    groups = aggregate(signals)
    digest = signals_to_digest(signals, groups)

    assert [d["category"] for d in digest] == ["DeFi", "Network State"]
    assert digest[0]["signal_count"] == 2
    assert digest[0]["source_diversity"] == 2
    first = digest[0]["signals"][0]
    assert first["index"] == 1
    assert first["source"] == "GitHub"
    assert first["url"] is None
    assert first["timestamp"] == "2026-02-13T00:00:00+00:00"
    assert digest[1]["signals"][0]["metrics"] == [{"name": "epoch", "value": 700.0, "unit": ""}]
    assert digest[1]["signals"][0]["source"] == "Solana Onchain"


def test_run_aggregation_stage_returns_json_digest(make_signal):
    signals = [make_signal(GITHUB, "DeFi")]
    groups, signals_json = run_aggregation_stage(signals)
    assert json.loads(signals_json) == signals_to_digest(signals, groups)
