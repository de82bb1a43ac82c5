"""Integration test configuration."""

from datetime import UTC, datetime

import pytest
from solscout.schemas.signals import Metric, Signal, SignalSource


@pytest.fixture
def fixed_time():
    return datetime(2026, 2, 13, 5, 0, tzinfo=UTC)


@pytest.fixture
def sample_signals(fixed_time):
    """One DeFi story seen from all three origins plus an unrelated network signal."""
    return [
        Signal(
            source=SignalSource.GITHUB,
            category="DeFi",
            title="42 new 'solana defi' repositories in the last 30 days",
            description="Top new repositories: acme/vault (120 stars)",
            metrics=[Metric(name="new_repos", value=42, unit="repos")],
            url="https://github.com/search?q=solana+defi",
            timestamp=fixed_time,
        ),
        Signal(
            source=SignalSource.SOLANA_ONCHAIN,
            category="decentralized finance",
            title="Raydium AMM v4: 100 recent transactions",
            description="Program Raydium AMM v4 had 100 transactions in recent history.",
            metrics=[Metric(name="recent_tx_count", value=100, unit="txs")],
            timestamp=fixed_time,
        ),
        Signal(
            source=SignalSource.SOCIAL,
            category="defi",
            title="Helius Blog: 12 recent articles (7 Solana-related)",
            description="Recent topics: Liquid staking on Solana",
            metrics=[Metric(name="total_articles", value=12, unit="articles")],
            url="https://www.helius.dev/blog",
            timestamp=fixed_time,
        ),
        Signal(
            source=SignalSource.SOLANA_ONCHAIN,
            category="Network Performance",
            title="Solana TPS: 4000 total, 900 non-vote",
            description="Average over 10 recent samples.",
            metrics=[Metric(name="avg_tps", value=4000.0, unit="tx/s")],
            url="https://explorer.solana.com/",
            timestamp=fixed_time,
        ),
    ]
