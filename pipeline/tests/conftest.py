"""Stage test configuration."""

from datetime import UTC, datetime

import pytest
from solscout.schemas.signals import Metric, Signal, SignalSource


@pytest.fixture
def make_signal():
    """Factory for signals; metrics given as (name, value, unit) tuples."""

    def _make(source=SignalSource.GITHUB, category="DeFi", title="signal", metrics=()):
        return Signal(
            source=source,
            category=category,
            title=title,
            description=f"{title} description",
            metrics=[Metric(name=n, value=v, unit=u) for n, v, u in metrics],
            timestamp=datetime(2026, 2, 13, tzinfo=UTC),
        )

    return _make
