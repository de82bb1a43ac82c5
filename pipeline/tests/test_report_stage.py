"""Tests for HTML report rendering."""

from datetime import UTC, datetime

from solscout.schemas.narratives import BuildIdea, Narrative, TrendDirection
from solscout.schemas.signals import Metric, SignalSource

from pipeline.stages.report_stage import build_report_context, render_report, write_report


def _narrative(title="Liquid staking growth", trend=TrendDirection.ACCELERATING):
    return Narrative(
        title=title,
        summary="More SOL is staked through liquid tokens.",
        confidence=0.87,
        supporting_signals=[0, 1],
        trend=trend,
        key_metrics=[Metric(name="tvl", value=1.5, unit="B USD")],
    )


def _idea(narrative_index=0, title="LST yield tracker"):
    return BuildIdea(
        title=title,
        description="Compares liquid staking yields.",
        target_user="SOL holders",
        mvp_scope="Single dashboard",
        competitive_landscape="Spreadsheets",
        timing_rationale="LST share is rising",
        narrative_index=narrative_index,
    )


def test_render_includes_all_sections(make_signal):
    signals = [
        make_signal(title="Repo growth", metrics=[("stars", 12, "stars")]),
        make_signal(source=SignalSource.SOLANA_ONCHAIN, category="Network Performance", title="TPS"),
    ]
    html = render_report(
        signals, [_narrative()], [_idea()], generated_at=datetime(2026, 2, 13, 5, 30, tzinfo=UTC)
    )

    assert "Generated 2026-02-13 05:30 UTC" in html
    assert "2 signals from 2 sources" in html
    assert "Liquid staking growth" in html
    assert 'class="text-green-400">Accelerating<' in html
    assert "confidence 87%" in html
    assert "tvl: 1.5 B USD" in html
    assert "Narrative: Liquid staking growth" in html
    assert "Solana Onchain" in html
    assert "stars: 12.0 stars" in html


def test_render_escapes_model_text(make_signal):
    html = render_report(
        [make_signal()], [_narrative(title="<script>alert(1)</script>")], [], generated_at=None
    )
    assert "<script>alert(1)</script>" not in html
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html
    assert "No build ideas generated." in html


def test_idea_with_missing_narrative_shows_unknown(make_signal):
    context = build_report_context([make_signal()], [_narrative()], [_idea(narrative_index=5)])
    assert context["build_ideas"][0]["narrative_title"] == "Unknown"


def test_empty_report_has_placeholders():
    html = render_report([], [], [])
    assert "No narratives identified." in html
    assert "0 signals from 0 sources" in html


def test_write_report_creates_parent_directories(tmp_path):
    target = tmp_path / "nested" / "dir" / "report.html"
    written = write_report(target, "<html></html>")
    assert written == target
    assert target.read_text(encoding="utf-8") == "<html></html>"
