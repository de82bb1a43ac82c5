"""Report stage - render signals, narratives and build ideas into a standalone HTML page."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from jinja2 import BaseLoader, Environment, select_autoescape
from solscout.schemas.narratives import BuildIdea, Narrative
from solscout.schemas.signals import Signal

logger = logging.getLogger(__name__)

ENV = Environment(
    loader=BaseLoader(),
    autoescape=select_autoescape(default_for_string=True, default=True),
    trim_blocks=True,
    lstrip_blocks=True,
)

REPORT_TEMPLATE = ENV.from_string(
    """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>Solana Narrative Report</title>
<script src="https://cdn.tailwindcss.com"></script>
</head>
<body class="bg-gray-950 text-gray-100">
<main class="max-w-5xl mx-auto p-8 space-y-12">
<header>
  <h1 class="text-3xl font-bold">Solana Narrative Report</h1>
  <p class="text-gray-400">Generated {{ generated_at }} &middot; {{ total_signals }} signals from {{ source_count }} sources</p>
</header>

<section>
  <h2 class="text-2xl font-semibold mb-4">Narratives</h2>
  {% for n in narratives %}
  <article class="narrative border border-gray-800 rounded p-4 mb-4">
    <h3 class="text-xl font-semibold">{{ n.title }}</h3>
    <p class="text-sm"><span class="{{ n.trend_class }}">{{ n.trend }}</span> &middot; confidence {{ n.confidence_pct }}% &middot; {{ n.signal_count }} supporting signals</p>
    <p class="mt-2">{{ n.summary }}</p>
    {% if n.metrics %}
    <ul class="mt-2 text-sm text-gray-400">
      {% for m in n.metrics %}<li>{{ m }}</li>{% endfor %}
    </ul>
    {% endif %}
  </article>
  {% else %}
  <p class="text-gray-400">No narratives identified.</p>
  {% endfor %}
</section>

<section>
  <h2 class="text-2xl font-semibold mb-4">Build Ideas</h2>
  {% for i in build_ideas %}
  <article class="idea border border-gray-800 rounded p-4 mb-4">
    <h3 class="text-xl font-semibold">{{ i.title }}</h3>
    <p class="text-sm text-gray-400">Narrative: {{ i.narrative_title }}</p>
    <p class="mt-2">{{ i.description }}</p>
    <dl class="mt-2 text-sm">
      <dt class="font-semibold">Target user</dt><dd>{{ i.target_user }}</dd>
      <dt class="font-semibold">MVP scope</dt><dd>{{ i.mvp_scope }}</dd>
      <dt class="font-semibold">Competitive landscape</dt><dd>{{ i.competitive_landscape }}</dd>
      <dt class="font-semibold">Why now</dt><dd>{{ i.timing_rationale }}</dd>
    </dl>
  </article>
  {% else %}
  <p class="text-gray-400">No build ideas generated.</p>
  {% endfor %}
</section>

<section>
  <h2 class="text-2xl font-semibold mb-4">Signals</h2>
  <table class="w-full text-sm">
    <thead><tr><th>#</th><th>Source</th><th>Category</th><th>Signal</th><th>Metrics</th></tr></thead>
    <tbody>
    {% for s in signals %}
      <tr class="signal border-t border-gray-800">
        <td>{{ s.index }}</td>
        <td>{{ s.source }}</td>
        <td>{{ s.category }}</td>
        <td>{% if s.url %}<a class="underline" href="{{ s.url }}">{{ s.title }}</a>{% else %}{{ s.title }}{% endif %}<br><span class="text-gray-400">{{ s.description }}</span></td>
        <td>{{ s.metrics | join(", ") }}</td>
      </tr>
    {% endfor %}
    </tbody>
  </table>
</section>
</main>
</body>
</html>
"""
)


def build_report_context(
    signals: list[Signal],
    narratives: list[Narrative],
    build_ideas: list[BuildIdea],
    generated_at: datetime | None = None,
) -> dict[str, Any]:
    generated = generated_at or datetime.now(UTC)
    return {
        "generated_at": generated.strftime("%Y-%m-%d %H:%M UTC"),
        "total_signals": len(signals),
        "source_count": len({s.source for s in signals}),
        "narratives": [
            {
                "title": n.title,
                "summary": n.summary,
                "confidence_pct": int(n.confidence * 100),
                "trend": n.trend.value,
                "trend_class": n.trend.css_class,
                "signal_count": len(n.supporting_signals),
                "metrics": [m.display() for m in n.key_metrics],
            }
            for n in narratives
        ],
        "build_ideas": [
            {
                "title": i.title,
                "description": i.description,
                "target_user": i.target_user,
                "mvp_scope": i.mvp_scope,
                "competitive_landscape": i.competitive_landscape,
                "timing_rationale": i.timing_rationale,
                "narrative_title": (
                    narratives[i.narrative_index].title
                    if 0 <= i.narrative_index < len(narratives)
                    else "Unknown"
                ),
            }
            for i in build_ideas
        ],
        "signals": [
            {
                "index": index,
                "source": s.source.label,
                "category": s.category,
                "title": s.title,
                "description": s.description,
                "metrics": [m.display() for m in s.metrics],
                "url": s.url or "",
            }
            for index, s in enumerate(signals)
        ],
    }


def render_report(
    signals: list[Signal],
    narratives: list[Narrative],
    build_ideas: list[BuildIdea],
    *,
    generated_at: datetime | None = None,
) -> str:
    return REPORT_TEMPLATE.render(
        **build_report_context(signals, narratives, build_ideas, generated_at)
    )


def write_report(path: str | Path, html: str) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(html, encoding="utf-8")
    logger.info("Report written to %s", target)
    return target
