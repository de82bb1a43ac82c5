"""GitHub developer-activity collector."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import Any
from urllib.parse import urlencode

from solscout.errors import SolscoutError
from solscout.schemas.signals import Metric, Signal, SignalSource
from solscout.services.http_client import HttpClient
from solscout.services.pipeline_settings import GitHubSettings, GitHubTopic, TrackedRepo

logger = logging.getLogger(__name__)


def _headers(token: str | None) -> dict[str, str]:
    headers = {"Accept": "application/vnd.github+json", "X-GitHub-Api-Version": "2022-11-28"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


async def _topic_signal(
    http: HttpClient,
    settings: GitHubSettings,
    topic: GitHubTopic,
    headers: dict[str, str],
) -> Signal:
    since = (datetime.now(UTC) - timedelta(days=settings.lookback_days)).date().isoformat()
    query = f"{topic.query} created:>={since}"
    data = await http.get_json(
        f"{settings.api_url.rstrip('/')}/search/repositories",
        params={"q": query, "sort": "stars", "order": "desc", "per_page": settings.per_page},
        headers=headers,
    )
    items = [item for item in data.get("items", []) if isinstance(item, dict)]
    total = int(data.get("total_count", len(items)))
    stars = sum(int(item.get("stargazers_count", 0) or 0) for item in items)
    top = ", ".join(
        f"{item.get('full_name', '?')} ({item.get('stargazers_count', 0)} stars)" for item in items[:5]
    )
    return Signal(
        source=SignalSource.GITHUB,
        category=topic.category,
        title=f"{total} new '{topic.query}' repositories in the last {settings.lookback_days} days",
        description=f"Top new repositories: {top}" if top else "No notable new repositories.",
        metrics=[
            Metric(name="new_repos", value=float(total), unit="repos"),
            Metric(name="stars", value=float(stars), unit="stars"),
        ],
        url="https://github.com/search?" + urlencode({"q": query, "type": "repositories"}),
    )


async def _repo_signal(
    http: HttpClient,
    settings: GitHubSettings,
    repo: TrackedRepo,
    headers: dict[str, str],
) -> Signal:
    data: dict[str, Any] = await http.get_json(
        f"{settings.api_url.rstrip('/')}/repos/{repo.full_name}", headers=headers
    )
    stars = int(data.get("stargazers_count", 0) or 0)
    forks = int(data.get("forks_count", 0) or 0)
    issues = int(data.get("open_issues_count", 0) or 0)
    return Signal(
        source=SignalSource.GITHUB,
        category=repo.category,
        title=f"{repo.full_name}: {stars} stars, {forks} forks",
        description=(
            f"{data.get('description') or 'No description.'} "
            f"Last push {data.get('pushed_at', 'unknown')}, {issues} open issues."
        ),
        metrics=[
            Metric(name="stars", value=float(stars), unit="stars"),
            Metric(name="forks", value=float(forks), unit="forks"),
            Metric(name="open_issues", value=float(issues), unit="issues"),
        ],
        url=data.get("html_url") or f"https://github.com/{repo.full_name}",
    )


async def collect(settings: GitHubSettings, http: HttpClient, token: str | None = None) -> list[Signal]:
    """One signal per topic search and per tracked repository.

    Individual lookups that fail are skipped; if every lookup fails the
    last error is raised so the source counts as failed.
    """
    headers = _headers(token)
    signals: list[Signal] = []
    attempted = 0
    last_error: SolscoutError | None = None

    for topic in settings.topics:
        attempted += 1
        try:
            signals.append(await _topic_signal(http, settings, topic, headers))
        except SolscoutError as e:
            logger.warning("GitHub search '%s' failed: %s", topic.query, e)
            last_error = e

    for repo in settings.tracked_repos:
        attempted += 1
        try:
            signals.append(await _repo_signal(http, settings, repo, headers))
        except SolscoutError as e:
            logger.warning("GitHub repo %s failed: %s", repo.full_name, e)
            last_error = e

    if attempted and not signals and last_error is not None:
        raise last_error
    logger.info("Collected GitHub signals: %d", len(signals))
    return signals
