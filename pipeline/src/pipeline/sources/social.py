"""Public write-up collector: blogs scraped as HTML or read as RSS/Atom feeds."""

from __future__ import annotations

import logging
from urllib.parse import parse_qs, urlencode, urljoin, urlparse, urlunparse

import feedparser
from bs4 import BeautifulSoup
from solscout.errors import SolscoutError
from solscout.schemas.signals import Metric, Signal, SignalSource
from solscout.services.http_client import HttpClient
from solscout.services.pipeline_settings import SocialSettings, SocialSource

logger = logging.getLogger(__name__)

# Tried in order; the first selector that yields any article wins.
ARTICLE_SELECTORS = (
    "article h2 a",
    "article h3 a",
    ".post-title a",
    "h2.entry-title a",
    "a[class*='title']",
    "h2 a",
    "h3 a",
)
TRACKING_PARAMS = {"utm_source", "utm_medium", "utm_campaign", "ref", "fbclid", "gclid"}

Article = tuple[str, str]


def _normalize_url(url: str) -> str:
    p = urlparse(url)
    q = {k: v for k, v in parse_qs(p.query).items() if k.lower() not in TRACKING_PARAMS}
    return urlunparse(
        (
            p.scheme.lower(),
            p.netloc.lower(),
            p.path.rstrip("/"),
            p.params,
            urlencode(q, doseq=True),
            "",
        )
    )


def deduplicate_articles(articles: list[Article]) -> list[Article]:
    """Drop repeats by case-insensitive title or normalized link, keeping first seen."""
    seen_urls: set[str] = set()
    seen_titles: set[str] = set()
    unique = []
    for title, link in articles:
        key = title.strip().lower()
        url = _normalize_url(link) if link else ""
        if key in seen_titles or (url and url in seen_urls):
            continue
        seen_titles.add(key)
        if url:
            seen_urls.add(url)
        unique.append((title, link))
    return unique


def extract_html_articles(html: str, base_url: str) -> list[Article]:
    soup = BeautifulSoup(html, "html.parser")
    for selector in ARTICLE_SELECTORS:
        articles = []
        for element in soup.select(selector):
            title = element.get_text(" ", strip=True)
            href = element.get("href") or ""
            if len(title) > 5:
                articles.append((title, urljoin(base_url, str(href)) if href else ""))
        if articles:
            return articles
    return []


def extract_feed_articles(text: str) -> list[Article]:
    feed = feedparser.parse(text)
    articles = []
    for entry in feed.entries:
        title = str(getattr(entry, "title", "")).strip()
        if len(title) > 5:
            articles.append((title, getattr(entry, "link", "")))
    return articles


def _is_relevant(title: str, keywords: list[str]) -> bool:
    lowered = title.lower()
    return any(keyword in lowered for keyword in keywords)


def build_source_signal(
    source: SocialSource,
    articles: list[Article],
    settings: SocialSettings,
) -> Signal | None:
    """Summarize one source's recent articles into a single signal."""
    articles = deduplicate_articles(articles)
    if not articles:
        return None
    keywords = [k.lower() for k in settings.keywords]
    relevant = [a for a in articles if _is_relevant(a[0], keywords)]
    ecosystem = settings.ecosystem.strip() or "ecosystem"
    titles = [title for title, _ in articles[: settings.max_titles]]
    return Signal(
        source=SignalSource.SOCIAL,
        category=f"Blog: {source.name}",
        title=(
            f"{source.name}: {len(articles)} recent articles "
            f"({len(relevant)} {ecosystem.capitalize()}-related)"
        ),
        description=f"Recent topics: {'; '.join(titles)}",
        metrics=[
            Metric(name="total_articles", value=float(len(articles)), unit="articles"),
            Metric(name=f"{ecosystem.lower()}_relevant", value=float(len(relevant)), unit="articles"),
        ],
        url=source.url,
    )


async def _scrape_source(http: HttpClient, source: SocialSource, settings: SocialSettings) -> Signal | None:
    text = await http.get_text(source.url)
    if source.kind == "rss":
        articles = extract_feed_articles(text)
    else:
        articles = extract_html_articles(text, source.url)
    return build_source_signal(source, articles, settings)


async def collect(settings: SocialSettings, http: HttpClient) -> list[Signal]:
    """One signal per source; sources that cannot be fetched are skipped."""
    signals: list[Signal] = []
    for source in settings.sources:
        try:
            signal = await _scrape_source(http, source, settings)
        except SolscoutError as e:
            logger.warning("Failed to scrape %s (%s), skipping: %s", source.name, source.url, e)
            continue
        if signal is not None:
            signals.append(signal)
    logger.info("Collected social signals: %d", len(signals))
    return signals
