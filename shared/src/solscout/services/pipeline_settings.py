"""Pipeline settings service -- typed Pydantic models backed by a TOML file."""
from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError

from solscout.errors import ConfigError

logger = logging.getLogger(__name__)


class GitHubTopic(BaseModel):
    query: str
    category: str


class TrackedRepo(BaseModel):
    full_name: str
    category: str


class GitHubSettings(BaseModel):
    enabled: bool = True
    api_url: str = "https://api.github.com"
    lookback_days: int = Field(default=30, ge=1)
    per_page: int = Field(default=30, ge=1, le=100)
    topics: list[GitHubTopic] = Field(
        default=[
            GitHubTopic(query="solana defi", category="DeFi"),
            GitHubTopic(query="solana depin", category="DePIN"),
            GitHubTopic(query="solana nft", category="NFT"),
            GitHubTopic(query="solana ai agent", category="AI Agents"),
        ]
    )
    tracked_repos: list[TrackedRepo] = Field(
        default=[
            TrackedRepo(full_name="anza-xyz/agave", category="Core Infrastructure"),
            TrackedRepo(full_name="solana-foundation/anchor", category="Developer Tooling"),
        ]
    )


class TrackedProgram(BaseModel):
    name: str
    address: str
    category: str


class SolanaSettings(BaseModel):
    enabled: bool = True
    rpc_url: str = "https://api.mainnet-beta.solana.com"
    performance_samples: int = Field(default=10, ge=1, le=720)
    signature_limit: int = Field(default=100, ge=1, le=1000)
    tracked_programs: list[TrackedProgram] = Field(
        default=[
            TrackedProgram(
                name="Jupiter Aggregator v6",
                address="JUP6LkbZbjS1jKKwapdHNy74zcZ3tLUZoi5QNyVTaV4",
                category="DeFi",
            ),
            TrackedProgram(
                name="Raydium AMM v4",
                address="675kPX9MHTjS2zt1qfr1NYHuzeLXfQM9H24wFSUt1Mp8",
                category="decentralized finance",
            ),
            TrackedProgram(
                name="Marinade Finance",
                address="MarBmsSgKXdrN1egZf5sqe1TMai9K1rChYNDJgjq7aD",
                category="DeFi",
            ),
            TrackedProgram(
                name="Metaplex Token Metadata",
                address="metaqbxxUerdq28cj1RbAWkYQm3ybzjb6a8bt518x1s",
                category="NFT",
            ),
        ]
    )


class SocialSource(BaseModel):
    name: str
    url: str
    kind: Literal["html", "rss"] = "html"


class SocialSettings(BaseModel):
    enabled: bool = True
    ecosystem: str = "solana"
    max_titles: int = Field(default=10, ge=1)
    keywords: list[str] = Field(
        default=[
            "solana", "sol", "defi", "depin", "token", "validator",
            "staking", "nft", "web3", "blockchain", "crypto",
        ]
    )
    sources: list[SocialSource] = Field(
        default=[
            SocialSource(name="Solana News", url="https://solana.com/news"),
            SocialSource(name="Helius Blog", url="https://www.helius.dev/blog"),
        ]
    )


class OutputSettings(BaseModel):
    path: str = "output/report.html"


class PipelineSettings(BaseModel):
    github: GitHubSettings = Field(default_factory=GitHubSettings)
    solana: SolanaSettings = Field(default_factory=SolanaSettings)
    social: SocialSettings = Field(default_factory=SocialSettings)
    output: OutputSettings = Field(default_factory=OutputSettings)

    def validate_for_run(self) -> None:
        """Reject settings that cannot produce any signal."""
        enabled = [
            self.github.enabled and bool(self.github.topics or self.github.tracked_repos),
            self.solana.enabled and bool(self.solana.rpc_url),
            self.social.enabled and bool(self.social.sources),
        ]
        if not any(enabled):
            raise ConfigError("No signal source is enabled; configure github, solana or social.")


def load_pipeline_settings(path: str | Path | None = None) -> PipelineSettings:
    """Load pipeline settings from a TOML file, merged with defaults.

    Top-level tables (``[github]``, ``[solana]``, ...) override the matching
    defaults field by field. A missing file yields the defaults.
    """
    overrides: dict[str, Any] = {}
    if path is not None:
        config_path = Path(path)
        if config_path.exists():
            try:
                overrides = tomllib.loads(config_path.read_text(encoding="utf-8"))
            except tomllib.TOMLDecodeError as exc:
                raise ConfigError(f"Invalid TOML in {config_path}: {exc}") from exc
        else:
            logger.warning("Config file %s not found, using defaults", config_path)

    defaults = PipelineSettings()
    merged = defaults.model_dump()
    for group, fields in overrides.items():
        if group not in merged:
            logger.warning("Ignoring unknown config section '%s'", group)
            continue
        if not isinstance(fields, dict):
            raise ConfigError(f"Config section '{group}' must be a table")
        merged[group].update(fields)

    try:
        return PipelineSettings(**merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid pipeline settings: {exc}") from exc


def pipeline_settings_schema() -> dict[str, Any]:
    """Return the full JSON Schema for PipelineSettings with defaults."""
    return PipelineSettings.model_json_schema()
