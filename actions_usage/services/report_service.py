"""Report orchestration: settings → provider → traversal → CSV text."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from actions_usage.adapters.github_source import GitHubSourceProvider
from actions_usage.adapters.source_provider import SourceProvider
from actions_usage.config import ReportSettings
from actions_usage.services.export_service import render_report
from actions_usage.services.github_client import GitHubClient
from actions_usage.services.traversal_service import traverse

log = logging.getLogger(__name__)


def window_start(num_days: int, now: Optional[datetime] = None) -> datetime:
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now - timedelta(days=num_days)


def report_file_name(org: str, since: datetime) -> str:
    return f"gh-action-usage-{org}-{since.strftime('%Y-%m-%d')}.csv"


def build_provider(settings: ReportSettings) -> SourceProvider:
    client = GitHubClient(
        token=settings.token,
        base_url=settings.api_url,
        timeout=settings.timeout,
        max_pages=settings.max_pages,
    )
    if not client.authenticated:
        log.info("no token provided, running in public mode - analysis is limited by GitHub rate limit")
    return GitHubSourceProvider(client)


def build_report(
    settings: ReportSettings,
    provider: Optional[SourceProvider] = None,
    now: Optional[datetime] = None,
) -> tuple[str, datetime]:
    """Return (csv_text, since). Raises on any fatal provider error; nothing is rendered then."""
    provider = provider or build_provider(settings)
    since = window_start(settings.num_days, now)
    log.info("pulling workflow runs since: %s", since.strftime("%Y-%m-%d"))
    if settings.repo_type == "public":
        log.info("only looking at public repositories")

    log.info("beginning data retrieval")
    tree = traverse(
        provider,
        settings.org,
        settings.repo_type,
        settings.num_repos,
        since,
        max_workers=settings.max_workers,
    )
    log.info("data retrieval completed")
    return render_report(tree, settings.mode), since
