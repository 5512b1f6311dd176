"""Pytest configuration and fixtures."""

from __future__ import annotations

import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from actions_usage.adapters.source_provider import InMemorySourceProvider  # noqa: E402
from actions_usage.models import PlatformBill, Repository, UsageRecord, Workflow, WorkflowRun  # noqa: E402

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
SINCE = NOW - timedelta(days=5)


@pytest.fixture(autouse=True)
def _clear_usage_env() -> None:
    for key in (
        "GITHUB_TOKEN",
        "GH_TOKEN",
        "GITHUB_API_URL",
        "ACTIONS_USAGE_ORG",
        "ACTIONS_USAGE_NUM_REPOS",
        "ACTIONS_USAGE_NUM_DAYS",
        "ACTIONS_USAGE_MODE",
        "ACTIONS_USAGE_WORKERS",
    ):
        os.environ.pop(key, None)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def since() -> datetime:
    return SINCE


@pytest.fixture
def acme_provider() -> InMemorySourceProvider:
    """org acme / repo widget / workflow 7 "ci" with run 101 billed and run 102 without usage."""
    provider = InMemorySourceProvider()
    provider.add_repository("acme", Repository(name="widget", private=True))
    provider.add_workflow("acme", "widget", Workflow(id=7, name="ci"))
    provider.add_run(
        "acme",
        "widget",
        7,
        WorkflowRun(id=101, created_at=NOW - timedelta(hours=2)),
        usage=UsageRecord(
            macos=PlatformBill(total_ms=1000, jobs=1),
            ubuntu=PlatformBill(total_ms=2000, jobs=2),
            windows=PlatformBill(total_ms=0),
            run_duration_ms=3600,
        ),
    )
    provider.add_run(
        "acme",
        "widget",
        7,
        WorkflowRun(id=102, created_at=NOW - timedelta(hours=1)),
    )
    return provider
