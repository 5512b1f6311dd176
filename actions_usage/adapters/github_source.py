"""SourceProvider backed by the GitHub REST API."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional, TypeVar

from actions_usage.errors import GitHubAPIError
from actions_usage.models import (
    PlatformBill,
    Repository,
    RepoType,
    UsageRecord,
    Workflow,
    WorkflowRun,
)
from actions_usage.services.github_client import GitHubClient

log = logging.getLogger(__name__)

T = TypeVar("T")

# GitHub reports billable time under upper-case runner OS keys.
_BILLABLE_KEYS = {"macos": "MACOS", "ubuntu": "UBUNTU", "windows": "WINDOWS"}


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _int_or_zero(value: Any) -> int:
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return 0


def parse_platform_bill(payload: Any) -> Optional[PlatformBill]:
    if not isinstance(payload, dict):
        return None
    return PlatformBill(
        total_ms=_int_or_zero(payload.get("total_ms")),
        jobs=_int_or_zero(payload.get("jobs")),
    )


def parse_usage(payload: dict) -> UsageRecord:
    """Build a UsageRecord from a ``/timing`` payload. Missing fields bill as zero."""
    billable = payload.get("billable") or {}
    if not isinstance(billable, dict):
        billable = {}
    duration = payload.get("run_duration_ms")
    return UsageRecord(
        macos=parse_platform_bill(billable.get(_BILLABLE_KEYS["macos"])),
        ubuntu=parse_platform_bill(billable.get(_BILLABLE_KEYS["ubuntu"])),
        windows=parse_platform_bill(billable.get(_BILLABLE_KEYS["windows"])),
        run_duration_ms=_int_or_zero(duration) if duration is not None else None,
    )


def parse_repository(payload: dict) -> Repository:
    return Repository(
        name=payload["name"],
        private=bool(payload.get("private", False)),
        full_name=payload.get("full_name"),
        pushed_at=payload.get("pushed_at"),
    )


def parse_workflow(payload: dict) -> Workflow:
    return Workflow(
        id=int(payload["id"]),
        name=payload.get("name") or "",
        path=payload.get("path"),
        state=payload.get("state"),
    )


def parse_workflow_run(payload: dict) -> WorkflowRun:
    return WorkflowRun(
        id=int(payload["id"]),
        created_at=payload["created_at"],
        run_number=payload.get("run_number"),
        status=payload.get("status"),
        conclusion=payload.get("conclusion"),
    )


def _parse_rows(parse: Callable[[dict], T], rows: list[dict], what: str) -> list[T]:
    try:
        return [parse(r) for r in rows]
    except (KeyError, TypeError, ValueError) as e:
        raise GitHubAPIError(f"malformed {what} payload from GitHub: {e}") from e


class GitHubSourceProvider:
    def __init__(self, client: GitHubClient) -> None:
        self._client = client

    def list_repositories(self, org: str, repo_type: RepoType, limit: int) -> list[Repository]:
        rows = self._client.list_org_repos(org, repo_type, limit)
        return _parse_rows(parse_repository, rows, "repository")

    def list_workflows(self, org: str, repository: Repository) -> list[Workflow]:
        rows = self._client.list_workflows(org, repository.name)
        return _parse_rows(parse_workflow, rows, "workflow")

    def list_workflow_runs(
        self, org: str, repository: Repository, workflow: Workflow, since: datetime
    ) -> list[WorkflowRun]:
        since_utc = as_utc(since)
        rows = self._client.list_workflow_runs(org, repository.name, workflow.id, since_utc.date())
        runs = _parse_rows(parse_workflow_run, rows, "workflow run")
        # The created filter only has day granularity.
        kept = [r for r in runs if as_utc(r.created_at) >= since_utc]
        if len(kept) != len(runs):
            log.debug(
                "dropped %d runs of workflow %s created before %s",
                len(runs) - len(kept),
                workflow.id,
                since_utc.isoformat(),
            )
        return kept

    def get_run_usage(self, org: str, repository: Repository, run: WorkflowRun) -> UsageRecord:
        payload = self._client.get_run_timing(org, repository.name, run.id)
        return _parse_rows(parse_usage, [payload], "run timing")[0]
