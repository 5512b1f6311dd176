"""Source provider abstraction + in-memory backend.

The traversal only talks to a ``SourceProvider``. Implementations:
GitHubSourceProvider (REST) and InMemorySourceProvider (tests, fixtures).
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from actions_usage.errors import SourceNotFoundError
from actions_usage.models import Repository, RepoType, UsageRecord, Workflow, WorkflowRun


class SourceProvider(Protocol):
    """Capability surface consumed by the traversal.

    ``list_workflows``, ``list_workflow_runs`` and ``get_run_usage`` raise
    SourceNotFoundError when the resource does not exist. Any other exception
    is a failed request.
    """

    def list_repositories(self, org: str, repo_type: RepoType, limit: int) -> list[Repository]:
        ...

    def list_workflows(self, org: str, repository: Repository) -> list[Workflow]:
        ...

    def list_workflow_runs(
        self, org: str, repository: Repository, workflow: Workflow, since: datetime
    ) -> list[WorkflowRun]:
        ...

    def get_run_usage(self, org: str, repository: Repository, run: WorkflowRun) -> UsageRecord:
        ...


class InMemorySourceProvider:
    """Dict-backed provider.

    Missing workflows, run lists and usage raise SourceNotFoundError, the same
    way a 404 from GitHub would. ``failures`` maps a call key to an exception
    to raise instead, e.g. ``("list_workflows", "widget")``.
    """

    def __init__(self) -> None:
        self._repos: dict[str, list[Repository]] = {}
        self._workflows: dict[tuple[str, str], list[Workflow]] = {}
        self._runs: dict[tuple[str, str, int], list[WorkflowRun]] = {}
        self._usage: dict[tuple[str, str, int], UsageRecord] = {}
        self.failures: dict[tuple, Exception] = {}
        self.calls: list[tuple] = []

    # --- fixture builders ---

    def add_repository(self, org: str, repository: Repository) -> Repository:
        self._repos.setdefault(org, []).append(repository)
        return repository

    def add_workflow(self, org: str, repo_name: str, workflow: Workflow) -> Workflow:
        self._workflows.setdefault((org, repo_name), []).append(workflow)
        return workflow

    def add_run(
        self,
        org: str,
        repo_name: str,
        workflow_id: int,
        run: WorkflowRun,
        usage: Optional[UsageRecord] = None,
    ) -> WorkflowRun:
        self._runs.setdefault((org, repo_name, workflow_id), []).append(run)
        if usage is not None:
            self._usage[(org, repo_name, run.id)] = usage
        return run

    def _check_failure(self, key: tuple) -> None:
        self.calls.append(key)
        exc = self.failures.get(key)
        if exc is not None:
            raise exc

    # --- SourceProvider ---

    def list_repositories(self, org: str, repo_type: RepoType, limit: int) -> list[Repository]:
        self._check_failure(("list_repositories", org))
        want_private = repo_type == "private"
        repos = [r for r in self._repos.get(org, []) if r.private == want_private]
        # Newest push first; repositories without a push time keep insertion order at the end.
        ordered = sorted(
            repos,
            key=lambda r: (r.pushed_at is None, -(r.pushed_at.timestamp() if r.pushed_at else 0.0)),
        )
        return ordered[:limit]

    def list_workflows(self, org: str, repository: Repository) -> list[Workflow]:
        self._check_failure(("list_workflows", repository.name))
        key = (org, repository.name)
        if key not in self._workflows:
            raise SourceNotFoundError(f"no workflows for {org}/{repository.name}")
        return list(self._workflows[key])

    def list_workflow_runs(
        self, org: str, repository: Repository, workflow: Workflow, since: datetime
    ) -> list[WorkflowRun]:
        self._check_failure(("list_workflow_runs", repository.name, workflow.id))
        key = (org, repository.name, workflow.id)
        if key not in self._runs:
            raise SourceNotFoundError(f"no runs for workflow {workflow.id} in {org}/{repository.name}")
        return [r for r in self._runs[key] if r.created_at >= since]

    def get_run_usage(self, org: str, repository: Repository, run: WorkflowRun) -> UsageRecord:
        self._check_failure(("get_run_usage", repository.name, run.id))
        key = (org, repository.name, run.id)
        if key not in self._usage:
            raise SourceNotFoundError(f"no usage for run {run.id} in {org}/{repository.name}")
        return self._usage[key]
