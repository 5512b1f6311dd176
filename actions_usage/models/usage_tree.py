"""Usage tree models: organization → repository → workflow → run → usage.

Nodes are frozen once built. Each level owns its children as a tuple in the
order the provider returned them.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterator, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


RepoType = Literal["private", "public"]
Platform = Literal["macos", "ubuntu", "windows"]

PLATFORMS: tuple[Platform, ...] = ("macos", "ubuntu", "windows")


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class Repository(_Frozen):
    name: str = Field(min_length=1)
    private: bool = True
    full_name: Optional[str] = None
    pushed_at: Optional[datetime] = None


class Workflow(_Frozen):
    id: int
    name: str
    path: Optional[str] = None
    state: Optional[str] = None  # active, disabled_manually, ...


class WorkflowRun(_Frozen):
    id: int
    created_at: datetime
    run_number: Optional[int] = None
    status: Optional[str] = None
    conclusion: Optional[str] = None


class PlatformBill(_Frozen):
    """Billable time for one runner platform."""

    total_ms: int = Field(default=0, ge=0)
    jobs: int = Field(default=0, ge=0)


class UsageRecord(_Frozen):
    """Per-platform billable milliseconds for a single run.

    A platform set to None was not reported and bills as zero.
    """

    macos: Optional[PlatformBill] = None
    ubuntu: Optional[PlatformBill] = None
    windows: Optional[PlatformBill] = None
    run_duration_ms: Optional[int] = Field(default=None, ge=0)

    def billable_ms(self, platform: Platform) -> int:
        bill = getattr(self, platform)
        if bill is None:
            return 0
        return bill.total_ms

    @property
    def total_billable_ms(self) -> int:
        return sum(self.billable_ms(p) for p in PLATFORMS)


class WorkflowRunNode(_Frozen):
    run: WorkflowRun
    usage: Optional[UsageRecord] = None  # None when the provider had no usage


class WorkflowNode(_Frozen):
    workflow: Workflow
    runs: tuple[WorkflowRunNode, ...] = ()


class RepositoryNode(_Frozen):
    repository: Repository
    workflows: tuple[WorkflowNode, ...] = ()


class UsageTree(_Frozen):
    organization: str
    since: datetime
    repositories: tuple[RepositoryNode, ...] = ()

    def iter_runs(self) -> Iterator[tuple[Repository, Workflow, WorkflowRunNode]]:
        for repo_node in self.repositories:
            for wf_node in repo_node.workflows:
                for run_node in wf_node.runs:
                    yield repo_node.repository, wf_node.workflow, run_node


class AggregateRecord(_Frozen):
    """Run count and billable totals for one (repository, workflow) pair."""

    repository: str
    workflow_id: int
    workflow_name: str
    run_count: int = Field(ge=1)
    total_billable_ms: int = Field(ge=0)
    average_billable_ms: int = Field(ge=0)
