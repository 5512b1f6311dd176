"""Pydantic models."""

from actions_usage.models.usage_tree import (
    PLATFORMS,
    AggregateRecord,
    Platform,
    PlatformBill,
    RepoType,
    Repository,
    RepositoryNode,
    UsageRecord,
    UsageTree,
    Workflow,
    WorkflowNode,
    WorkflowRun,
    WorkflowRunNode,
)

__all__ = [
    "PLATFORMS",
    "AggregateRecord",
    "Platform",
    "PlatformBill",
    "RepoType",
    "Repository",
    "RepositoryNode",
    "UsageRecord",
    "UsageTree",
    "Workflow",
    "WorkflowNode",
    "WorkflowRun",
    "WorkflowRunNode",
]
