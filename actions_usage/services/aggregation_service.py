"""Reduce a UsageTree to one AggregateRecord per (repository, workflow).

A run without a usage record is counted as a zero-cost run: it adds 0 to the
total but still counts toward ``run_count``. Workflows with no runs are dropped.
"""

from __future__ import annotations

from typing import Optional

from actions_usage.models import AggregateRecord, Repository, UsageTree, WorkflowNode, WorkflowRunNode


def run_billable_ms(node: WorkflowRunNode) -> int:
    """macOS + Ubuntu + Windows billable ms; 0 when usage is absent."""
    if node.usage is None:
        return 0
    return node.usage.total_billable_ms


def summarize_workflow(repository: Repository, node: WorkflowNode) -> Optional[AggregateRecord]:
    count = len(node.runs)
    if count == 0:
        return None
    total = sum(run_billable_ms(r) for r in node.runs)
    return AggregateRecord(
        repository=repository.name,
        workflow_id=node.workflow.id,
        workflow_name=node.workflow.name,
        run_count=count,
        total_billable_ms=total,
        average_billable_ms=total // count,  # totals are non-negative, so floor == truncation
    )


def aggregate(tree: UsageTree) -> list[AggregateRecord]:
    out: list[AggregateRecord] = []
    for repo_node in tree.repositories:
        for wf_node in repo_node.workflows:
            record = summarize_workflow(repo_node.repository, wf_node)
            if record is not None:
                out.append(record)
    return out
