"""Traversal: organization → repositories → workflows → runs → usage.

Builds a UsageTree from a SourceProvider. NotFound at the workflow, run-list or
usage level becomes an empty branch (or absent usage) and the walk continues;
any other provider failure aborts the whole traversal with no partial tree.
"""

from __future__ import annotations

import logging
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from datetime import datetime

from actions_usage.adapters.source_provider import SourceProvider
from actions_usage.errors import SourceNotFoundError
from actions_usage.models import (
    Repository,
    RepositoryNode,
    RepoType,
    UsageTree,
    Workflow,
    WorkflowNode,
    WorkflowRunNode,
)

log = logging.getLogger(__name__)


def _walk_workflow(
    provider: SourceProvider,
    org: str,
    repository: Repository,
    workflow: Workflow,
    since: datetime,
) -> WorkflowNode:
    try:
        runs = provider.list_workflow_runs(org, repository, workflow, since)
    except SourceNotFoundError:
        log.debug("no runs found for workflow %s (%s) in %s", workflow.id, workflow.name, repository.name)
        runs = []

    run_nodes: list[WorkflowRunNode] = []
    for run in runs:
        try:
            usage = provider.get_run_usage(org, repository, run)
        except SourceNotFoundError:
            log.debug("no usage reported for run %s in %s", run.id, repository.name)
            usage = None
        run_nodes.append(WorkflowRunNode(run=run, usage=usage))

    log.debug("workflow %r in %s: %d runs", workflow.name, repository.name, len(run_nodes))
    return WorkflowNode(workflow=workflow, runs=run_nodes)


def walk_repository(
    provider: SourceProvider,
    org: str,
    repository: Repository,
    since: datetime,
) -> RepositoryNode:
    """Build the full branch for one repository. Safe to run on a worker thread."""
    try:
        workflows = provider.list_workflows(org, repository)
    except SourceNotFoundError:
        # Actions not configured for this repository.
        log.debug("no workflows found for %s", repository.name)
        workflows = []

    wf_nodes = [_walk_workflow(provider, org, repository, wf, since) for wf in workflows]
    return RepositoryNode(repository=repository, workflows=wf_nodes)


def _walk_concurrently(
    provider: SourceProvider,
    org: str,
    repos: list[Repository],
    since: datetime,
    max_workers: int,
) -> list[RepositoryNode]:
    with ThreadPoolExecutor(max_workers=min(max_workers, len(repos))) as ex:
        futures: list[Future[RepositoryNode]] = [
            ex.submit(walk_repository, provider, org, repo, since) for repo in repos
        ]
        done, pending = wait(futures, return_when=FIRST_EXCEPTION)
        failed = [(repo, f) for repo, f in zip(repos, futures) if f in done and f.exception() is not None]
        if failed:
            for p in pending:
                p.cancel()
            repo, future = failed[0]
            log.error("traversal of %s failed, abandoning report", repo.name)
            raise future.exception()  # type: ignore[misc]
        # Submission order, not completion order.
        return [f.result() for f in futures]


def traverse(
    provider: SourceProvider,
    org: str,
    repo_type: RepoType,
    limit: int,
    since: datetime,
    *,
    max_workers: int = 1,
) -> UsageTree:
    """Walk ``org`` and return its usage tree.

    ``limit`` bounds the repositories fetched (most recently pushed first) and
    ``since`` is the inclusive lower bound on run creation. With
    ``max_workers > 1`` repositories are walked on a bounded thread pool; the
    tree keeps discovery order either way.
    """
    if limit < 1:
        raise ValueError("limit must be >= 1")
    if max_workers < 1:
        raise ValueError("max_workers must be >= 1")

    repos = provider.list_repositories(org, repo_type, limit)
    log.info("identified %d repositories to inspect", len(repos))

    if max_workers == 1 or len(repos) <= 1:
        nodes: list[RepositoryNode] = []
        for i, repo in enumerate(repos, start=1):
            log.info("[%d/%d] checking %r", i, len(repos), repo.name)
            nodes.append(walk_repository(provider, org, repo, since))
    else:
        log.info("walking repositories with %d workers", min(max_workers, len(repos)))
        nodes = _walk_concurrently(provider, org, repos, since, max_workers)

    return UsageTree(organization=org, since=since, repositories=nodes)
