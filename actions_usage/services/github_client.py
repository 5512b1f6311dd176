"""GitHub REST client for the Actions usage endpoints.

REST wrapper with:
- optional token auth (GITHUB_TOKEN / GH_TOKEN)
- 404 reported as GitHubNotFoundError, distinct from other failures
- page-numbered pagination with a page cap; hitting the cap is an error, never a silent cut
"""

from __future__ import annotations

import logging
import os
from datetime import date
from typing import Any, Optional

import httpx

from actions_usage.errors import GitHubAPIError, GitHubNotFoundError

log = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.github.com"


def resolve_token(token: Optional[str] = None) -> Optional[str]:
    if token:
        return token.strip() or None
    env_token = os.getenv("GITHUB_TOKEN")
    if not env_token:
        env_token = os.getenv("GH_TOKEN")
    if env_token:
        env_token = env_token.strip() or None
    return env_token


class GitHubClient:
    def __init__(
        self,
        token: Optional[str] = None,
        base_url: str = DEFAULT_BASE_URL,
        user_agent: str = "gh-actions-usage/0.1",
        timeout: float = 20.0,
        max_pages: int = 10,
    ) -> None:
        self._token = resolve_token(token)
        self._max_pages = max_pages
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": user_agent,
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self._token:
            self._headers["Authorization"] = f"Bearer {self._token}"

    @property
    def authenticated(self) -> bool:
        return self._token is not None

    def _request(self, method: str, url: str, params: dict[str, Any] | None = None) -> httpx.Response:
        # One short-lived client per call so worker threads never share a connection pool.
        try:
            with httpx.Client(timeout=self._timeout, headers=self._headers) as client:
                return client.request(method, url, params=params)
        except httpx.HTTPError as e:
            raise GitHubAPIError(f"GitHub request failed for {url}: {e}", url=url) from e

    def get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """GET JSON for a path or full URL."""
        url = path if path.startswith("http") else f"{self._base_url}{path}"
        r = self._request("GET", url, params=params)

        if r.status_code == 404:
            raise GitHubNotFoundError(f"GitHub API 404 for {url}", status_code=404, url=url)
        if r.status_code >= 400:
            raise GitHubAPIError(
                f"GitHub API error {r.status_code} for {url}: {r.text[:200]}",
                status_code=r.status_code,
                url=url,
            )
        try:
            return r.json()
        except ValueError as e:
            raise GitHubAPIError(f"GitHub API returned non-JSON body for {url}", status_code=r.status_code, url=url) from e

    def paginate(
        self,
        path: str,
        *,
        key: str | None = None,
        params: dict[str, Any] | None = None,
        per_page: int = 100,
        max_pages: int | None = None,
        limit: int | None = None,
    ) -> list[dict]:
        """Collect items across pages. Caps pages to avoid runaway API usage.

        ``key`` names the list inside envelope payloads such as
        ``{"total_count": 3, "workflows": [...]}``.

        Raises GitHubAPIError when the page cap is reached before the listing
        is exhausted, or when fewer items arrive than the envelope's
        ``total_count``. A ``limit`` cut is not a truncation.
        """
        if max_pages is None:
            max_pages = self._max_pages
        out: list[dict] = []
        total_count: int | None = None
        hit_cap = False
        if limit is not None:
            per_page = max(1, min(per_page, limit))
        for page in range(1, max_pages + 1):
            query = dict(params or {})
            query.update({"per_page": per_page, "page": page})
            data = self.get_json(path, params=query)
            if key is not None:
                if isinstance(data, dict):
                    if isinstance(data.get("total_count"), int):
                        total_count = data["total_count"]
                    data = data.get(key)
                else:
                    data = None
            if not isinstance(data, list):
                break
            out.extend(data)
            if limit is not None and len(out) >= limit:
                return out[:limit]
            if len(data) < per_page:
                break
        else:
            hit_cap = True

        if (total_count is not None and total_count > len(out)) or (hit_cap and total_count is None):
            log.warning(
                "listing %s truncated: collected %d of %s items (max_pages=%d)",
                path,
                len(out),
                total_count if total_count is not None else "unknown",
                max_pages,
            )
            raise GitHubAPIError(
                f"GitHub listing {path} truncated at {len(out)} of "
                f"{total_count if total_count is not None else 'unknown'} items (max_pages={max_pages})",
                url=path,
            )
        return out

    def list_org_repos(self, org: str, repo_type: str, limit: int) -> list[dict]:
        """Repositories of ``org`` of the given type, most recently pushed first."""
        return self.paginate(
            f"/orgs/{org}/repos",
            params={"type": repo_type, "sort": "pushed", "direction": "desc"},
            limit=limit,
        )

    def list_workflows(self, owner: str, repo: str) -> list[dict]:
        return self.paginate(f"/repos/{owner}/{repo}/actions/workflows", key="workflows")

    def list_workflow_runs(self, owner: str, repo: str, workflow_id: int, created_since: date) -> list[dict]:
        """Runs of a workflow created on or after ``created_since`` (day granularity)."""
        return self.paginate(
            f"/repos/{owner}/{repo}/actions/workflows/{workflow_id}/runs",
            key="workflow_runs",
            params={"created": f">={created_since.isoformat()}"},
        )

    def get_run_timing(self, owner: str, repo: str, run_id: int) -> dict:
        data = self.get_json(f"/repos/{owner}/{repo}/actions/runs/{run_id}/timing")
        if not isinstance(data, dict):
            log.debug("unexpected timing payload for %s/%s run %s", owner, repo, run_id)
            return {}
        return data
