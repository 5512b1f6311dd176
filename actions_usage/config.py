"""Report settings.

Values come from explicit overrides (CLI flags) first, then the environment:
GITHUB_TOKEN / GH_TOKEN, GITHUB_API_URL, ACTIONS_USAGE_ORG,
ACTIONS_USAGE_NUM_REPOS, ACTIONS_USAGE_NUM_DAYS, ACTIONS_USAGE_MODE,
ACTIONS_USAGE_WORKERS.
"""

from __future__ import annotations

import os
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError

from actions_usage.errors import ReportConfigError
from actions_usage.models import RepoType
from actions_usage.services.export_service import ExportMode
from actions_usage.services.github_client import DEFAULT_BASE_URL, resolve_token

_ENV_FIELDS = {
    "org": "ACTIONS_USAGE_ORG",
    "num_repos": "ACTIONS_USAGE_NUM_REPOS",
    "num_days": "ACTIONS_USAGE_NUM_DAYS",
    "mode": "ACTIONS_USAGE_MODE",
    "max_workers": "ACTIONS_USAGE_WORKERS",
    "api_url": "GITHUB_API_URL",
}


class ReportSettings(BaseModel):
    org: str = Field(min_length=1)
    repo_type: RepoType = "private"
    num_repos: int = Field(default=25, ge=1, le=1000)
    num_days: int = Field(default=5, ge=1, le=400)
    mode: ExportMode = "aggregate"
    max_workers: int = Field(default=1, ge=1, le=32)
    token: Optional[str] = None
    api_url: str = DEFAULT_BASE_URL
    timeout: float = Field(default=20.0, gt=0.0)
    max_pages: int = Field(default=10, ge=1, le=100)
    output: Optional[str] = None
    verbose: bool = False

    @classmethod
    def from_env(cls, **overrides: Any) -> "ReportSettings":
        values: dict[str, Any] = {}
        for field, env_name in _ENV_FIELDS.items():
            raw = (os.getenv(env_name) or "").strip()
            if raw:
                values[field] = raw
        token = resolve_token(overrides.pop("token", None))
        if token:
            values["token"] = token
        values.update({k: v for k, v in overrides.items() if v is not None})
        try:
            return cls(**values)
        except ValidationError as e:
            raise ReportConfigError(f"invalid report settings: {e}") from e
