"""Error taxonomy for usage retrieval.

``SourceNotFoundError`` is the distinguished "no such resource" outcome that the
traversal absorbs; every other ``UsageSourceError`` aborts the report.
"""

from __future__ import annotations


class UsageSourceError(RuntimeError):
    pass


class SourceNotFoundError(UsageSourceError):
    pass


class GitHubAPIError(UsageSourceError):
    def __init__(self, message: str, status_code: int | None = None, url: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class GitHubNotFoundError(GitHubAPIError, SourceNotFoundError):
    pass


class ReportConfigError(ValueError):
    pass
