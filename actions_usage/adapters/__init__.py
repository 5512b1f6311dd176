"""Source providers for the usage traversal: GitHub REST and in-memory."""

from actions_usage.adapters.github_source import GitHubSourceProvider
from actions_usage.adapters.source_provider import InMemorySourceProvider, SourceProvider

__all__ = ["GitHubSourceProvider", "InMemorySourceProvider", "SourceProvider"]
