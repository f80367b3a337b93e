"""Git queries used by the release pipeline."""

from .tags import GitError, latest_tag

__all__ = ["GitError", "latest_tag"]
