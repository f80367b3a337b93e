"""Release extension points.

These are integrations the release process names (CI build numbering,
GitHub release assets, pruning old deltas) but does not implement yet.
NoopReleaseHooks is the default; a real integration implements the same
protocol and is passed to the pipeline.
"""

from __future__ import annotations

from typing import Literal, Protocol

__all__ = ["HookName", "NoopReleaseHooks", "ReleaseHooks"]

HookName = Literal[
    "update_ci_version",
    "fetch_prior_assets",
    "prune_releases",
    "upload_build",
    "open_release_page",
]


class ReleaseHooks(Protocol):
    def update_ci_version(self, version: str) -> None:
        """Report the resolved version to the CI server."""
        ...

    def fetch_prior_assets(self, last_tag: str | None) -> None:
        """Download assets of the previous release into the releases directory."""
        ...

    def prune_releases(self) -> None:
        """Drop old delta packages from the releases directory."""
        ...

    def upload_build(self, version: str) -> None: ...

    def open_release_page(self) -> None: ...


class NoopReleaseHooks:
    def update_ci_version(self, version: str) -> None:
        del version

    def fetch_prior_assets(self, last_tag: str | None) -> None:
        del last_tag

    def prune_releases(self) -> None:
        pass

    def upload_build(self, version: str) -> None:
        del version

    def open_release_page(self) -> None:
        pass
