"""Release pipeline orchestration.

Drives one release run through its stages:

    init -> directory-check -> version-resolved -> staged
         -> platform-build -> verified -> done

Any failure ends the run in the fatal stage; nothing after the failing step
executes and nothing is rolled back. The next run's staging reset clears
whatever was left behind.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path

from deploy.core.config import DeployConfig
from deploy.core.result import Err, Ok, Result
from deploy.core.solution import find_solution_root
from deploy.core.version import resolve_version
from deploy.git.tags import GitError, latest_tag
from deploy.output.console import ConsoleProtocol, Style
from deploy.platform.files import ensure_directory, refresh_directory
from deploy.platform.process import CommandRunner
from deploy.platform.process import run as run_process
from deploy.services.errors import ConfigMissing, DeployError
from deploy.services.executor import ApprovalCheckFactory, StepExecutor
from deploy.services.hooks import NoopReleaseHooks, ReleaseHooks
from deploy.services.http import HttpClient
from deploy.services.model import DeployRequest, RunContext, Stage
from deploy.services.plans import UnsupportedPlatform, steps_for
from deploy.services.steps import VerifyManifest

__all__ = ["DeployFailure", "DeployPipeline", "TagLookup"]

TagLookup = Callable[[Path], Result[str | None, GitError]]


@dataclass(frozen=True, slots=True)
class DeployFailure:
    """The stage the run was in when it failed, and why."""

    stage: Stage
    error: DeployError


class DeployPipeline:
    """Runs one release for one platform.

    Collaborators are injected so the whole run can be replayed in tests
    against fake commands, downloads, clocks and approval checks.
    """

    def __init__(
        self,
        *,
        config: DeployConfig,
        console: ConsoleProtocol,
        runner: CommandRunner = run_process,
        http: HttpClient | None = None,
        hooks: ReleaseHooks | None = None,
        tag_lookup: TagLookup | None = None,
        now: Callable[[], datetime] = datetime.now,
        approval_check: ApprovalCheckFactory | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._config = config
        self._console = console
        self._runner = runner
        self._http = http
        self._hooks = hooks or NoopReleaseHooks()
        self._tag_lookup: TagLookup = tag_lookup or (lambda root: latest_tag(root, runner))
        self._now = now
        self._approval_check = approval_check
        self._clock = clock
        self._sleep = sleep
        self._stage = Stage.INIT

    @property
    def stage(self) -> Stage:
        return self._stage

    def run(self, request: DeployRequest) -> Result[RunContext, DeployFailure]:
        result = self._run(request)
        if isinstance(result, Err):
            failed_at = self._stage
            self._stage = Stage.FATAL
            return Err(DeployFailure(stage=failed_at, error=result.error))
        self._stage = Stage.DONE
        return result

    def _run(self, request: DeployRequest) -> Result[RunContext, DeployError]:
        self._stage = Stage.INIT
        if not request.platform.is_supported:
            return Err(UnsupportedPlatform(request.platform))

        missing = self._config.missing_for(request.platform)
        if missing:
            return Err(ConfigMissing(missing))

        project = self._config.project
        root = find_solution_root(
            request.invocation_dir,
            project.solution_name,
            subdir=project.solution_subdir,
        )
        if isinstance(root, Err):
            return root

        ctx = RunContext(
            solution_root=root.value,
            invocation_dir=request.invocation_dir,
            platform=request.platform,
            stopwatch=self._console.stopwatch,
            interactive=request.interactive,
        )

        self._stage = Stage.DIRECTORY_CHECK
        checked = self._check_releases_dir(ctx, dry_run=request.dry_run)
        if isinstance(checked, Err):
            return checked

        self._stage = Stage.VERSION_RESOLVED
        resolved = self._resolve_version(ctx, request)
        if isinstance(resolved, Err):
            return resolved
        ctx = resolved.value
        self._confirm(ctx)

        ctx.stopwatch.start()

        self._stage = Stage.STAGED
        if not request.dry_run:
            staged = refresh_directory(ctx.staging_dir)
            if isinstance(staged, Err):
                return staged
            self._hooks.update_ci_version(ctx.version)

        self._stage = Stage.PLATFORM_BUILD
        built = self._build(ctx, dry_run=request.dry_run)
        if isinstance(built, Err):
            return built

        self._console.print("Done!", Style.SUCCESS)
        self._pause_if_interactive(ctx)
        return Ok(ctx)

    def _check_releases_dir(self, ctx: RunContext, *, dry_run: bool) -> Result[None, DeployError]:
        if ctx.releases_dir.is_dir():
            return Ok(None)
        self._console.warning("No release directory found. Make sure you want this!")
        if dry_run:
            return Ok(None)
        created = ensure_directory(ctx.releases_dir)
        if isinstance(created, Err):
            return created
        return Ok(None)

    def _resolve_version(
        self, ctx: RunContext, request: DeployRequest
    ) -> Result[RunContext, DeployError]:
        last_tag = request.last_tag or None
        if last_tag is None and not request.explicit_version:
            looked_up = self._tag_lookup(ctx.solution_root)
            if isinstance(looked_up, Err):
                self._console.warning(f"Could not read previous release tag ({looked_up.error})")
            else:
                last_tag = looked_up.value

        version = resolve_version(
            self._now(),
            last_tag,
            request.explicit_version,
            increment=self._config.project.increment_version,
        )
        if isinstance(version, Err):
            return version
        return Ok(replace(ctx, version=version.value, last_tag=last_tag))

    def _confirm(self, ctx: RunContext) -> None:
        """Show what is about to be deployed; wait for Enter when interactive."""
        certificate = self._config.macos.code_signing_certificate or "(none)"
        self._console.print(f"Increment Version:     {self._config.project.increment_version}")
        self._console.print(f"Signing Certificate:   {certificate}")
        if ctx.last_tag:
            self._console.print(f"Previous Release:      {ctx.last_tag}", Style.DIM)
        self._console.newline()
        self._console.print(f"Ready to deploy {ctx.version}!", Style.BOLD)
        self._pause_if_interactive(ctx)

    def _pause_if_interactive(self, ctx: RunContext) -> None:
        if ctx.interactive:
            self._console.pause()
        else:
            self._console.newline()

    def _build(self, ctx: RunContext, *, dry_run: bool) -> Result[None, DeployError]:
        steps = steps_for(ctx, self._config)
        if isinstance(steps, Err):
            return steps

        executor = StepExecutor(
            context=ctx,
            console=self._console,
            runner=self._runner,
            http=self._http,
            hooks=self._hooks,
            approval_check=self._approval_check,
            clock=self._clock,
            sleep=self._sleep,
            dry_run=dry_run,
        )

        self._console.print("Running build process...")
        for step in steps.value:
            if isinstance(step, VerifyManifest):
                self._stage = Stage.VERIFIED
            result = executor.execute_step(step)
            if isinstance(result, Err):
                return result
        return Ok(None)
