"""Interpreter for release step descriptors."""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from pathlib import Path

from deploy.core.manifest import MANIFEST_FILENAME, read_manifest, verify_manifest
from deploy.core.result import Err, Ok, Result
from deploy.output.console import ConsoleProtocol, Style
from deploy.platform import files
from deploy.platform.process import CommandRunner
from deploy.platform.process import run as run_process
from deploy.services.approval import ApprovalCheck, await_approval, fixed_delay_check
from deploy.services.errors import DeployError
from deploy.services.hooks import NoopReleaseHooks, ReleaseHooks
from deploy.services.http import HttpClient, RealHttpClient
from deploy.services.model import RunContext
from deploy.services.steps import (
    AwaitApproval,
    CopyFile,
    DeleteFile,
    Download,
    ExtractArchive,
    InvokeHook,
    MakeExecutable,
    MoveFile,
    Notice,
    RunCommand,
    SetMode,
    Step,
    VerifyManifest,
    describe,
)

__all__ = ["StepExecutor"]

ApprovalCheckFactory = Callable[[AwaitApproval], ApprovalCheck]


class StepExecutor:
    """Runs steps one at a time and stops at the first failure.

    In dry-run mode every step is only described.
    """

    def __init__(
        self,
        *,
        context: RunContext,
        console: ConsoleProtocol,
        runner: CommandRunner = run_process,
        http: HttpClient | None = None,
        hooks: ReleaseHooks | None = None,
        approval_check: ApprovalCheckFactory | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        dry_run: bool = False,
    ) -> None:
        self._ctx = context
        self._console = console
        self._runner = runner
        self._http = http or RealHttpClient()
        self._hooks = hooks or NoopReleaseHooks()
        self._approval_check = approval_check or (
            lambda step: fixed_delay_check(step.expected_seconds, clock=clock)
        )
        self._clock = clock
        self._sleep = sleep
        self._dry_run = dry_run

    def execute(self, steps: Sequence[Step]) -> Result[None, DeployError]:
        for step in steps:
            result = self.execute_step(step)
            if isinstance(result, Err):
                return result
        return Ok(None)

    def execute_step(self, step: Step) -> Result[None, DeployError]:
        if self._dry_run:
            self._console.print(describe(step), Style.DIM)
            return Ok(None)

        match step:
            case RunCommand():
                return self._run_command(step)
            case Notice(message=message):
                self._console.print(message)
                return Ok(None)
            case ExtractArchive(archive=archive, dest=dest):
                return _discard(files.extract_zip(archive, dest))
            case CopyFile(src=src, dest=dest):
                return _discard(files.copy_file(src, dest))
            case MoveFile(src=src, dest=dest):
                return _discard(files.move_file(src, dest, overwrite=True))
            case DeleteFile(path=path):
                return _discard(files.delete_file(path))
            case MakeExecutable(path=path):
                return _discard(files.make_executable(path))
            case SetMode(path=path, mode=mode, recursive=recursive):
                return _discard(files.set_mode(path, mode, recursive=recursive))
            case Download(url=url, dest=dest):
                self._console.print(describe(step))
                return _discard(self._http.download(url, dest))
            case AwaitApproval():
                return self._await(step)
            case VerifyManifest(releases_dir=releases_dir):
                return self._verify(releases_dir)
            case InvokeHook():
                self._invoke_hook(step)
                return Ok(None)

    def _cwd(self, step: RunCommand) -> Path:
        if step.cwd == "solution":
            return self._ctx.solution_root
        return self._ctx.invocation_dir

    def _run_command(self, step: RunCommand) -> Result[None, DeployError]:
        self._console.print(describe(step))
        result = self._runner(step.command, step.args, self._cwd(step))
        if isinstance(result, Err):
            output = result.error.output.rstrip()
            if output:
                self._console.print(output)
            return result
        return Ok(None)

    def _await(self, step: AwaitApproval) -> Result[None, DeployError]:
        self._console.print(describe(step))
        result = await_approval(
            self._approval_check(step),
            what=step.what,
            timeout=step.timeout_seconds,
            expected=step.expected_seconds,
            clock=self._clock,
            sleep=self._sleep,
        )
        if isinstance(result, Err):
            return result
        return Ok(None)

    def _verify(self, releases_dir: Path) -> Result[None, DeployError]:
        """Ensure every file named in RELEASES is present in releases_dir.

        A releases directory without a manifest (first release) has nothing
        to check yet.
        """
        manifest = releases_dir / MANIFEST_FILENAME
        if not manifest.exists():
            self._console.warning(
                f"No {MANIFEST_FILENAME} manifest in {releases_dir}, nothing to verify"
            )
            return Ok(None)
        entries = read_manifest(manifest)
        if isinstance(entries, Err):
            return entries
        checked = verify_manifest(entries.value, releases_dir)
        if isinstance(checked, Err):
            return checked
        self._console.print(f"Verified {len(entries.value)} release files", Style.DIM)
        return Ok(None)

    def _invoke_hook(self, step: InvokeHook) -> None:
        match step.hook:
            case "update_ci_version":
                self._hooks.update_ci_version(self._ctx.version)
            case "fetch_prior_assets":
                self._hooks.fetch_prior_assets(self._ctx.last_tag)
            case "prune_releases":
                self._hooks.prune_releases()
            case "upload_build":
                self._hooks.upload_build(self._ctx.version)
            case "open_release_page":
                self._hooks.open_release_page()


def _discard[T, E](result: Result[T, E]) -> Result[None, E]:
    if isinstance(result, Err):
        return result
    return Ok(None)
