"""Tests for deploy.services.executor module."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from deploy.core.manifest import ManifestUnreadable, ReleaseFileMissing
from deploy.core.result import Err, Ok
from deploy.output.console import MockConsole
from deploy.platform.detection import Platform
from deploy.platform.files import FileOpError
from deploy.platform.process import ProcessError
from deploy.services.approval import ApprovalTimedOut
from deploy.services.executor import StepExecutor
from deploy.services.http import MockHttpClient
from deploy.services.model import RunContext
from deploy.services.steps import (
    AwaitApproval,
    CopyFile,
    Download,
    InvokeHook,
    Notice,
    RunCommand,
    VerifyManifest,
)

if TYPE_CHECKING:
    from conftest import RecordingRunner


class RecordingHooks:
    def __init__(self) -> None:
        self.calls: list[tuple[str, object]] = []

    def update_ci_version(self, version: str) -> None:
        self.calls.append(("update_ci_version", version))

    def fetch_prior_assets(self, last_tag: str | None) -> None:
        self.calls.append(("fetch_prior_assets", last_tag))

    def prune_releases(self) -> None:
        self.calls.append(("prune_releases", None))

    def upload_build(self, version: str) -> None:
        self.calls.append(("upload_build", version))

    def open_release_page(self) -> None:
        self.calls.append(("open_release_page", None))


@pytest.fixture
def context(tmp_path: Path) -> RunContext:
    solution = tmp_path / "src"
    work = tmp_path / "work"
    solution.mkdir()
    (work / "releases").mkdir(parents=True)
    return RunContext(
        solution_root=solution,
        invocation_dir=work,
        platform=Platform.LINUX,
        stopwatch=MockConsole().stopwatch,
        interactive=False,
        version="2024.315.0",
        last_tag="2024.314.3",
    )


def _executor(
    context: RunContext, runner: RecordingRunner, console: MockConsole, **kwargs: object
) -> StepExecutor:
    return StepExecutor(
        context=context,
        console=console,
        runner=runner,
        http=kwargs.pop("http", MockHttpClient()),  # type: ignore[arg-type]
        **kwargs,  # type: ignore[arg-type]
    )


class TestRunCommand:
    def test_working_directories(self, context: RunContext, runner: RecordingRunner) -> None:
        executor = _executor(context, runner, MockConsole())

        executor.execute(
            [RunCommand("dotnet", ("publish",)), RunCommand("unzip", ("t.zip",), cwd="invocation")]
        )

        assert [cwd for _, _, cwd in runner.calls] == [
            context.solution_root,
            context.invocation_dir,
        ]

    def test_announces_command(self, context: RunContext, runner: RecordingRunner) -> None:
        console = MockConsole()

        _executor(context, runner, console).execute([RunCommand("spctl", ("--assess", "App"))])

        assert console.messages == ["Running spctl --assess App..."]

    def test_failure_prints_output_and_stops(
        self, context: RunContext, runner: RecordingRunner
    ) -> None:
        console = MockConsole()
        runner.failures["codesign"] = (1, "errSecInternalComponent\n")
        steps = [
            RunCommand("codesign", ("--sign", "id", "App.app")),
            RunCommand("spctl", ("--assess", "App.app")),
        ]

        result = _executor(context, runner, console).execute(steps)

        assert isinstance(result, Err)
        assert isinstance(result.error, ProcessError)
        assert str(result.error) == "Command codesign --sign id App.app failed!"
        assert runner.commands == ["codesign"]
        assert "errSecInternalComponent" in console.messages


class TestFileSteps:
    def test_copy(self, context: RunContext, runner: RecordingRunner) -> None:
        src = context.solution_root / "icon.png"
        src.write_bytes(b"png")
        dest = context.staging_dir / "Game.AppDir" / "Game.png"

        result = _executor(context, runner, MockConsole()).execute([CopyFile(src, dest)])

        assert result == Ok(None)
        assert dest.read_bytes() == b"png"

    def test_copy_failure_stops_run(self, context: RunContext, runner: RecordingRunner) -> None:
        missing = context.solution_root / "missing.png"

        result = _executor(context, runner, MockConsole()).execute(
            [CopyFile(missing, context.staging_dir / "x"), RunCommand("dotnet", ())]
        )

        assert isinstance(result, Err)
        assert isinstance(result.error, FileOpError)
        assert runner.calls == []

    def test_download(self, context: RunContext, runner: RecordingRunner) -> None:
        http = MockHttpClient()
        http.set_download("https://example.com/tool", b"tool")
        dest = context.staging_dir / "tool"

        result = _executor(context, runner, MockConsole(), http=http).execute(
            [Download("https://example.com/tool", dest)]
        )

        assert result == Ok(None)
        assert dest.read_bytes() == b"tool"

    def test_download_failure(self, context: RunContext, runner: RecordingRunner) -> None:
        result = _executor(context, runner, MockConsole()).execute(
            [Download("https://example.com/missing", context.staging_dir / "tool")]
        )

        assert isinstance(result, Err)
        assert result.error.status == 404  # type: ignore[union-attr]


class TestVerifyManifest:
    def test_all_present(self, context: RunContext, runner: RecordingRunner) -> None:
        releases = context.releases_dir
        (releases / "RELEASES").write_text("abc Game-2024.315.0-full.nupkg 3\n")
        (releases / "Game-2024.315.0-full.nupkg").write_bytes(b"pkg")
        console = MockConsole()

        result = _executor(context, runner, console).execute([VerifyManifest(releases)])

        assert result == Ok(None)
        assert console.find("Verified 1 release files")

    def test_missing_file(self, context: RunContext, runner: RecordingRunner) -> None:
        releases = context.releases_dir
        (releases / "RELEASES").write_text("abc osu.dll 10\n")

        result = _executor(context, runner, MockConsole()).execute(
            [VerifyManifest(releases), Notice("unreachable")]
        )

        assert result == Err(ReleaseFileMissing("osu.dll", releases))

    def test_first_release_has_no_manifest(
        self, context: RunContext, runner: RecordingRunner
    ) -> None:
        console = MockConsole()

        result = _executor(context, runner, console).execute(
            [VerifyManifest(context.releases_dir), Notice("next")]
        )

        assert result == Ok(None)
        assert console.find("WARNING: No RELEASES manifest in")
        assert console.messages[-1] == "next"

    def test_unreadable_manifest(self, context: RunContext, runner: RecordingRunner) -> None:
        (context.releases_dir / "RELEASES").mkdir()

        result = _executor(context, runner, MockConsole()).execute(
            [VerifyManifest(context.releases_dir)]
        )

        assert isinstance(result, Err)
        assert isinstance(result.error, ManifestUnreadable)


class TestAwaitApproval:
    def test_waits_until_check_passes(self, context: RunContext, runner: RecordingRunner) -> None:
        answers = iter([False, False, True])
        slept: list[float] = []
        executor = _executor(
            context,
            runner,
            MockConsole(),
            approval_check=lambda step: lambda: next(answers),
            clock=lambda: sum(slept),
            sleep=slept.append,
        )

        result = executor.execute([AwaitApproval("notarisation", 300, 2100)])

        assert result == Ok(None)
        assert slept == [15, 30]

    def test_default_check_waits_expected_time(
        self, context: RunContext, runner: RecordingRunner
    ) -> None:
        slept: list[float] = []
        executor = _executor(
            context, runner, MockConsole(), clock=lambda: sum(slept), sleep=slept.append
        )

        result = executor.execute([AwaitApproval("notarisation", 60, 600)])

        assert result == Ok(None)
        assert sum(slept) == 60

    def test_timeout(self, context: RunContext, runner: RecordingRunner) -> None:
        slept: list[float] = []
        executor = _executor(
            context,
            runner,
            MockConsole(),
            approval_check=lambda step: lambda: False,
            clock=lambda: sum(slept),
            sleep=slept.append,
        )

        result = executor.execute([AwaitApproval("notarisation", 300, 120)])

        assert isinstance(result, Err)
        assert isinstance(result.error, ApprovalTimedOut)


class TestHooks:
    def test_hooks_receive_run_state(self, context: RunContext, runner: RecordingRunner) -> None:
        hooks = RecordingHooks()
        steps = [
            InvokeHook("fetch_prior_assets"),
            InvokeHook("prune_releases"),
            InvokeHook("upload_build"),
            InvokeHook("open_release_page"),
        ]

        _executor(context, runner, MockConsole(), hooks=hooks).execute(steps)

        assert hooks.calls == [
            ("fetch_prior_assets", "2024.314.3"),
            ("prune_releases", None),
            ("upload_build", "2024.315.0"),
            ("open_release_page", None),
        ]


class TestDryRun:
    def test_only_describes(self, context: RunContext, runner: RecordingRunner) -> None:
        console = MockConsole()
        hooks = RecordingHooks()
        steps = [
            RunCommand("dotnet", ("publish",)),
            CopyFile(context.solution_root / "missing", context.staging_dir / "x"),
            VerifyManifest(context.releases_dir),
            InvokeHook("prune_releases"),
        ]

        result = _executor(context, runner, console, hooks=hooks, dry_run=True).execute(steps)

        assert result == Ok(None)
        assert runner.calls == []
        assert hooks.calls == []
        assert len(console.messages) == len(steps)
        assert console.messages[0] == "Running dotnet publish..."
