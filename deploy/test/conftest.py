from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from deploy.core.config import DeployConfig
from deploy.core.result import Err, Ok, Result
from deploy.platform.detection import detect_platform
from deploy.platform.process import ProcessError

Effect = Callable[[tuple[str, ...], Path], None]


@dataclass
class RecordingRunner:
    """Fake CommandRunner: records calls, optionally fails or touches files.

    Commands are matched by executable basename ("dotnet", "editbin.exe", ...).
    """

    calls: list[tuple[str, tuple[str, ...], Path]] = field(default_factory=list)
    failures: dict[str, tuple[int, str]] = field(default_factory=dict)
    effects: dict[str, Effect] = field(default_factory=dict)
    outputs: dict[str, str] = field(default_factory=dict)

    def __call__(self, command: str, args: Sequence[str], cwd: Path) -> Result[str, ProcessError]:
        argv = tuple(args)
        self.calls.append((command, argv, cwd))
        key = Path(command).name
        if key in self.failures:
            code, output = self.failures[key]
            return Err(ProcessError(command, argv, code, output, ""))
        effect = self.effects.get(key)
        if effect is not None:
            effect(argv, cwd)
        return Ok(self.outputs.get(key, ""))

    @property
    def commands(self) -> list[str]:
        return [Path(c).name for c, _, _ in self.calls]


@pytest.fixture
def runner() -> RecordingRunner:
    return RecordingRunner()


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in (
        "DEPLOY_SOLUTION_ROOT",
        "DEPLOY_APPLE_USERNAME",
        "DEPLOY_APPLE_PASSWORD",
        "DEPLOY_SIGNING_CERTIFICATE",
        "DEPLOY_GITHUB_TOKEN",
    ):
        monkeypatch.delenv(var, raising=False)
    detect_platform.cache_clear()


GAME_SETTINGS: dict[str, object] = {
    "project": {
        "solution_name": "Game",
        "project_name": "Game.Desktop",
        "executable_name": "Game",
    },
    "windows": {
        "nuspec_name": "Game.Desktop/game.nuspec",
        "icon_name": "game.ico",
        "nuget_path": "tools/NuGet.exe",
    },
    "macos": {
        "code_signing_certificate": "Developer ID Application: Example (ABCDE12345)",
        "bundle_id": "com.example.game",
        "apple_username": "dev@example.com",
        "apple_password": "app-specific",
        "notarization_wait_seconds": 300,
    },
    "github": {"username": "example", "repo_name": "game"},
}


@pytest.fixture
def deploy_config() -> DeployConfig:
    """Settings complete for every platform, without GitHub uploads."""
    return DeployConfig.from_dict(GAME_SETTINGS)


@pytest.fixture
def checkout(tmp_path: Path) -> Path:
    """A solution checkout; deploy is invoked from its root."""
    root = tmp_path / "Game"
    (root / "Game.Desktop").mkdir(parents=True)
    (root / "Game.sln").write_text("")
    return root.resolve()
