"""Typed deploy settings loaded from deploy.toml.

The loaded DeployConfig is immutable and is passed explicitly from the CLI
into the pipeline; nothing reads settings ad hoc.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path

from deploy.platform.detection import Platform

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_int, get_str, get_table, str_or

__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "DeployConfig",
    "GitHubConfig",
    "LinuxConfig",
    "MacOSConfig",
    "ProjectConfig",
    "WindowsConfig",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILENAME = "deploy.toml"

DEFAULT_TARGET_FRAMEWORK = "netcoreapp3.1"
DEFAULT_NOTARIZATION_WAIT_SECONDS = 5 * 60
DEFAULT_APPIMAGETOOL_URL = (
    "https://github.com/AppImage/AppImageKit/releases/download/continuous/"
    "appimagetool-x86_64.AppImage"
)

# Secrets may come from the environment instead of the settings file.
ENV_OVERRIDES: tuple[tuple[str, str, str], ...] = (
    ("DEPLOY_APPLE_USERNAME", "macos", "apple_username"),
    ("DEPLOY_APPLE_PASSWORD", "macos", "apple_password"),
    ("DEPLOY_SIGNING_CERTIFICATE", "macos", "code_signing_certificate"),
    ("DEPLOY_GITHUB_TOKEN", "github", "access_token"),
)


def _default_nuget_path() -> str:
    return str(
        Path.home() / ".nuget" / "packages" / "nuget.commandline" / "4.7.1" / "tools" / "NuGet.exe"
    )


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Settings file could not be read or parsed."""

    message: str
    path: Path | None = None

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class ProjectConfig:
    """What is being built."""

    solution_name: str = ""
    # Known subdirectory that may hold the solution (checkout next to the tool).
    solution_subdir: str | None = None
    project_name: str = ""
    executable_name: str = ""
    target_framework: str = DEFAULT_TARGET_FRAMEWORK
    increment_version: bool = True
    notice: str | None = None


@dataclass(frozen=True, slots=True)
class WindowsConfig:
    nuspec_name: str = ""
    icon_name: str = ""
    nuget_path: str = field(default_factory=_default_nuget_path)
    editbin_path: str = "tools/editbin.exe"
    rcedit_path: str = "tools/rcedit-x64.exe"


@dataclass(frozen=True, slots=True)
class MacOSConfig:
    app_bundle: str = ""
    template: str = ""
    entitlements: str = "app.entitlements"
    code_signing_certificate: str = ""
    bundle_id: str = ""
    apple_username: str = ""
    apple_password: str = ""
    notarization_wait_seconds: int = DEFAULT_NOTARIZATION_WAIT_SECONDS


@dataclass(frozen=True, slots=True)
class LinuxConfig:
    appdir: str = ""
    template: str = ""
    icon_asset: str = "assets/icon.png"
    appimage_name: str = ""
    appimagetool_url: str = DEFAULT_APPIMAGETOOL_URL


@dataclass(frozen=True, slots=True)
class GitHubConfig:
    username: str = ""
    repo_name: str = ""
    access_token: str = ""
    upload: bool = False

    @property
    def api_endpoint(self) -> str:
        return f"https://api.github.com/repos/{self.username}/{self.repo_name}/releases"


@dataclass(frozen=True, slots=True)
class DeployConfig:
    """Main settings container."""

    project: ProjectConfig = field(default_factory=ProjectConfig)
    windows: WindowsConfig = field(default_factory=WindowsConfig)
    macos: MacOSConfig = field(default_factory=MacOSConfig)
    linux: LinuxConfig = field(default_factory=LinuxConfig)
    github: GitHubConfig = field(default_factory=GitHubConfig)

    # Derived names. Explicit settings win; otherwise they follow the executable.

    @property
    def app_bundle(self) -> str:
        return self.macos.app_bundle or f"{self.project.executable_name}.app"

    @property
    def app_bundle_template(self) -> str:
        return self.macos.template or f"{self.app_bundle}-template.zip"

    @property
    def appdir(self) -> str:
        return self.linux.appdir or f"{self.project.executable_name}.AppDir"

    @property
    def appdir_template(self) -> str:
        return self.linux.template or f"{self.appdir}-template.zip"

    @property
    def appimage_name(self) -> str:
        return self.linux.appimage_name or f"{self.project.executable_name}.AppImage"

    def missing_for(self, platform: Platform) -> tuple[str, ...]:
        """Return the required settings that are empty for a platform."""
        required: list[tuple[str, str]] = [
            ("project.solution_name", self.project.solution_name),
            ("project.project_name", self.project.project_name),
            ("project.executable_name", self.project.executable_name),
        ]
        match platform:
            case Platform.WINDOWS:
                required += [
                    ("windows.nuspec_name", self.windows.nuspec_name),
                    ("windows.icon_name", self.windows.icon_name),
                ]
            case Platform.MACOS:
                required += [
                    ("macos.code_signing_certificate", self.macos.code_signing_certificate),
                    ("macos.bundle_id", self.macos.bundle_id),
                    ("macos.apple_username", self.macos.apple_username),
                    ("macos.apple_password", self.macos.apple_password),
                ]
            case Platform.LINUX:
                required += [
                    ("github.username", self.github.username),
                    ("github.repo_name", self.github.repo_name),
                ]
            case _:
                pass
        if self.github.upload:
            required.append(("github.access_token", self.github.access_token))
        return tuple(key for key, value in required if not value.strip())

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> DeployConfig:
        """Create DeployConfig from a mapping (parsed TOML)."""
        project: StrDict = get_table(data, "project")
        windows: StrDict = get_table(data, "windows")
        macos: StrDict = get_table(data, "macos")
        linux: StrDict = get_table(data, "linux")
        github: StrDict = get_table(data, "github")

        increment = get_bool(project, "increment_version")
        wait = get_int(macos, "notarization_wait_seconds")
        upload = get_bool(github, "upload")

        return cls(
            project=ProjectConfig(
                solution_name=str_or(project, "solution_name"),
                solution_subdir=get_str(project, "solution_subdir"),
                project_name=str_or(project, "project_name"),
                executable_name=str_or(project, "executable_name"),
                target_framework=str_or(project, "target_framework", DEFAULT_TARGET_FRAMEWORK),
                increment_version=True if increment is None else increment,
                notice=get_str(project, "notice"),
            ),
            windows=WindowsConfig(
                nuspec_name=str_or(windows, "nuspec_name"),
                icon_name=str_or(windows, "icon_name"),
                nuget_path=str_or(windows, "nuget_path", _default_nuget_path()),
                editbin_path=str_or(windows, "editbin_path", "tools/editbin.exe"),
                rcedit_path=str_or(windows, "rcedit_path", "tools/rcedit-x64.exe"),
            ),
            macos=MacOSConfig(
                app_bundle=str_or(macos, "app_bundle"),
                template=str_or(macos, "template"),
                entitlements=str_or(macos, "entitlements", "app.entitlements"),
                code_signing_certificate=str_or(macos, "code_signing_certificate"),
                bundle_id=str_or(macos, "bundle_id"),
                apple_username=str_or(macos, "apple_username"),
                apple_password=str_or(macos, "apple_password"),
                notarization_wait_seconds=(
                    DEFAULT_NOTARIZATION_WAIT_SECONDS if wait is None or wait < 0 else wait
                ),
            ),
            linux=LinuxConfig(
                appdir=str_or(linux, "appdir"),
                template=str_or(linux, "template"),
                icon_asset=str_or(linux, "icon_asset", "assets/icon.png"),
                appimage_name=str_or(linux, "appimage_name"),
                appimagetool_url=str_or(linux, "appimagetool_url", DEFAULT_APPIMAGETOOL_URL),
            ),
            github=GitHubConfig(
                username=str_or(github, "username"),
                repo_name=str_or(github, "repo_name"),
                access_token=str_or(github, "access_token"),
                upload=bool(upload),
            ),
        )

    def with_env_overrides(self, env: Mapping[str, str]) -> DeployConfig:
        """Return a copy with secrets taken from environment variables."""
        config = self
        for var, section, key in ENV_OVERRIDES:
            value = env.get(var, "").strip()
            if not value:
                continue
            table = getattr(config, section)
            config = replace(config, **{section: replace(table, **{key: value})})
        return config


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(
    path: Path, env: Mapping[str, str] | None = None
) -> Result[DeployConfig, ConfigError]:
    """Load deploy settings from a TOML file.

    Args:
        path: Path to deploy.toml
        env: Environment used for secret overrides (defaults to os.environ)

    Returns:
        Ok(DeployConfig) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        config = DeployConfig.from_dict(result.value)
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))
    return Ok(config.with_env_overrides(os.environ if env is None else env))


def load_config_or_default(
    path: Path, env: Mapping[str, str] | None = None
) -> Result[DeployConfig, ConfigError]:
    """Like load_config, but a missing file yields the default settings.

    A file that exists but cannot be parsed is still an error.
    """
    if not path.exists():
        return Ok(DeployConfig().with_env_overrides(os.environ if env is None else env))
    return load_config(path, env)
