"""Fixed per-platform release step sequences.

Each function is pure: it turns the run context and settings into the
ordered tuple of steps for one platform. Nothing here touches the disk.
"""

from __future__ import annotations

from dataclasses import dataclass

from deploy.core.config import DeployConfig
from deploy.core.result import Err, Ok, Result
from deploy.platform.detection import Platform
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
)

__all__ = ["UnsupportedPlatform", "linux_steps", "macos_steps", "steps_for", "windows_steps"]

# Slack on top of the expected notarization time before giving up.
_NOTARIZATION_GRACE_SECONDS = 30 * 60


@dataclass(frozen=True, slots=True)
class UnsupportedPlatform:
    platform: Platform

    def __str__(self) -> str:
        return f"Unsupported platform: {self.platform}"


def _publish_args(
    ctx: RunContext, config: DeployConfig, output: str, *, framework: bool = True
) -> tuple[str, ...]:
    args = ["publish"]
    if framework:
        args += ["-f", config.project.target_framework]
    args += [
        "-r",
        ctx.platform.runtime_id,
        config.project.project_name,
        "-o",
        output,
        "--configuration",
        "Release",
        f"/p:Version={ctx.version}",
    ]
    return tuple(args)


def windows_steps(ctx: RunContext, config: DeployConfig) -> tuple[Step, ...]:
    staging = ctx.staging_dir
    exe = staging / f"{config.project.executable_name}.exe"
    icon = ctx.solution_root / config.project.project_name / config.windows.icon_name

    steps: list[Step] = []
    if config.github.upload:
        steps.append(InvokeHook("fetch_prior_assets"))

    steps += [
        RunCommand("dotnet", _publish_args(ctx, config, str(staging))),
        # The dotnet apphost is a console binary; flip it to the GUI subsystem.
        RunCommand(config.windows.editbin_path, ("/SUBSYSTEM:WINDOWS", str(exe))),
        RunCommand(config.windows.rcedit_path, (str(exe), "--set-icon", str(icon))),
        Notice("Creating NuGet deployment package..."),
        RunCommand(
            config.windows.nuget_path,
            (
                "pack",
                config.windows.nuspec_name,
                "-Version",
                ctx.version,
                "-Properties",
                "Configuration=Deploy",
                "-OutputDirectory",
                str(staging),
                "-BasePath",
                str(staging),
            ),
        ),
        # Prune first so files this build no longer needs are not required.
        InvokeHook("prune_releases"),
        VerifyManifest(ctx.releases_dir),
        InvokeHook("prune_releases"),
        VerifyManifest(ctx.releases_dir),
    ]

    if config.github.upload:
        steps += [InvokeHook("upload_build"), InvokeHook("open_release_page")]

    steps.append(Notice(f"bins at {ctx.releases_dir}"))
    return tuple(steps)


def macos_steps(ctx: RunContext, config: DeployConfig) -> tuple[Step, ...]:
    app = ctx.staging_dir / config.app_bundle
    zipped = ctx.releases_dir / f"{config.app_bundle}.zip"
    entitlements = ctx.invocation_dir / config.macos.entitlements
    ditto = RunCommand(
        "ditto", ("-ck", "--rsrc", "--keepParent", "--sequesterRsrc", str(app), str(zipped))
    )
    wait = float(config.macos.notarization_wait_seconds)

    return (
        # unzip keeps the bundle's symlinks and modes, which zipfile drops.
        RunCommand(
            "unzip",
            (config.app_bundle_template, "-d", str(ctx.staging_dir)),
            cwd="invocation",
        ),
        RunCommand(
            "dotnet",
            _publish_args(ctx, config, str(app / "Contents" / "MacOS"), framework=False),
        ),
        # dotnet publishes 644; the bundle needs 755.
        SetMode(app, 0o755, recursive=True),
        RunCommand(
            "codesign",
            (
                "--deep",
                "--force",
                "--verify",
                "--entitlements",
                str(entitlements),
                "-o",
                "runtime",
                "--verbose",
                "--sign",
                config.macos.code_signing_certificate,
                str(app),
            ),
        ),
        RunCommand("spctl", ("--assess", "-vvvv", str(app))),
        ditto,
        RunCommand(
            "xcrun",
            (
                "altool",
                "--notarize-app",
                "--primary-bundle-id",
                config.macos.bundle_id,
                "--username",
                config.macos.apple_username,
                "--password",
                config.macos.apple_password,
                "--file",
                str(zipped),
            ),
        ),
        AwaitApproval(
            what="notarisation",
            expected_seconds=wait,
            timeout_seconds=wait + _NOTARIZATION_GRACE_SECONDS,
        ),
        RunCommand("xcrun", ("stapler", "staple", str(app))),
        DeleteFile(zipped),
        ditto,
    )


def linux_steps(ctx: RunContext, config: DeployConfig) -> tuple[Step, ...]:
    appdir = ctx.staging_dir / config.appdir
    binary = appdir / "usr" / "bin" / config.project.executable_name
    tool = ctx.staging_dir / "appimagetool.AppImage"
    appimage = ctx.releases_dir / config.appimage_name
    zsync_name = f"{config.appimage_name}.zsync"
    # appimagetool embeds this so the AppImage can find updates on GitHub releases.
    update_info = "|".join(
        ("gh-releases-zsync", config.github.username, config.github.repo_name, "latest", zsync_name)
    )

    publish = _publish_args(ctx, config, str(binary.parent)) + ("--self-contained",)

    return (
        ExtractArchive(ctx.invocation_dir / config.appdir_template, ctx.staging_dir),
        # zip archives do not carry the executable bit
        MakeExecutable(appdir / "AppRun"),
        RunCommand("dotnet", publish),
        MakeExecutable(binary),
        CopyFile(
            ctx.solution_root / config.linux.icon_asset,
            appdir / f"{config.project.executable_name}.png",
        ),
        Download(config.linux.appimagetool_url, tool),
        MakeExecutable(tool),
        RunCommand(
            str(tool),
            (str(appdir), "-u", update_info, str(appimage), "--sign"),
            cwd="invocation",
        ),
        MakeExecutable(appimage),
        MoveFile(ctx.invocation_dir / zsync_name, ctx.releases_dir / zsync_name),
    )


def steps_for(
    ctx: RunContext, config: DeployConfig
) -> Result[tuple[Step, ...], UnsupportedPlatform]:
    match ctx.platform:
        case Platform.WINDOWS:
            return Ok(windows_steps(ctx, config))
        case Platform.MACOS:
            return Ok(macos_steps(ctx, config))
        case Platform.LINUX:
            return Ok(linux_steps(ctx, config))
        case _:
            return Err(UnsupportedPlatform(ctx.platform))
