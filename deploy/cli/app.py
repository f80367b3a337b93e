from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import typer

from deploy import __version__
from deploy.cli.context import CLIContext, build_context
from deploy.core.errors import ErrorCode
from deploy.core.result import Err
from deploy.output.console import ConsoleProtocol, RichConsole, Style
from deploy.output.errors import deploy_error_exit_code, print_deploy_error
from deploy.platform.detection import Platform, detect_platform, parse_platform
from deploy.services.errors import DeployError
from deploy.services.model import DeployRequest
from deploy.services.pipeline import DeployPipeline

DEFAULT_NOTICE = "Do not distribute builds of this project publicly without permission."

app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    rich_markup_mode="rich",
)


def _fatal(
    error: DeployError, console: ConsoleProtocol, *, interactive: bool, stage: str | None = None
) -> NoReturn:
    print_deploy_error(error, console)
    if stage:
        console.print(f"stage: {stage}", Style.DIM)
    if interactive:
        console.pause()
    raise typer.Exit(code=deploy_error_exit_code(error))


def _select_platform(name: str | None) -> Platform:
    if name is None:
        return detect_platform()
    selected = parse_platform(name)
    if selected is None:
        typer.echo(f"error: unknown platform '{name}' (expected windows, macos or linux)", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))
    return selected


def deploy(
    mode: str | None = typer.Argument(
        None,
        help="Any value runs unattended (no confirmation pauses).",
        show_default=False,
    ),
    version: str | None = typer.Argument(
        None,
        help="Explicit release version, used verbatim.",
        show_default=False,
    ),
    config: Path | None = typer.Option(
        None, "--config", help="Settings file (default: ./deploy.toml)", show_default=False
    ),
    last_tag: str | None = typer.Option(
        None,
        "--last-tag",
        help="Previous release tag (default: git describe in the solution)",
        show_default=False,
    ),
    platform: str | None = typer.Option(
        None, "--platform", help="Override host platform: windows|macos|linux", show_default=False
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print steps without running them"),
    show_version: bool = typer.Option(False, "--version", help="Show version and exit."),
) -> None:
    """Build, sign and package a release of the solution."""
    if show_version:
        typer.echo(__version__)
        raise typer.Exit(code=int(ErrorCode.OK))

    # Any argument at all (positional or option) means an unattended run.
    interactive = (
        mode is None
        and version is None
        and config is None
        and last_tag is None
        and platform is None
        and not dry_run
    )
    selected = _select_platform(platform)

    context = build_context(config_path=config)
    if isinstance(context, Err):
        _fatal(context.error, RichConsole(), interactive=interactive)
    ctx: CLIContext = context.value

    console = ctx.console
    console.header(ctx.config.project.notice or DEFAULT_NOTICE)

    pipeline = DeployPipeline(config=ctx.config, console=console)
    result = pipeline.run(
        DeployRequest(
            invocation_dir=ctx.invocation_dir,
            platform=selected,
            interactive=interactive,
            explicit_version=version or None,
            last_tag=last_tag,
            dry_run=dry_run,
        )
    )
    if isinstance(result, Err):
        failure = result.error
        _fatal(failure.error, console, interactive=interactive, stage=str(failure.stage))


app.command()(deploy)


def main() -> None:
    app()
