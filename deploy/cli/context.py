from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from deploy.core.config import CONFIG_FILENAME, ConfigError, DeployConfig, load_config_or_default
from deploy.core.result import Result
from deploy.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    invocation_dir: Path
    config: DeployConfig
    console: ConsoleProtocol


def build_context(
    *,
    config_path: Path | None = None,
    invocation_dir: Path | None = None,
    console: ConsoleProtocol | None = None,
) -> Result[CLIContext, ConfigError]:
    cwd = (invocation_dir or Path.cwd()).resolve()
    path = config_path if config_path is not None else cwd / CONFIG_FILENAME
    if not path.is_absolute():
        path = cwd / path

    loaded = load_config_or_default(path)
    return loaded.map(
        lambda config: CLIContext(
            invocation_dir=cwd,
            config=config,
            console=console or RichConsole(),
        )
    )
