"""Release services: step plans, their executor and the pipeline."""

from .errors import ConfigMissing, DeployError
from .hooks import NoopReleaseHooks, ReleaseHooks
from .model import DeployRequest, RunContext, Stage
from .pipeline import DeployFailure, DeployPipeline

__all__ = [
    "ConfigMissing",
    "DeployError",
    "DeployFailure",
    "DeployPipeline",
    "DeployRequest",
    "NoopReleaseHooks",
    "ReleaseHooks",
    "RunContext",
    "Stage",
]
