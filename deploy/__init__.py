"""Release-build orchestrator for desktop application checkouts."""

__version__ = "0.1.0"
