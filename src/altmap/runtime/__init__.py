"""Runtime services shared by the registry, switch engine and loader."""

from . import telemetry

__all__ = ["telemetry"]
