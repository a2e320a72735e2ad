"""Build orchestration for Rust/Cargo projects in a layered build environment."""

from .build import BuildOrchestrator, run_build
from .clock import Clock, format_timestamp
from .config import CargoConfig
from .errors import (
    BuildpackError,
    ErrorCode,
    InstallError,
    LayerAcquisitionError,
    ResolutionError,
    ValidationError,
)
from .layers import LayerManager
from .models import (
    BuildContext,
    BuildPlanEntry,
    BuildResult,
    Layer,
    WorkspaceMember,
)
from .observability import BuildLogger
from .runner import CargoRunner, Runner
from .workspace import DispatchMode, WorkspaceResolver, dispatch_mode

__all__ = [
    "BuildContext",
    "BuildLogger",
    "BuildOrchestrator",
    "BuildPlanEntry",
    "BuildResult",
    "BuildpackError",
    "CargoConfig",
    "CargoRunner",
    "Clock",
    "DispatchMode",
    "ErrorCode",
    "InstallError",
    "Layer",
    "LayerAcquisitionError",
    "LayerManager",
    "ResolutionError",
    "Runner",
    "ValidationError",
    "WorkspaceMember",
    "WorkspaceResolver",
    "dispatch_mode",
    "format_timestamp",
    "run_build",
]
