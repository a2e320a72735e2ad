"""Core typed dataclasses for layers, build contexts, and build results."""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal
from urllib.parse import unquote, urlparse

LayerName = Literal["rust-cargo", "rust-bin"]

CACHE_LAYER: LayerName = "rust-cargo"
LAUNCH_LAYER: LayerName = "rust-bin"
BUILT_AT_KEY = "built_at"

Environment = dict[str, str]


@dataclass(slots=True)
class Layer:
    """A named, role-tagged layer directory with env and metadata."""

    name: str
    path: Path
    build: bool = False
    cache: bool = False
    launch: bool = False
    shared_env: Environment = field(default_factory=dict)
    build_env: Environment = field(default_factory=dict)
    launch_env: Environment = field(default_factory=dict)
    process_launch_env: dict[str, Environment] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)

    def reset(self) -> None:
        """Clear roles, env, and metadata, and empty the layer directory."""
        self.build = False
        self.cache = False
        self.launch = False
        self.shared_env = {}
        self.build_env = {}
        self.launch_env = {}
        self.process_launch_env = {}
        self.metadata = {}
        if self.path.exists():
            shutil.rmtree(self.path)
        self.path.mkdir(parents=True, exist_ok=True)


@dataclass(frozen=True, slots=True)
class WorkspaceMember:
    """A workspace member identified by a ``file://`` URI."""

    uri: str

    @classmethod
    def from_path(cls, path: str | Path) -> WorkspaceMember:
        return cls(uri=Path(path).absolute().as_uri())

    @property
    def path(self) -> str:
        return unquote(urlparse(self.uri).path)


@dataclass(frozen=True, slots=True)
class BuildPlanEntry:
    name: str
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class BuildContext:
    working_dir: Path
    layers_path: Path
    plan: tuple[BuildPlanEntry, ...] = ()

    def has_entry(self, name: str) -> bool:
        return any(entry.name == name for entry in self.plan)


@dataclass(slots=True)
class BuildResult:
    layers: list[Layer] = field(default_factory=list)
