"""Shared test fixtures."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

import pytest

from cargopack.clock import Clock
from cargopack.models import BuildContext, BuildPlanEntry, Layer, WorkspaceMember

FROZEN_TIME = datetime(2026, 10, 17, 12, 30, 45, 123456, tzinfo=timezone.utc)
FROZEN_TIMESTAMP = "2026-10-17T12:30:45.123456+00:00"


@dataclass(slots=True)
class FakeRunner:
    """Runner double that records every call it receives."""

    members: list[WorkspaceMember] = field(default_factory=list)
    members_error: Exception | None = None
    install_error: Exception | None = None
    member_errors: dict[str, Exception] = field(default_factory=dict)
    calls: list[tuple[str, ...]] = field(default_factory=list)
    layers_seen: list[tuple[Layer, Layer]] = field(default_factory=list)

    def workspace_members(
        self,
        working_dir: Path,
        cache_layer: Layer,
        launch_layer: Layer,
    ) -> list[WorkspaceMember]:
        self.calls.append(("workspace_members", str(working_dir)))
        self.layers_seen.append((cache_layer, launch_layer))
        if self.members_error is not None:
            raise self.members_error
        return list(self.members)

    def install(self, working_dir: Path, cache_layer: Layer, launch_layer: Layer) -> None:
        self.calls.append(("install", str(working_dir)))
        self.layers_seen.append((cache_layer, launch_layer))
        if self.install_error is not None:
            raise self.install_error

    def install_member(
        self,
        member_path: str,
        working_dir: Path,
        cache_layer: Layer,
        launch_layer: Layer,
    ) -> None:
        self.calls.append(("install_member", member_path, str(working_dir)))
        self.layers_seen.append((cache_layer, launch_layer))
        error = self.member_errors.get(member_path)
        if error is not None:
            raise error

    def calls_named(self, name: str) -> list[tuple[str, ...]]:
        return [call for call in self.calls if call[0] == name]


@pytest.fixture
def working_dir(tmp_path: Path) -> Path:
    path = tmp_path / "workspace"
    path.mkdir()
    return path


@pytest.fixture
def layers_dir(tmp_path: Path) -> Path:
    path = tmp_path / "layers"
    path.mkdir()
    return path


@pytest.fixture
def clock() -> Clock:
    return Clock.frozen(FROZEN_TIME)


@pytest.fixture
def context(working_dir: Path, layers_dir: Path) -> BuildContext:
    return BuildContext(
        working_dir=working_dir,
        layers_path=layers_dir,
        plan=(BuildPlanEntry(name="rust"),),
    )


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def frozen_timestamp() -> str:
    return FROZEN_TIMESTAMP
