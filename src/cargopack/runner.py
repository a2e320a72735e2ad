"""Package manager runners.

``Runner`` is the capability the orchestrator depends on. ``CargoRunner``
implements it by shelling out to ``cargo``; tests substitute a recording fake.
"""

from __future__ import annotations

import json
import os
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from cargopack.config import CargoConfig
from cargopack.errors import InstallError, ResolutionError
from cargopack.models import Layer, WorkspaceMember
from cargopack.observability import BuildLogger

STDERR_LIMIT = 2000


class Runner(Protocol):
    def workspace_members(
        self,
        working_dir: Path,
        cache_layer: Layer,
        launch_layer: Layer,
    ) -> list[WorkspaceMember]:
        """Return workspace members in a stable order."""

    def install(self, working_dir: Path, cache_layer: Layer, launch_layer: Layer) -> None:
        """Build and install the project rooted at *working_dir*."""

    def install_member(
        self,
        member_path: str,
        working_dir: Path,
        cache_layer: Layer,
        launch_layer: Layer,
    ) -> None:
        """Build and install the workspace member at *member_path*."""


@dataclass(slots=True)
class CargoRunner:
    config: CargoConfig = field(default_factory=CargoConfig)
    logger: BuildLogger | None = None
    base_env: Mapping[str, str] | None = None

    def workspace_members(
        self,
        working_dir: Path,
        cache_layer: Layer,
        launch_layer: Layer,
    ) -> list[WorkspaceMember]:
        cmd = [self.config.tool, "metadata", "--format-version=1", "--no-deps"]
        result = self._run(cmd, working_dir=working_dir, cache_layer=cache_layer)
        if result.returncode != 0:
            raise ResolutionError(
                "cargo metadata failed.",
                hint="Check that Cargo.toml is valid and the workspace is complete.",
                context=_failure_context(cmd, result),
            )

        try:
            metadata = json.loads(result.stdout)
        except json.JSONDecodeError as exc:
            raise ResolutionError(
                "cargo metadata returned invalid JSON.",
                context={"operation": "workspace_members", "command": " ".join(cmd)},
            ) from exc
        return self._members_from_metadata(metadata)

    def install(self, working_dir: Path, cache_layer: Layer, launch_layer: Layer) -> None:
        self._install(str(working_dir), working_dir, cache_layer, launch_layer)

    def install_member(
        self,
        member_path: str,
        working_dir: Path,
        cache_layer: Layer,
        launch_layer: Layer,
    ) -> None:
        self._install(member_path, working_dir, cache_layer, launch_layer)

    def _install(
        self,
        source_path: str,
        working_dir: Path,
        cache_layer: Layer,
        launch_layer: Layer,
    ) -> None:
        cmd = [
            self.config.tool,
            "install",
            *self.config.install_flags(),
            f"--path={source_path}",
            f"--root={launch_layer.path}",
        ]
        result = self._run(cmd, working_dir=working_dir, cache_layer=cache_layer)
        if result.returncode != 0:
            raise InstallError(
                "cargo install failed.",
                hint="Check cargo output for details.",
                context=_failure_context(cmd, result),
            )

    def _members_from_metadata(self, metadata: Any) -> list[WorkspaceMember]:
        if not isinstance(metadata, dict):
            raise ResolutionError("cargo metadata returned an unexpected payload.")
        raw_packages = metadata.get("packages", [])
        member_ids = metadata.get("workspace_members", [])
        for key, value in (("packages", raw_packages), ("workspace_members", member_ids)):
            if not isinstance(value, list):
                raise ResolutionError(
                    f"cargo metadata `{key}` is not a list.",
                    context={"operation": "workspace_members", "field": key},
                )
        packages = {
            package.get("id"): package for package in raw_packages if isinstance(package, dict)
        }
        wanted = set(self.config.workspace_members)

        members: list[WorkspaceMember] = []
        for member_id in member_ids:
            package = packages.get(member_id)
            if package is None:
                raise ResolutionError(
                    "cargo metadata lists a workspace member without a package entry.",
                    context={"operation": "workspace_members", "member": str(member_id)},
                )
            if wanted and package.get("name") not in wanted:
                continue
            manifest_path = package.get("manifest_path")
            if not isinstance(manifest_path, str) or not manifest_path:
                raise ResolutionError(
                    "cargo metadata package has no manifest path.",
                    context={"operation": "workspace_members", "member": str(member_id)},
                )
            members.append(WorkspaceMember.from_path(Path(manifest_path).parent))
        return members

    def _run(
        self,
        cmd: list[str],
        *,
        working_dir: Path,
        cache_layer: Layer,
    ) -> subprocess.CompletedProcess[str]:
        env = dict(os.environ if self.base_env is None else self.base_env)
        env["CARGO_HOME"] = str(cache_layer.path / "home")
        env["CARGO_TARGET_DIR"] = str(cache_layer.path / "target")

        if self.logger is not None:
            self.logger.log(
                operation="run",
                phase="cargo",
                message=f"Running '{' '.join(cmd)}'",
                extra={"cwd": str(working_dir)},
            )
        return subprocess.run(
            cmd,
            cwd=str(working_dir),
            env=env,
            capture_output=True,
            text=True,
            check=False,
        )


def _failure_context(cmd: list[str], result: subprocess.CompletedProcess[str]) -> dict[str, str]:
    return {
        "returncode": str(result.returncode),
        "stderr": result.stderr[:STDERR_LIMIT] if result.stderr else "",
        "command": " ".join(cmd),
    }
