"""Workspace member resolution and install dispatch selection."""

from __future__ import annotations

from collections.abc import Sequence
from enum import StrEnum
from pathlib import Path

from cargopack.models import Layer, WorkspaceMember
from cargopack.observability import BuildLogger
from cargopack.runner import Runner


class DispatchMode(StrEnum):
    EMPTY = "empty"
    SINGLE = "single"
    MEMBERS = "members"


def same_location(member: WorkspaceMember, working_dir: str | Path) -> bool:
    """Return True when *member* points at *working_dir* itself."""
    return Path(member.path).resolve() == Path(working_dir).resolve()


def dispatch_mode(members: Sequence[WorkspaceMember], working_dir: str | Path) -> DispatchMode:
    """Choose between a single in-place install and per-member installs.

    A lone member only counts as the single-project case when it is the
    working directory; a workspace filtered down to one sub-project still
    installs that member by path.
    """
    if not members:
        return DispatchMode.EMPTY
    if len(members) == 1 and same_location(members[0], working_dir):
        return DispatchMode.SINGLE
    return DispatchMode.MEMBERS


class WorkspaceResolver:
    def __init__(self, runner: Runner, *, logger: BuildLogger | None = None) -> None:
        self.runner = runner
        self.logger = logger

    def resolve(
        self,
        working_dir: Path,
        cache_layer: Layer,
        launch_layer: Layer,
    ) -> list[WorkspaceMember]:
        # Runner errors propagate as raised.
        members = list(self.runner.workspace_members(working_dir, cache_layer, launch_layer))
        if self.logger is not None:
            self.logger.log(
                operation="resolve",
                phase="workspace",
                message=f"Found {len(members)} workspace member(s)",
                extra={"members": [member.uri for member in members]},
            )
        return members
