from pathlib import Path

import pytest

from cargopack.errors import ResolutionError
from cargopack.layers import LayerManager
from cargopack.models import WorkspaceMember
from cargopack.observability import BuildLogger
from cargopack.workspace import DispatchMode, WorkspaceResolver, dispatch_mode, same_location


def test_dispatch_mode_for_root_member_is_single(working_dir: Path) -> None:
    members = [WorkspaceMember.from_path(working_dir)]

    assert dispatch_mode(members, working_dir) is DispatchMode.SINGLE


def test_dispatch_mode_for_lone_sub_member_is_members(working_dir: Path) -> None:
    members = [WorkspaceMember.from_path(working_dir / "member")]

    assert dispatch_mode(members, working_dir) is DispatchMode.MEMBERS


def test_dispatch_mode_for_many_members_is_members(working_dir: Path) -> None:
    members = [
        WorkspaceMember.from_path(working_dir),
        WorkspaceMember.from_path(working_dir / "member"),
    ]

    assert dispatch_mode(members, working_dir) is DispatchMode.MEMBERS


def test_dispatch_mode_for_no_members_is_empty(working_dir: Path) -> None:
    assert dispatch_mode([], working_dir) is DispatchMode.EMPTY


def test_same_location_normalizes_paths(working_dir: Path) -> None:
    member = WorkspaceMember(uri=(working_dir / "sub" / "..").as_uri() + "/")

    assert same_location(member, working_dir)
    assert same_location(WorkspaceMember.from_path(working_dir), str(working_dir) + "/")


def test_resolver_preserves_runner_order(
    working_dir: Path,
    layers_dir: Path,
    fake_runner,
) -> None:
    manager = LayerManager(layers_dir)
    fake_runner.members = [
        WorkspaceMember.from_path(working_dir / name) for name in ("zeta", "alpha", "mid")
    ]
    logger = BuildLogger()

    members = WorkspaceResolver(fake_runner, logger=logger).resolve(
        working_dir,
        manager.acquire("rust-cargo"),
        manager.acquire("rust-bin"),
    )

    assert members == fake_runner.members
    assert logger.records[-1]["message"] == "Found 3 workspace member(s)"


def test_resolver_propagates_runner_failure(
    working_dir: Path,
    layers_dir: Path,
    fake_runner,
) -> None:
    manager = LayerManager(layers_dir)
    error = ResolutionError("broken")
    fake_runner.members_error = error

    with pytest.raises(ResolutionError) as excinfo:
        WorkspaceResolver(fake_runner).resolve(
            working_dir,
            manager.acquire("rust-cargo"),
            manager.acquire("rust-bin"),
        )

    assert excinfo.value is error
