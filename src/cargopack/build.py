"""Build orchestration for Cargo projects and workspaces."""

from __future__ import annotations

from cargopack.clock import Clock, format_timestamp
from cargopack.config import CargoConfig
from cargopack.errors import ValidationError
from cargopack.layers import LayerManager
from cargopack.models import (
    BUILT_AT_KEY,
    CACHE_LAYER,
    LAUNCH_LAYER,
    BuildContext,
    BuildResult,
    Layer,
    WorkspaceMember,
)
from cargopack.observability import BuildLogger
from cargopack.runner import CargoRunner, Runner
from cargopack.workspace import DispatchMode, WorkspaceResolver, dispatch_mode

RUST_PLAN_ENTRY = "rust"


class BuildOrchestrator:
    """Acquire layers, install the project or its members, and stamp the layers.

    Errors raised by the layer manager or the runner are not caught: a failed
    step ends the build without a result.
    """

    def __init__(
        self,
        runner: Runner,
        clock: Clock,
        *,
        logger: BuildLogger | None = None,
    ) -> None:
        self.runner = runner
        self.clock = clock
        self.logger = logger if logger is not None else BuildLogger()
        self.resolver = WorkspaceResolver(runner, logger=self.logger)

    def build(self, context: BuildContext) -> BuildResult:
        built_at = format_timestamp(self.clock.now())
        self.logger.title(f"Rust Cargo Buildpack: building {context.working_dir}")

        layers = LayerManager(context.layers_path, logger=self.logger)
        cache_layer = layers.acquire(CACHE_LAYER)
        _assign_roles(cache_layer, cache=True, launch=False)
        launch_layer = layers.acquire(LAUNCH_LAYER)
        # Binaries are reinstalled every build; drop ones from removed members.
        launch_layer.reset()
        _assign_roles(launch_layer, cache=False, launch=True)

        members = self.resolver.resolve(context.working_dir, cache_layer, launch_layer)
        mode = dispatch_mode(members, context.working_dir)
        if mode is DispatchMode.SINGLE:
            self._install_project(context, cache_layer, launch_layer)
        elif mode is DispatchMode.MEMBERS:
            self._install_members(members, context, cache_layer, launch_layer)
        else:
            self.logger.warning(
                operation="install",
                phase="install",
                message="No workspace members found, skipping cargo install",
            )

        for layer in (cache_layer, launch_layer):
            layer.metadata = {BUILT_AT_KEY: built_at}
            self.logger.log(
                operation="stamp",
                phase="layers",
                layer=layer.name,
                message=f"Stamped layer {layer.name} built_at={built_at}",
            )
        return BuildResult(layers=[cache_layer, launch_layer])

    def _install_project(
        self,
        context: BuildContext,
        cache_layer: Layer,
        launch_layer: Layer,
    ) -> None:
        self.logger.log(
            operation="install",
            phase="install",
            member=str(context.working_dir),
            message="Installing project",
        )
        self.runner.install(context.working_dir, cache_layer, launch_layer)

    def _install_members(
        self,
        members: list[WorkspaceMember],
        context: BuildContext,
        cache_layer: Layer,
        launch_layer: Layer,
    ) -> None:
        for member in members:
            self.logger.log(
                operation="install",
                phase="install",
                member=member.path,
                message=f"Installing workspace member {member.path}",
            )
            self.runner.install_member(member.path, context.working_dir, cache_layer, launch_layer)


def run_build(
    context: BuildContext,
    *,
    runner: Runner | None = None,
    clock: Clock | None = None,
    logger: BuildLogger | None = None,
    config: CargoConfig | None = None,
) -> BuildResult:
    """Run a build with the Cargo runner and persist the resulting layer state."""
    if not context.has_entry(RUST_PLAN_ENTRY):
        raise ValidationError(
            f"Build plan has no `{RUST_PLAN_ENTRY}` entry.",
            hint="This buildpack only runs when detection requires `rust`.",
            context={"operation": "run_build"},
        )
    logger = logger if logger is not None else BuildLogger()
    if runner is None:
        runner = CargoRunner(config=config or CargoConfig.from_env(), logger=logger)
    orchestrator = BuildOrchestrator(runner, clock or Clock(), logger=logger)
    result = orchestrator.build(context)

    manager = LayerManager(context.layers_path, logger=logger)
    for layer in result.layers:
        manager.write(layer)
    return result


def _assign_roles(layer: Layer, *, cache: bool, launch: bool) -> None:
    layer.build = False
    layer.cache = cache
    layer.launch = launch
