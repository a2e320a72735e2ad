"""Layer acquisition and on-disk layer state persistence.

Each layer ``<name>`` lives at ``<layers_path>/<name>`` and has its state in
``<layers_path>/<name>.toml``::

    [types]
    build = false
    cache = true
    launch = false

    [metadata]
    built_at = "2026-01-01T00:00:00.000000+00:00"

Environment variables are stored one file per variable under ``env/``,
``env.build/`` and ``env.launch/`` inside the layer directory, with
per-process launch variables under ``env.launch/<process>/``.
"""

from __future__ import annotations

import shutil
import tomllib
from pathlib import Path
from typing import Any

import tomli_w

from cargopack.errors import LayerAcquisitionError
from cargopack.models import Environment, Layer
from cargopack.observability import BuildLogger

_SHARED_ENV_DIR = "env"
_BUILD_ENV_DIR = "env.build"
_LAUNCH_ENV_DIR = "env.launch"


class LayerManager:
    def __init__(self, root: str | Path, *, logger: BuildLogger | None = None) -> None:
        self.root = Path(root)
        self.logger = logger

    def state_path(self, name: str) -> Path:
        return self.root / f"{name}.toml"

    def acquire(self, name: str) -> Layer:
        """Return layer *name*, reloading any persisted state for it."""
        path = self.root / name
        state_path = self.state_path(name)
        try:
            path.mkdir(parents=True, exist_ok=True)
            state = _read_state(state_path) if state_path.exists() else {}
            layer = Layer(name=name, path=path)
            _apply_state(layer, state, state_path=state_path)
            layer.shared_env = _read_env_dir(path / _SHARED_ENV_DIR)
            layer.build_env = _read_env_dir(path / _BUILD_ENV_DIR)
            layer.launch_env = _read_env_dir(path / _LAUNCH_ENV_DIR)
            layer.process_launch_env = _read_process_env(path / _LAUNCH_ENV_DIR)
        except (OSError, UnicodeDecodeError) as exc:
            raise LayerAcquisitionError(
                f"failed to acquire layer {name}: {exc}",
                context={"operation": "acquire", "layer": name},
            ) from exc

        if self.logger is not None:
            self.logger.log(
                operation="acquire",
                phase="layers",
                layer=name,
                message=f"Acquired layer {name} at {path}",
            )
        return layer

    def write(self, layer: Layer) -> Path:
        """Persist *layer* state and env directories; return the state file path."""
        state_path = self.state_path(layer.name)
        state: dict[str, Any] = {
            "types": {
                "build": layer.build,
                "cache": layer.cache,
                "launch": layer.launch,
            },
        }
        if layer.metadata:
            state["metadata"] = dict(layer.metadata)

        self.root.mkdir(parents=True, exist_ok=True)
        layer.path.mkdir(parents=True, exist_ok=True)
        state_path.write_text(tomli_w.dumps(state), encoding="utf-8")

        launch_dir = layer.path / _LAUNCH_ENV_DIR
        for directory in (layer.path / _SHARED_ENV_DIR, layer.path / _BUILD_ENV_DIR, launch_dir):
            if directory.exists():
                shutil.rmtree(directory)
        _write_env_dir(layer.path / _SHARED_ENV_DIR, layer.shared_env)
        _write_env_dir(layer.path / _BUILD_ENV_DIR, layer.build_env)
        _write_env_dir(launch_dir, layer.launch_env)
        for process, env in sorted(layer.process_launch_env.items()):
            _write_env_dir(launch_dir / process, env)
        return state_path


def _read_state(path: Path) -> dict[str, Any]:
    raw = path.read_text(encoding="utf-8")
    try:
        return tomllib.loads(raw)
    except tomllib.TOMLDecodeError as exc:
        raise LayerAcquisitionError(
            f"failed to parse layer state {path.name}: {exc}",
            hint="Remove the corrupt layer state file and rebuild.",
            context={"operation": "acquire", "path": str(path)},
        ) from exc


def _apply_state(layer: Layer, state: dict[str, Any], *, state_path: Path) -> None:
    types = state.get("types", {})
    if not isinstance(types, dict):
        raise LayerAcquisitionError(
            f"invalid [types] table in layer state {state_path.name}",
            context={"operation": "acquire", "path": str(state_path)},
        )
    for role in ("build", "cache", "launch"):
        value = types.get(role, False)
        if not isinstance(value, bool):
            raise LayerAcquisitionError(
                f"invalid {role} flag in layer state {state_path.name}",
                context={"operation": "acquire", "path": str(state_path)},
            )
        setattr(layer, role, value)

    metadata = state.get("metadata", {})
    if not isinstance(metadata, dict):
        raise LayerAcquisitionError(
            f"invalid [metadata] table in layer state {state_path.name}",
            context={"operation": "acquire", "path": str(state_path)},
        )
    layer.metadata = dict(metadata)


def _read_env_dir(directory: Path) -> Environment:
    if not directory.is_dir():
        return {}
    return {
        entry.name: entry.read_text(encoding="utf-8")
        for entry in sorted(directory.iterdir())
        if entry.is_file()
    }


def _read_process_env(directory: Path) -> dict[str, Environment]:
    if not directory.is_dir():
        return {}
    return {
        entry.name: _read_env_dir(entry)
        for entry in sorted(directory.iterdir())
        if entry.is_dir()
    }


def _write_env_dir(directory: Path, env: Environment) -> None:
    if not env:
        return
    directory.mkdir(parents=True, exist_ok=True)
    for key, value in sorted(env.items()):
        (directory / key).write_text(value, encoding="utf-8")
