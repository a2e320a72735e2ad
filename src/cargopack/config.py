"""Build configuration read from the buildpack environment."""

from __future__ import annotations

import os
import shlex
from collections.abc import Mapping
from dataclasses import dataclass

from cargopack.errors import ValidationError

DEFAULT_INSTALL_ARGS = ("--color=never",)

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


@dataclass(frozen=True, slots=True)
class CargoConfig:
    tool: str = "cargo"
    workspace_members: tuple[str, ...] = ()
    install_args: tuple[str, ...] = DEFAULT_INSTALL_ARGS
    locked: bool = True

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> CargoConfig:
        env = os.environ if environ is None else environ
        members = tuple(
            name.strip()
            for name in env.get("BP_CARGO_WORKSPACE_MEMBERS", "").split(",")
            if name.strip()
        )
        raw_args = env.get("BP_CARGO_INSTALL_ARGS")
        install_args = tuple(shlex.split(raw_args)) if raw_args else DEFAULT_INSTALL_ARGS
        return cls(
            tool=env.get("BP_CARGO_TOOL", "cargo") or "cargo",
            workspace_members=members,
            install_args=install_args,
            locked=_parse_bool(env, "BP_CARGO_LOCKED", default=True),
        )

    def install_flags(self) -> tuple[str, ...]:
        flags = list(self.install_args)
        if self.locked and "--locked" not in flags:
            flags.append("--locked")
        return tuple(flags)


def _parse_bool(env: Mapping[str, str], key: str, *, default: bool) -> bool:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValidationError(
        f"Invalid boolean value for {key}.",
        hint="Use one of: true, false, 1, 0, yes, no.",
        context={"variable": key, "value": raw},
    )
