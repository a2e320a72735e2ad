"""Buildpack errors carrying a stable code, an optional hint, and context."""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from typing import ClassVar


class ErrorCode(StrEnum):
    VALIDATION = "E_VALIDATION"
    LAYER = "E_LAYER"
    RESOLUTION = "E_RESOLUTION"
    INSTALL = "E_INSTALL"


class BuildpackError(Exception):
    """Base error; subclasses pick their code through ``error_code``.

    ``str()`` of an error built from a bare message is that message, so
    callers can surface runner failures verbatim.
    """

    error_code: ClassVar[ErrorCode]

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = self.error_code.value
        self.hint = hint
        self.context = dict(context or {})

    def __str__(self) -> str:
        lines = [self.message]
        if self.hint:
            lines.append(f"Hint: {self.hint}")
        lines.extend(f"  {key}: {value}" for key, value in self.context.items() if value)
        return "\n".join(lines)

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "code": self.code,
            "message": str(self),
            "context": dict(self.context),
        }
        if self.hint is not None:
            payload["hint"] = self.hint
        return payload


class ValidationError(BuildpackError):
    error_code = ErrorCode.VALIDATION


class LayerAcquisitionError(BuildpackError):
    """Layer state could not be read or created."""

    error_code = ErrorCode.LAYER


class ResolutionError(BuildpackError):
    error_code = ErrorCode.RESOLUTION


class InstallError(BuildpackError):
    error_code = ErrorCode.INSTALL


__all__ = [
    "BuildpackError",
    "ErrorCode",
    "InstallError",
    "LayerAcquisitionError",
    "ResolutionError",
    "ValidationError",
]
