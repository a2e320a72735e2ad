"""Structured build logging."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TextIO


@dataclass(slots=True)
class BuildLogger:
    records: list[dict[str, Any]] = field(default_factory=list)
    stream: TextIO | None = None

    def log(
        self,
        *,
        operation: str,
        phase: str | None,
        message: str,
        layer: str | None = None,
        member: str | None = None,
        level: str = "info",
        extra: dict[str, Any] | None = None,
    ) -> None:
        record: dict[str, Any] = {
            "level": level,
            "operation": operation,
            "phase": phase,
            "layer": layer,
            "member": member,
            "message": message,
        }
        if extra is not None:
            record["extra"] = extra
        self.records.append(record)
        if self.stream is not None:
            _emit(self.stream, record)

    def title(self, message: str) -> None:
        self.log(operation="build", phase=None, message=message, level="title")

    def warning(self, *, operation: str, phase: str | None, message: str) -> None:
        self.log(operation=operation, phase=phase, message=message, level="warning")

    def records_for_phase(self, phase: str) -> list[dict[str, Any]]:
        return [record for record in self.records if record.get("phase") == phase]

    def to_json_lines(self, path: str | Path) -> Path:
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        lines = [json.dumps(record, sort_keys=True) for record in self.records]
        output_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return output_path


def _emit(stream: TextIO, record: dict[str, Any]) -> None:
    level = record["level"]
    if level == "title":
        line = record["message"]
    elif level == "warning":
        line = f"  WARNING: {record['message']}"
    else:
        line = f"    {record['message']}"
    stream.write(line + "\n")
    stream.flush()
