"""Structured logging and observability helpers."""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, TextIO

Stage = Literal["validate", "fingerprint", "compile", "generate", "self_test"]


@dataclass(slots=True)
class StructuredLogger:
    records: list[dict[str, Any]] = field(default_factory=list)
    echo: TextIO | None = None

    def log(
        self,
        *,
        operation: str,
        kernel: str | None,
        stage: Stage | None,
        message: str,
        level: str = "info",
        extra: dict[str, Any] | None = None,
    ) -> None:
        record: dict[str, Any] = {
            "level": level,
            "operation": operation,
            "kernel": kernel,
            "stage": stage,
            "message": message,
        }
        if extra is not None:
            record["extra"] = extra
        self.records.append(record)
        if self.echo is not None:
            print(message, file=self.echo)

    def records_for_stage(self, stage: Stage) -> list[dict[str, Any]]:
        return [record for record in self.records if record.get("stage") == stage]

    def operations(self) -> list[str]:
        return [str(record["operation"]) for record in self.records]

    def to_json_lines(self, path: str | Path) -> Path:
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        lines = [json.dumps(record, sort_keys=True) for record in self.records]
        output_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return output_path

    @classmethod
    def to_stderr(cls) -> StructuredLogger:
        return cls(echo=sys.stderr)
