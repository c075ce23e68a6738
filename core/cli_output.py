"""Where command output goes, and in which shape.

Commands print human-readable lines through ``OutputWriter.print``. When
the command was given ``--json`` they call ``print_data`` instead and emit a
single JSON document on stdout.
"""
from __future__ import annotations

import json
import sys
from dataclasses import asdict, dataclass, is_dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional, TextIO


class OutputFormat(str, Enum):
    TEXT = "text"
    JSON = "json"


@dataclass
class OutputConfig:
    format: OutputFormat = OutputFormat.TEXT
    file: Optional[TextIO] = None

    @property
    def stream(self) -> TextIO:
        # Looked up per call so redirected stdout (tests, pipes) is honoured
        return self.file or sys.stdout


class OutputWriter:
    def __init__(self, config: Optional[OutputConfig] = None):
        self.config = config or OutputConfig()

    @property
    def json(self) -> bool:
        return self.config.format == OutputFormat.JSON

    def print(self, *args, **kwargs) -> None:
        kwargs.setdefault("file", self.config.stream)
        print(*args, **kwargs)

    def print_data(self, data: Any) -> None:
        """Emit ``data`` as indented JSON; dataclasses, enums and datetimes are converted."""
        self.print(json.dumps(_jsonable(data), indent=2, ensure_ascii=False))


def _jsonable(data: Any) -> Any:
    if is_dataclass(data) and not isinstance(data, type):
        return _jsonable(asdict(data))
    if isinstance(data, dict):
        return {k: _jsonable(v) for k, v in data.items()}
    if isinstance(data, (list, tuple)):
        return [_jsonable(v) for v in data]
    if isinstance(data, Enum):
        return data.value
    if isinstance(data, datetime):
        return data.isoformat()
    return data
