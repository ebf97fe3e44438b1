"""CLI output formatting utilities."""

from __future__ import annotations

import json
from dataclasses import dataclass, fields, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Literal, cast

from polisher.lib.formatting import TextFormattable

OutputFormat = Literal["text", "json"]


@dataclass(frozen=True, slots=True)
class OutputConfig:
    format: OutputFormat


def to_payload(value: Any) -> Any:
    """Turn results, config and paths into plain JSON values.

    Dataclass fields excluded from comparison (resolved artifacts, for one) are
    runtime handles rather than settings, and are left out.
    """

    if is_dataclass(value) and not isinstance(value, type):
        return {
            item.name: to_payload(getattr(value, item.name))
            for item in fields(value)
            if item.compare
        }
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, dict):
        mapping = cast("dict[object, object]", value)
        return {str(key): to_payload(item) for key, item in mapping.items()}
    if isinstance(value, (list, tuple)):
        return [to_payload(item) for item in cast("list[object] | tuple[object, ...]", value)]
    return value


def emit(value: Any, config: OutputConfig) -> None:
    """Emit one payload according to the configured output mode."""

    if config.format == "json":
        print(json.dumps(to_payload(value), sort_keys=True))
        return
    if isinstance(value, TextFormattable):
        print(value.format_text())
        return
    if isinstance(value, list):
        for item in value:
            emit(item, config)
        return
    if isinstance(value, str):
        print(value)
        return
    print(json.dumps(to_payload(value), sort_keys=True, indent=2))
