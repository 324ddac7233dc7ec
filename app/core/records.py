"""Uniform field access over loosely typed records (dicts or ORM/attribute objects)."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


def field_value(record: Any, name: str, default: Any = None) -> Any:
    if isinstance(record, Mapping):
        return record.get(name, default)
    return getattr(record, name, default)
