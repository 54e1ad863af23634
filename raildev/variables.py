"""KEY=value variable arguments."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Variable:
    key: str
    value: str


def parse_variable(text: str) -> Variable:
    """Split on the first '='; both sides must be non-empty."""
    parts = text.split("=", 1)
    if len(parts) != 2 or any(not part for part in parts):
        raise ValueError(f"Invalid variable format: {'='.join(parts)}")
    key, value = parts
    return Variable(key=key, value=value)