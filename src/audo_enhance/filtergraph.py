"""Typed filter operations and their serialization to ffmpeg filtergraph syntax."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable

ParamValue = str | int | float | bool

_RESERVED_CHARACTERS = frozenset(",;:=[]'\\")


@dataclass(frozen=True, slots=True)
class FilterOp:
    """One named engine filter with ordered parameters."""

    name: str
    params: tuple[tuple[str, ParamValue], ...] = ()

    def param(self, key: str) -> ParamValue:
        for name, value in self.params:
            if name == key:
                return value
        raise KeyError(f"{self.name} has no parameter {key!r}")

    def to_dict(self) -> dict[str, Any]:
        return {"filter": self.name, "params": {key: value for key, value in self.params}}


def filter_op(name: str, **params: ParamValue) -> FilterOp:
    """Build a :class:`FilterOp` keeping keyword order as parameter order."""

    return FilterOp(name=name, params=tuple(params.items()))


def format_param_value(value: ParamValue) -> str:
    """Render a parameter value the way the engine parses it."""

    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"Filter parameter values must be finite, got {value!r}.")
        return format(value, ".12g")
    text = str(value)
    if not text or any(char in _RESERVED_CHARACTERS for char in text):
        raise ValueError(f"Filter parameter value {text!r} is empty or contains reserved characters.")
    return text


def serialize_filter_op(op: FilterOp) -> str:
    if not op.params:
        return op.name
    rendered = ":".join(f"{key}={format_param_value(value)}" for key, value in op.params)
    return f"{op.name}={rendered}"


def serialize_filter_chain(ops: Iterable[FilterOp]) -> str:
    """Join operations into a single linear ``-af`` filter chain."""

    chain = ",".join(serialize_filter_op(op) for op in ops)
    if not chain:
        raise ValueError("A filter chain needs at least one operation.")
    return chain
