"""Flat-potential layers and the compact layer-stack syntax."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence


@dataclass(frozen=True)
class Layer:
    width: float
    potential: float = 0.0


def parse_layer_token(token: str) -> Layer:
    """Parse one token of a layer stack.

    - ``b:WIDTH``      well with V = 0
    - ``U:V:WIDTH``    barrier of height V (may be negative)
    - ``WIDTH``        bare width, treated as a well
    """
    parts = token.strip().split(":")
    try:
        if parts[0] == "b" and len(parts) == 2:
            return Layer(width=float(parts[1]), potential=0.0)
        if parts[0] == "U" and len(parts) == 3:
            return Layer(width=float(parts[2]), potential=float(parts[1]))
        if len(parts) == 1:
            return Layer(width=float(parts[0]), potential=0.0)
    except ValueError as exc:
        raise ValueError(f"Invalid layer token: {token!r}") from exc
    raise ValueError(f"Invalid layer token: {token!r}. Expected 'b:W', 'U:V:W' or 'W'")


def parse_layers(text: str) -> list[Layer]:
    """Parse a comma-separated stack such as ``b:0.3,U:8:0.2,b:0.3``."""
    tokens = [t for t in text.strip().split(",") if t.strip()]
    return [parse_layer_token(t) for t in tokens]


def period_of(layers: Sequence[Layer]) -> float:
    return math.fsum(layer.width for layer in layers)
