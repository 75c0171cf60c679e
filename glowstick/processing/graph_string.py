"""
Textual operation chains.

A chain string lists operations in the order they are applied, each
optionally followed by key=value property tokens:

    gimp:desaturate invert-gamma
    noise-reduction iterations=3 hue-chroma chroma=4.5

Namespace prefixes ("gegl:", "gimp:") are accepted and ignored. Property
names may use hyphens; they are mapped to underscores. Values are
converted to the type of the property's declared default. Branching
syntax (id=, ref=, aux=[ ... ]) is not supported.
"""

import math
from enum import IntEnum
from functools import lru_cache

import numpy as np

from glowstick.processing.registry import apply_operation, get_operation_spec, register_operation

_BRANCH_KEYS = {"id", "ref", "aux"}
_TRUE = ("true", "yes", "on", "1")
_FALSE = ("false", "no", "off", "0")


def _parse_value(text: str, default):
    """
    Convert a property token value to the type of the declared default.

    Raises:
        ValueError: If the text does not fit the type
    """
    if isinstance(default, bool):
        lowered = text.lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        raise ValueError(f"expected a boolean, got {text!r}")

    if isinstance(default, IntEnum):
        enum_cls = type(default)
        try:
            return enum_cls(int(text))
        except ValueError:
            pass
        key = text.strip().upper().replace("-", "_")
        if key in enum_cls.__members__:
            return enum_cls[key]
        raise ValueError(f"expected one of {list(enum_cls.__members__)}, got {text!r}")

    if isinstance(default, int):
        try:
            return int(text)
        except ValueError:
            raise ValueError(f"expected an integer, got {text!r}") from None

    if isinstance(default, float):
        try:
            value = float(text)
        except ValueError:
            raise ValueError(f"expected a number, got {text!r}") from None
        if not math.isfinite(value):
            raise ValueError(f"expected a finite number, got {text!r}")
        return value

    return text


@lru_cache(maxsize=64)
def parse_chain(text: str) -> tuple:
    """
    Parse a chain string.

    Returns:
        Tuple of (operation_name, ((key, value), ...)) pairs

    Raises:
        ValueError: On unknown operations, properties, or branching syntax
    """
    steps = []
    for token in text.split():
        if "[" in token or "]" in token:
            raise ValueError(f"Sub-graphs are not supported in chain strings: {token!r}")

        if "=" in token:
            key, value = token.split("=", 1)
            key = key.strip().replace("-", "_")
            if key in _BRANCH_KEYS:
                raise ValueError(f"Branching is not supported in chain strings: {token!r}")
            if not steps:
                raise ValueError(f"Property {token!r} appears before any operation")
            name, props = steps[-1]
            spec = get_operation_spec(name)
            if key not in spec.properties:
                raise ValueError(f"Unknown property {key!r} for operation {name!r}")
            try:
                parsed = _parse_value(value, spec.properties[key])
            except ValueError as e:
                raise ValueError(f"Bad value for {name}.{key}: {e}") from None
            steps[-1] = (name, props + ((key, parsed),))
            continue

        spec = get_operation_spec(token)
        if spec.source:
            raise ValueError(f"Source operation {token!r} cannot be chained")
        if spec.name == "graph":
            raise ValueError("Chain strings cannot nest the graph operation")
        steps.append((spec.name, ()))

    return tuple(steps)


def run_chain(text: str, image: np.ndarray) -> np.ndarray:
    """Apply every operation of a chain string to an image, in order."""
    result = image
    for name, props in parse_chain(text):
        result = apply_operation(name, result, None, **dict(props))
    return result


@register_operation(
    "graph",
    "Run a textual chain of operations",
    properties={"string": ""},
)
def graph(image: np.ndarray, aux=None, string: str = "", **params) -> np.ndarray:
    return run_chain(string, image)
