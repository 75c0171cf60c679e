"""
Operation registry for glowstick.

Every primitive image operation a pipeline node can run is a plain function
registered here under a short name. Nodes refer to operations by that name.

To add a new operation:
1. Create a function with signature: func(image: np.ndarray, aux: np.ndarray | None, **properties) -> np.ndarray
2. Register it with the @register_operation decorator, declaring its properties and defaults

All operations receive:
- image: float32 RGB image (HxWx3, values 0-1), or None for source operations
- aux: float32 RGB image connected to the node's side input, or None
- **properties: the node's current property values

All operations must return:
- A float32 RGB image (a 1x1 plane is allowed for source operations)
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict

import numpy as np


@dataclass
class OperationSpec:
    """A registered operation and its declared properties."""
    name: str
    func: Callable
    description: str = ""
    properties: Dict[str, Any] = field(default_factory=dict)
    source: bool = False


# Registry of available operations
_OPERATIONS: Dict[str, OperationSpec] = {}


def canonical_name(name: str) -> str:
    """Strip a namespace prefix ("gegl:crop" -> "crop")."""
    return name.split(":", 1)[-1].strip().lower()


def register_operation(
    name: str,
    description: str = "",
    properties: Dict[str, Any] | None = None,
    source: bool = False,
):
    """Decorator to register an image operation."""
    def decorator(func: Callable):
        _OPERATIONS[canonical_name(name)] = OperationSpec(
            name=canonical_name(name),
            func=func,
            description=description,
            properties=dict(properties or {}),
            source=source,
        )
        return func
    return decorator


def get_operations() -> list:
    """Return list of available operation names."""
    return list(_OPERATIONS.keys())


def get_operation_spec(name: str) -> OperationSpec:
    """Get the full registration of an operation by name."""
    key = canonical_name(name)
    if key not in _OPERATIONS:
        raise ValueError(f"Unknown operation: {name}. Available: {get_operations()}")
    return _OPERATIONS[key]


def get_operation(name: str) -> Callable:
    """Get an operation function by name."""
    return get_operation_spec(name).func


def apply_operation(
    name: str,
    image: np.ndarray | None,
    aux: np.ndarray | None = None,
    **properties,
) -> np.ndarray:
    """Apply a named operation, filling in undeclared properties with defaults."""
    spec = get_operation_spec(name)
    unknown = set(properties) - set(spec.properties)
    if unknown:
        raise ValueError(f"Unknown properties for {spec.name}: {sorted(unknown)}")
    params = dict(spec.properties)
    params.update(properties)
    return spec.func(image, aux, **params)
