"""
Base protocols for the glowstick framework.

This module defines the small abstractions the CLI and effect facade
build upon.
"""

from typing import Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class FrameFilter(Protocol):
    """Protocol for filters that turn one frame into another."""

    def apply(self, frame: np.ndarray) -> np.ndarray:
        """Apply the filter to a frame."""
        ...


class FilterChain:
    """
    A chain of frame filters that can be applied in sequence.

    Example:
        chain = FilterChain()
        chain.add(GlowstickEffect(blend_mode="multiply"))
        chain.add(GlowstickEffect(bloom_strength=12.0))

        processed = chain.apply(frame)
    """

    def __init__(self, filters: list[FrameFilter] | None = None):
        self.filters = filters or []

    def add(self, filter_: FrameFilter) -> "FilterChain":
        """Add a filter to the chain."""
        if not isinstance(filter_, FrameFilter):
            raise TypeError(f"{type(filter_).__name__} has no apply(frame) method")
        self.filters.append(filter_)
        return self

    def apply(self, frame: np.ndarray) -> np.ndarray:
        """Apply all filters in sequence."""
        result = frame
        for f in self.filters:
            result = f.apply(result)
        return result

    def __len__(self) -> int:
        return len(self.filters)
