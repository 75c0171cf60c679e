"""
Glowstick - Neon glow-stick image effect
========================================

A single image effect that is internally a small node graph of primitive
operations (noise reduction, desaturate/invert, layer-mode blend with a
fill colour, crop, hue-chroma, bloom, soft glow). The graph rewires itself
on every parameter change: one of nine pre-built blend nodes is selected,
and the bloom and soft glow stages are spliced in only when their strength
is above zero.

Main modules:
- glowstick.effect: The meta-filter (parameters, pool, assembler, facade)
- glowstick.processing: Primitive image operations and their registry
- glowstick.core: Graph runtime, configuration and image I/O

Quick start:
    >>> from glowstick import GlowstickEffect
    >>> effect = GlowstickEffect(blend_mode="hardlight", bloom_strength=5.0)
    >>> result = effect.process(image)    # HxWx3 float32 RGB, 0-1
    >>> effect.chain_names()
"""

__version__ = "0.1.0"

# Convenience imports
from glowstick.effect import (
    GlowstickEffect,
    GlowstickParams,
    BlendMode,
    attach,
    reconfigure,
)
from glowstick.core.graph import NodeGraph, GraphError

__all__ = [
    "__version__",
    "GlowstickEffect",
    "GlowstickParams",
    "BlendMode",
    "attach",
    "reconfigure",
    "NodeGraph",
    "GraphError",
]
