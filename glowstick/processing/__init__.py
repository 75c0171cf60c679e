"""
Processing module - Primitive image operations.

This module provides:
- Operation registry: register_operation / get_operation / apply_operation
- Colour: solid colour fill, desaturate, invert-gamma, hue-chroma
- Blend: layer-mode compositing (nine modes, four blend spaces)
- Glow: bloom and soft glow
- Noise reduction, crop and nop
- Chain strings: textual operation chains run by the "graph" operation

Importing this package registers every built-in operation.
"""

from glowstick.processing.registry import (
    OperationSpec,
    register_operation,
    get_operations,
    get_operation,
    get_operation_spec,
    apply_operation,
    canonical_name,
)
from glowstick.processing.color import (
    parse_color,
    format_color,
    srgb_to_linear,
    linear_to_srgb,
    luminance,
    smoothstep,
    smootherstep,
    color_fill,
    desaturate,
    invert_gamma,
    hue_chroma,
)
from glowstick.processing.blend import (
    LayerMode,
    BlendSpace,
    blend,
    layer_mode,
    resolve_blend_space,
)
from glowstick.processing.glow import bloom, softglow
from glowstick.processing.denoise import diffuse, noise_reduction
from glowstick.processing.geometry import crop, nop
from glowstick.processing.graph_string import parse_chain, run_chain

__all__ = [
    # Registry
    "OperationSpec",
    "register_operation",
    "get_operations",
    "get_operation",
    "get_operation_spec",
    "apply_operation",
    "canonical_name",
    # Colour
    "parse_color",
    "format_color",
    "srgb_to_linear",
    "linear_to_srgb",
    "luminance",
    "smoothstep",
    "smootherstep",
    "color_fill",
    "desaturate",
    "invert_gamma",
    "hue_chroma",
    # Blend
    "LayerMode",
    "BlendSpace",
    "blend",
    "layer_mode",
    "resolve_blend_space",
    # Glow
    "bloom",
    "softglow",
    # Other operations
    "diffuse",
    "noise_reduction",
    "crop",
    "nop",
    "parse_chain",
    "run_chain",
]
