"""
Layer-mode compositing.

A layer-mode node composites the image on its side input (the layer) over
the image on its primary input (the base). Mode numbers follow the layer
mode enumeration used by GIMP, so graphs written against that numbering
keep their meaning.
"""

from enum import IntEnum

import cv2
import numpy as np

from glowstick.processing.color import lab_to_rgb, linear_to_srgb, rgb_to_lab, srgb_to_linear
from glowstick.processing.registry import register_operation


class LayerMode(IntEnum):
    """Supported layer modes."""
    OVERLAY = 23
    LCH_COLOR = 26
    MULTIPLY = 30
    HSL_COLOR = 39
    BURN = 43
    HARDLIGHT = 44
    SOFTLIGHT = 45
    GRAIN_MERGE = 47
    LINEAR_LIGHT = 50


class BlendSpace(IntEnum):
    """Colour space the blend formula is evaluated in."""
    AUTO = 0
    RGB_LINEAR = 1
    RGB_PERCEPTUAL = 2
    LAB = 3


# Space used when a node asks for AUTO
DEFAULT_BLEND_SPACE = {
    LayerMode.OVERLAY: BlendSpace.RGB_PERCEPTUAL,
    LayerMode.LCH_COLOR: BlendSpace.LAB,
    LayerMode.MULTIPLY: BlendSpace.RGB_LINEAR,
    LayerMode.HSL_COLOR: BlendSpace.RGB_PERCEPTUAL,
    LayerMode.BURN: BlendSpace.RGB_LINEAR,
    LayerMode.HARDLIGHT: BlendSpace.RGB_PERCEPTUAL,
    LayerMode.SOFTLIGHT: BlendSpace.RGB_PERCEPTUAL,
    LayerMode.GRAIN_MERGE: BlendSpace.RGB_PERCEPTUAL,
    LayerMode.LINEAR_LIGHT: BlendSpace.RGB_LINEAR,
}


def _overlay(base, layer):
    return np.where(base < 0.5, 2 * base * layer, 1 - 2 * (1 - base) * (1 - layer))


def _multiply(base, layer):
    return base * layer


def _burn(base, layer):
    with np.errstate(divide="ignore", invalid="ignore"):
        out = 1 - (1 - base) / layer
    return np.where(layer <= 0.0, 0.0, out)


def _hardlight(base, layer):
    return np.where(layer < 0.5, 2 * base * layer, 1 - 2 * (1 - base) * (1 - layer))


def _softlight(base, layer):
    multiply = base * layer
    screen = 1 - (1 - base) * (1 - layer)
    return (1 - base) * multiply + base * screen


def _grain_merge(base, layer):
    return base + layer - 0.5


def _linear_light(base, layer):
    return np.where(layer <= 0.5, base + 2 * layer - 1, base + 2 * (layer - 0.5))


SEPARABLE_MODES = {
    LayerMode.OVERLAY: _overlay,
    LayerMode.MULTIPLY: _multiply,
    LayerMode.BURN: _burn,
    LayerMode.HARDLIGHT: _hardlight,
    LayerMode.SOFTLIGHT: _softlight,
    LayerMode.GRAIN_MERGE: _grain_merge,
    LayerMode.LINEAR_LIGHT: _linear_light,
}


def _hsl_color(base: np.ndarray, layer: np.ndarray) -> np.ndarray:
    """Hue and saturation from the layer, lightness from the base."""
    base_hls = cv2.cvtColor(base, cv2.COLOR_RGB2HLS)
    layer_hls = cv2.cvtColor(layer, cv2.COLOR_RGB2HLS)
    layer_hls[:, :, 1] = base_hls[:, :, 1]
    return cv2.cvtColor(layer_hls, cv2.COLOR_HLS2RGB)


def _lch_color(base: np.ndarray, layer: np.ndarray) -> np.ndarray:
    """Chroma and hue from the layer, lightness from the base."""
    base_lab = rgb_to_lab(base)
    layer_lab = rgb_to_lab(layer)
    layer_lab[:, :, 0] = base_lab[:, :, 0]
    return lab_to_rgb(layer_lab)


def resolve_blend_space(mode: LayerMode, space: BlendSpace) -> BlendSpace:
    """Replace AUTO with the mode's default space."""
    space = BlendSpace(space)
    if space == BlendSpace.AUTO:
        return DEFAULT_BLEND_SPACE[LayerMode(mode)]
    return space


def blend(base: np.ndarray, layer: np.ndarray, mode: LayerMode,
          space: BlendSpace = BlendSpace.AUTO) -> np.ndarray:
    """
    Blend a layer over a base image.

    Separable modes evaluated in LAB fall back to perceptual RGB; LCh colour
    always works in Lab and HSL colour always works on perceptual RGB.

    Args:
        base: HxWx3 float32 image
        layer: HxWx3 image, or a 1x1 plane broadcast to the base extent
        mode: Layer mode
        space: Blend space

    Returns:
        Blended HxWx3 float32 image, clipped to 0-1
    """
    mode = LayerMode(mode)
    space = resolve_blend_space(mode, space)

    base = np.clip(base, 0.0, 1.0).astype(np.float32)
    layer = np.ascontiguousarray(
        np.broadcast_to(np.clip(layer, 0.0, 1.0), base.shape), dtype=np.float32
    )

    if mode == LayerMode.LCH_COLOR:
        return _lch_color(base, layer)
    if mode == LayerMode.HSL_COLOR:
        return np.clip(_hsl_color(base, layer), 0.0, 1.0)

    formula = SEPARABLE_MODES[mode]
    if space == BlendSpace.RGB_LINEAR:
        out = formula(srgb_to_linear(base), srgb_to_linear(layer))
        return linear_to_srgb(out)
    return np.clip(formula(base, layer), 0.0, 1.0).astype(np.float32)


@register_operation(
    "layer-mode",
    "Composite the aux image over the input with a layer mode",
    properties={
        "layer_mode": LayerMode.SOFTLIGHT,
        "blend_space": BlendSpace.AUTO,
        "composite_mode": 0,
        "opacity": 1.0,
    },
)
def layer_mode(image: np.ndarray, aux: np.ndarray | None = None,
               layer_mode: int = LayerMode.SOFTLIGHT, blend_space: int = BlendSpace.AUTO,
               composite_mode: int = 0, opacity: float = 1.0, **params) -> np.ndarray:
    """
    Composite the aux image over the input.

    Both images are treated as opaque, so every composite mode reduces to a
    straight mix by opacity. Without aux the input passes through unchanged.
    """
    if aux is None:
        return image
    blended = blend(image, aux, layer_mode, blend_space)
    opacity = float(np.clip(opacity, 0.0, 1.0))
    if opacity >= 1.0:
        return blended
    return (image + (blended - image) * opacity).astype(np.float32)
