"""
Color operations and helpers for the glowstick pipeline.

This module provides the colour-space helpers shared by the other operations
(sRGB transfer curves, luminance, smoothstep) and the registered colour
operations: solid colour fill, desaturate, invert-gamma and hue-chroma.
"""

import cv2
import numpy as np

from glowstick.processing.registry import register_operation

# Rec. 709 luminance weights, applied to linear light
LUMA_WEIGHTS = np.array([0.2126, 0.7152, 0.0722], dtype=np.float32)


def parse_color(value) -> tuple[float, float, float]:
    """
    Parse a colour into an RGB float triple in the 0-1 range.

    Accepts '#rgb', '#rrggbb', '#rrggbbaa' hex strings (alpha is dropped)
    or a sequence of three numbers. Sequences with any value above 1 are
    treated as 0-255 values.

    Raises:
        ValueError: If the colour cannot be parsed
    """
    if isinstance(value, str):
        text = value.strip().lstrip("#")
        if len(text) == 3:
            text = "".join(c * 2 for c in text)
        if len(text) not in (6, 8):
            raise ValueError(f"Invalid colour: {value!r}")
        try:
            rgb = [int(text[i:i + 2], 16) / 255.0 for i in (0, 2, 4)]
        except ValueError:
            raise ValueError(f"Invalid colour: {value!r}") from None
        return tuple(rgb)

    try:
        rgb = [float(v) for v in value]
    except TypeError:
        raise ValueError(f"Invalid colour: {value!r}") from None
    if len(rgb) != 3:
        raise ValueError(f"Colour needs 3 components, got {len(rgb)}")
    if max(rgb) > 1.0:
        rgb = [v / 255.0 for v in rgb]
    return tuple(min(max(v, 0.0), 1.0) for v in rgb)


def format_color(rgb) -> str:
    """Format an RGB float triple (0-1) as a '#rrggbb' hex string."""
    r, g, b = (int(round(min(max(v, 0.0), 1.0) * 255)) for v in rgb)
    return f"#{r:02x}{g:02x}{b:02x}"


def srgb_to_linear(x: np.ndarray) -> np.ndarray:
    """Decode sRGB-encoded values (0-1) to linear light."""
    x = np.clip(x, 0.0, 1.0)
    return np.where(x <= 0.04045, x / 12.92, np.power((x + 0.055) / 1.055, 2.4)).astype(np.float32)


def linear_to_srgb(x: np.ndarray) -> np.ndarray:
    """Encode linear light (0-1) with the sRGB transfer curve."""
    x = np.clip(x, 0.0, 1.0)
    return np.where(x <= 0.0031308, x * 12.92, 1.055 * np.power(x, 1.0 / 2.4) - 0.055).astype(np.float32)


def luminance(image: np.ndarray) -> np.ndarray:
    """
    Relative luminance of a perceptual RGB image.

    Returns:
        HxW float32 array in linear light
    """
    return (srgb_to_linear(image) @ LUMA_WEIGHTS).astype(np.float32)


def smoothstep(x: np.ndarray) -> np.ndarray:
    """
    Apply smoothstep function (cubic Hermite interpolation).

    Args:
        x: Input array (should be in 0-1 range)

    Returns:
        Smoothstepped array
    """
    return x * x * (3 - 2 * x)


def smootherstep(x: np.ndarray) -> np.ndarray:
    """Ken Perlin's smootherstep, zero second derivative at both edges."""
    return x * x * x * (x * (x * 6 - 15) + 10)


def rgb_to_lab(image: np.ndarray) -> np.ndarray:
    """Perceptual RGB (0-1) to CIE Lab (L 0-100)."""
    return cv2.cvtColor(np.ascontiguousarray(image, dtype=np.float32), cv2.COLOR_RGB2Lab)


def lab_to_rgb(lab: np.ndarray) -> np.ndarray:
    """CIE Lab back to perceptual RGB, clipped to 0-1."""
    rgb = cv2.cvtColor(np.ascontiguousarray(lab, dtype=np.float32), cv2.COLOR_Lab2RGB)
    return np.clip(rgb, 0.0, 1.0)


# =============================================================================
# Registered operations
# =============================================================================

@register_operation("color", "Solid colour plane", properties={"value": "#000000"}, source=True)
def color_fill(image, aux=None, value="#000000", **params) -> np.ndarray:
    """
    Produce a 1x1 plane of a single colour.

    Consumers broadcast the plane to their own extent, so the fill has no
    size of its own.
    """
    return np.array(parse_color(value), dtype=np.float32).reshape(1, 1, 3)


@register_operation("desaturate", "Luminance greyscale")
def desaturate(image: np.ndarray, aux=None, **params) -> np.ndarray:
    """Replace colour with the pixel's luminance."""
    grey = linear_to_srgb(luminance(image))
    return np.repeat(grey[:, :, np.newaxis], 3, axis=2)


@register_operation("invert-gamma", "Invert colours in perceptual space")
def invert_gamma(image: np.ndarray, aux=None, **params) -> np.ndarray:
    return (1.0 - np.clip(image, 0.0, 1.0)).astype(np.float32)


@register_operation(
    "hue-chroma",
    "Adjust hue, chroma and lightness in LCh",
    properties={"hue": 0.0, "chroma": 0.0, "lightness": 0.0},
)
def hue_chroma(image: np.ndarray, aux=None, hue: float = 0.0, chroma: float = 0.0,
               lightness: float = 0.0, **params) -> np.ndarray:
    """
    Shift hue (degrees), chroma and lightness (Lab units) of an image.

    All-zero adjustments return a copy of the input unchanged.
    """
    if hue == 0.0 and chroma == 0.0 and lightness == 0.0:
        return image.astype(np.float32, copy=True)

    lab = rgb_to_lab(image)
    L, a, b = lab[:, :, 0], lab[:, :, 1], lab[:, :, 2]

    C = np.hypot(a, b)
    h = np.arctan2(b, a) + np.deg2rad(hue)
    C = np.maximum(C + chroma, 0.0)

    out = np.empty_like(lab)
    out[:, :, 0] = np.clip(L + lightness, 0.0, 100.0)
    out[:, :, 1] = C * np.cos(h)
    out[:, :, 2] = C * np.sin(h)
    return lab_to_rgb(out)
