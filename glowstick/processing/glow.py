"""
Glow operations: bloom and soft glow.

Both operations derive a glow layer from the bright parts of the image,
blur it, and mix it back over the input. They are only spliced into a
pipeline when their strength/brightness is above zero, but each one is
still well defined at zero.
"""

import numpy as np
from scipy.ndimage import gaussian_filter

from glowstick.processing.color import linear_to_srgb, luminance, smoothstep, srgb_to_linear
from glowstick.processing.registry import register_operation


def _blur(image: np.ndarray, radius: float) -> np.ndarray:
    """Gaussian blur with sigma = radius / 2; radius 0 returns the input."""
    if radius <= 0:
        return image
    sigma = radius / 2.0
    if image.ndim == 3:
        return gaussian_filter(image, sigma=(sigma, sigma, 0), mode="nearest")
    return gaussian_filter(image, sigma=sigma, mode="nearest")


@register_operation(
    "bloom",
    "Glow around bright areas",
    properties={
        "threshold": 50.0,
        "softness": 25.0,
        "radius": 10.0,
        "strength": 50.0,
        "gamma": 1.0,
        "limit_exposure": False,
    },
)
def bloom(image: np.ndarray, aux=None, threshold: float = 50.0, softness: float = 25.0,
          radius: float = 10.0, strength: float = 50.0, gamma: float = 1.0,
          limit_exposure: bool = False, **params) -> np.ndarray:
    """
    Add a glow around the bright areas of an image.

    Processing order:
    1. Luminance threshold (percent), softened over +/- softness/2
    2. Optional gamma on the glow mask
    3. Gaussian blur of the masked image
    4. Additive mix in linear light, scaled by strength / 100

    Args:
        threshold: Luminance level (0-100) where glow starts
        softness: Width (0-100) of the threshold transition
        radius: Glow radius in pixels
        strength: Glow strength in percent
        gamma: Exponent applied to the glow mask
        limit_exposure: Keep highlights from exceeding their original level
    """
    linear = srgb_to_linear(image)
    level = luminance(image) * 100.0

    half = max(softness, 1e-6) / 2.0
    mask = np.clip((level - (threshold - half)) / (2.0 * half), 0.0, 1.0)
    mask = smoothstep(mask)
    if gamma != 1.0:
        mask = np.power(mask, gamma)

    glow = _blur(linear * mask[:, :, np.newaxis], radius)
    result = linear + glow * (strength / 100.0)

    if limit_exposure:
        result = np.minimum(result, np.maximum(linear, 1.0))
    return linear_to_srgb(result)


@register_operation(
    "softglow",
    "Soft, diffuse glow",
    properties={"glow_radius": 10.0, "brightness": 0.3, "sharpness": 0.85},
)
def softglow(image: np.ndarray, aux=None, glow_radius: float = 10.0, brightness: float = 0.3,
             sharpness: float = 0.85, **params) -> np.ndarray:
    """
    Screen a blurred, sigmoid-sharpened luminance glow over the image.

    Args:
        glow_radius: Blur radius of the glow in pixels
        brightness: Glow brightness multiplier
        sharpness: Steepness of the luminance sigmoid (0-1)
    """
    lum = linear_to_srgb(luminance(image))

    # Sigmoid around mid grey, steeper as sharpness approaches 1
    gain = 2.0 + 18.0 * float(np.clip(sharpness, 0.0, 1.0))
    exponent = np.clip(-gain * (lum - 0.5), -88, 88)
    glow = brightness / (1.0 + np.exp(exponent))

    glow = _blur(glow.astype(np.float32), glow_radius)
    glow = np.clip(glow, 0.0, 1.0)[:, :, np.newaxis]

    base = np.clip(image, 0.0, 1.0)
    return (1.0 - (1.0 - base) * (1.0 - glow)).astype(np.float32)
