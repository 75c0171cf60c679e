"""
Geometry and passthrough operations: crop and nop.
"""

import numpy as np

from glowstick.processing.registry import register_operation


@register_operation("nop", "Pass the input through unchanged")
def nop(image: np.ndarray, aux=None, **params) -> np.ndarray:
    return image


@register_operation(
    "crop",
    "Crop to the aux extent or to a rectangle",
    properties={"x": 0, "y": 0, "width": 0, "height": 0},
)
def crop(image: np.ndarray, aux: np.ndarray | None = None, x: int = 0, y: int = 0,
         width: int = 0, height: int = 0, **params) -> np.ndarray:
    """
    Crop an image.

    With an aux image connected, the output takes the aux image's extent
    (anchored at the origin) and the rectangle properties are ignored. A
    1x1 aux plane has no extent and leaves the input untouched.
    """
    if aux is not None:
        h, w = aux.shape[:2]
        if (h, w) == (1, 1):
            return image
        return image[:h, :w]

    if width <= 0 or height <= 0:
        return image
    x, y = max(int(x), 0), max(int(y), 0)
    return image[y:y + int(height), x:x + int(width)]
