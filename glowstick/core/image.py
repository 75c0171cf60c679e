"""
Image I/O utilities for glowstick.

Images are read with OpenCV and handed to the pipeline as float32 RGB
arrays in the 0-1 range. Alpha is kept aside and written back unchanged.
"""

from dataclasses import dataclass
from pathlib import Path

import cv2
import numpy as np


@dataclass
class ImageProperties:
    """Properties of an image file."""
    width: int
    height: int
    channels: int
    dtype: str = "uint8"

    @classmethod
    def from_array(cls, array: np.ndarray) -> "ImageProperties":
        """Create ImageProperties from a decoded OpenCV array."""
        channels = 1 if array.ndim == 2 else array.shape[2]
        return cls(
            width=array.shape[1],
            height=array.shape[0],
            channels=channels,
            dtype=str(array.dtype),
        )

    def to_dict(self) -> dict:
        return {
            "width": self.width,
            "height": self.height,
            "channels": self.channels,
            "dtype": self.dtype,
        }

    @property
    def max_value(self) -> float:
        """Full-scale value for the file's bit depth."""
        if self.dtype == "uint16":
            return 65535.0
        if self.dtype == "uint8":
            return 255.0
        return 1.0


@dataclass
class LoadedImage:
    """A decoded image split into pipeline RGB and optional alpha."""
    rgb: np.ndarray
    alpha: np.ndarray | None
    properties: ImageProperties


def read_image(path: str | Path) -> LoadedImage:
    """
    Read an image file.

    Args:
        path: Image file path

    Returns:
        LoadedImage with float32 RGB (0-1) and alpha (0-1) or None

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If OpenCV cannot decode the file
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")

    data = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if data is None:
        raise ValueError(f"Failed to load image: {path}")

    props = ImageProperties.from_array(data)
    scaled = data.astype(np.float32) / props.max_value

    alpha = None
    if props.channels == 1:
        rgb = cv2.cvtColor(scaled, cv2.COLOR_GRAY2RGB)
    elif props.channels == 4:
        rgb = cv2.cvtColor(scaled, cv2.COLOR_BGRA2RGB)
        alpha = scaled[:, :, 3]
    else:
        rgb = cv2.cvtColor(scaled, cv2.COLOR_BGR2RGB)

    return LoadedImage(rgb=np.clip(rgb, 0.0, 1.0), alpha=alpha, properties=props)


def write_image(
    path: str | Path,
    rgb: np.ndarray,
    alpha: np.ndarray | None = None,
    dtype: str = "uint8",
) -> Path:
    """
    Write a float32 RGB image (0-1) to disk.

    Alpha is cropped to the image extent when the pipeline changed size.

    Args:
        path: Output path; the extension picks the format
        rgb: HxWx3 float32 image
        alpha: Optional HxW alpha (0-1)
        dtype: "uint8" or "uint16" (16-bit only for formats that support it)

    Returns:
        The written path

    Raises:
        ValueError: If OpenCV fails to write the file
    """
    path = Path(path)
    max_value = 65535.0 if dtype == "uint16" else 255.0
    out_dtype = np.uint16 if dtype == "uint16" else np.uint8

    bgr = cv2.cvtColor(np.clip(rgb, 0.0, 1.0).astype(np.float32), cv2.COLOR_RGB2BGR)
    if alpha is not None:
        h, w = bgr.shape[:2]
        bgr = np.dstack([bgr, np.clip(alpha[:h, :w], 0.0, 1.0)])

    data = np.round(bgr * max_value).astype(out_dtype)
    if not cv2.imwrite(str(path), data):
        raise ValueError(f"Failed to write image to {path}")
    return path
