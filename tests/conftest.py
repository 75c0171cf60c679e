"""
Shared fixtures for glowstick tests.
"""

import numpy as np
import pytest


@pytest.fixture
def gradient_image():
    """Small RGB float32 image with a horizontal ramp and coloured rows."""
    h, w = 12, 16
    ramp = np.linspace(0.0, 1.0, w, dtype=np.float32)
    image = np.zeros((h, w, 3), dtype=np.float32)
    image[:, :, 0] = ramp
    image[:, :, 1] = ramp[::-1]
    image[:, :, 2] = np.linspace(0.2, 0.8, h, dtype=np.float32)[:, np.newaxis]
    return image


@pytest.fixture
def grey_image():
    """Flat mid-grey image."""
    return np.full((8, 8, 3), 0.5, dtype=np.float32)


@pytest.fixture
def effect_state():
    """A freshly attached effect with default parameters."""
    from glowstick.effect import attach
    return attach()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep GLOWSTICK_* variables from the outer environment out of tests."""
    import os
    for key in list(os.environ):
        if key.startswith("GLOWSTICK_"):
            monkeypatch.delenv(key)
