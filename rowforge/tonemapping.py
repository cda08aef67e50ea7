"""
Tone mapping from linear radiance to 8-bit display values.

Gamma 2.2 encoding followed by rounding to the 0-255 range.
"""

from __future__ import annotations
import numpy as np


def clamp(x: float) -> float:
    """Clamp a value to [0, 1]."""
    if x < 0:
        return 0.0
    if x > 1:
        return 1.0
    return x


def to_int(x: float, gamma: float = 2.2) -> int:
    """Convert a linear channel value to an 8-bit display value."""
    return int(clamp(x) ** (1.0 / gamma) * 255 + 0.5)


def apply_gamma(image: np.ndarray, gamma: float = 2.2) -> np.ndarray:
    """Apply gamma correction to an image.

    Args:
        image: Input image (H, W, 3); values are clamped to [0, 1] first
        gamma: Gamma value (2.2 for display)

    Returns:
        Gamma-corrected image
    """
    return np.power(np.clip(image, 0.0, 1.0), 1.0 / gamma)


def to_ldr(image: np.ndarray, gamma: float = 2.2) -> np.ndarray:
    """Convert a linear image to 8-bit, matching to_int per channel.

    Args:
        image: Linear image array (H, W, 3)
        gamma: Gamma value

    Returns:
        LDR image as uint8 array
    """
    corrected = apply_gamma(image, gamma)
    return np.floor(corrected * 255 + 0.5).astype(np.uint8)
