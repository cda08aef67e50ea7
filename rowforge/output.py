"""
Image output.

Plain-text PPM (P3) is the native format; any other extension is handed to
PIL.
"""

from __future__ import annotations
from pathlib import Path
from typing import Union
import numpy as np

from .tonemapping import to_ldr

MAX_VALUE = 255


def write_ppm(image: np.ndarray, filename: Union[str, Path]) -> None:
    """Write an 8-bit image as plain-text PPM.

    Args:
        image: uint8 array of shape (height, width, 3)
        filename: Output path
    """
    height, width = image.shape[:2]

    with open(filename, 'w') as f:
        f.write(f'P3\n{width} {height}\n{MAX_VALUE}\n')
        for row in image:
            f.write(' '.join(str(int(v)) for v in row.reshape(-1)))
            f.write('\n')


def read_ppm(filename: Union[str, Path]) -> np.ndarray:
    """Read a plain-text PPM written by write_ppm (or any P3 file).

    Returns:
        uint8 array of shape (height, width, 3)
    """
    tokens = []
    with open(filename) as f:
        for line in f:
            tokens.extend(line.split('#', 1)[0].split())

    if not tokens or tokens[0] != 'P3':
        raise ValueError(f"Not a plain-text PPM file: {filename}")

    width, height, max_value = (int(t) for t in tokens[1:4])
    values = np.array(tokens[4:], dtype=np.int64)
    if values.size != width * height * 3:
        raise ValueError(f"Expected {width * height * 3} values, got {values.size}")
    if max_value != MAX_VALUE:
        values = values * MAX_VALUE // max_value
    return values.reshape(height, width, 3).astype(np.uint8)


def save_image(image: np.ndarray, filename: Union[str, Path], gamma: float = 2.2) -> None:
    """Save image to file.

    Args:
        image: Image array (linear float or uint8)
        filename: Output filename (extension determines format)
        gamma: Gamma used when converting a linear image
    """
    if image.dtype == np.float64 or image.dtype == np.float32:
        image = to_ldr(image, gamma)

    if str(filename).lower().endswith('.ppm'):
        write_ppm(image, filename)
    else:
        from PIL import Image as PILImage

        pil_image = PILImage.fromarray(image, 'RGB')
        pil_image.save(filename)
