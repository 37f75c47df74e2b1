"""
Image output.

The renderer hands back a float image in [0, 1) with row 0 at the top.
This module turns it into 8-bit pixels and writes it either as plain-text
PPM (P3) or, for any other extension, through Pillow.

Files are written to a temporary sibling first and moved into place, so an
interrupted write never leaves a truncated image behind.
"""

from __future__ import annotations
import os
import tempfile
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image as PILImage

from .errors import ConfigurationError

PathLike = Union[str, os.PathLike]


def to_8bit(image: np.ndarray) -> np.ndarray:
    """Map [0, 1] channels to 0..255 with ``round(v * 255)``, halves rounding up.

    Args:
        image: Float image of shape (height, width, 3)

    Returns:
        uint8 array of the same shape
    """
    scaled = np.floor(np.clip(image, 0.0, 1.0) * 255.0 + 0.5)
    return scaled.astype(np.uint8)


def encode_ppm(image: np.ndarray) -> str:
    """Encode an image as plain-text PPM.

    Layout: ``P3``, ``width height``, ``255``, then one line per image row
    (top to bottom) holding space-separated ``R G B`` triples left to right.
    """
    height, width = image.shape[:2]
    pixels = to_8bit(image)

    lines = ["P3", f"{width} {height}", "255"]
    for row in pixels:
        lines.append(" ".join(f"{r} {g} {b}" for r, g, b in row))
    return "\n".join(lines) + "\n"


def _atomic_write(path: Path, write) -> None:
    """Run ``write(tmp_path)`` then move the temporary file onto ``path``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    os.close(fd)
    try:
        write(tmp_name)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


def write_ppm(image: np.ndarray, filename: PathLike) -> None:
    """Write ``image`` as a P3 PPM file."""
    data = encode_ppm(image)

    def write(tmp_name: str) -> None:
        with open(tmp_name, 'w', encoding='ascii', newline='\n') as f:
            f.write(data)

    _atomic_write(Path(filename), write)


def output_format(filename: PathLike) -> str:
    """Name of the format an output filename will be written in.

    Raises:
        ConfigurationError: If the extension is not a known image format
    """
    path = Path(filename)
    suffix = path.suffix.lower()
    if suffix == '.ppm':
        return 'PPM'

    image_format = PILImage.registered_extensions().get(suffix)
    if image_format is None:
        raise ConfigurationError(f"Unsupported image format: {path.suffix or path.name}")
    return image_format


def save_image(image: np.ndarray, filename: PathLike) -> None:
    """Save image to file.

    Args:
        image: Float image (height, width, 3) in [0, 1)
        filename: Output filename (extension determines format)

    Raises:
        ConfigurationError: If the extension is not a known image format
    """
    path = Path(filename)
    image_format = output_format(path)

    if image_format == 'PPM':
        write_ppm(image, path)
        return

    pil_image = PILImage.fromarray(to_8bit(image), 'RGB')
    _atomic_write(path, lambda tmp_name: pil_image.save(tmp_name, format=image_format))
