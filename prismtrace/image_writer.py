"""
Pixel buffer with PNG persistence.

The buffer stores linear float colors; conversion to 8-bit happens only
when the image is saved.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Optional, Union
import numpy as np

from .vec3 import Color

logger = logging.getLogger(__name__)


class ImageWriteError(RuntimeError):
    """Raised when the rendered image cannot be written to disk."""
    pass


class ImageWriter:
    """A width x height color buffer that can be saved as an image file."""

    def __init__(
        self,
        name: str,
        width: int,
        height: int,
        output_dir: Optional[Union[str, Path]] = None
    ):
        """Create an image buffer.

        Args:
            name: Output file name (".png" is appended when no suffix is given)
            width: Number of pixel columns
            height: Number of pixel rows
            output_dir: Directory for the saved file (default: ./images)
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Image resolution must be positive, got {width}x{height}")
        self.name = name
        self.width = width
        self.height = height
        self.output_dir = Path(output_dir) if output_dir is not None else Path.cwd() / "images"
        self._pixels = np.zeros((height, width, 3), dtype=np.float64)

    def set_pixel_color(self, x: int, y: int, color: Color) -> None:
        """Write one pixel (x = column, y = row)."""
        self._pixels[y, x] = color.to_array()

    def get_pixel_color(self, x: int, y: int) -> Color:
        return Color.from_array(self._pixels[y, x].copy())

    def to_array(self) -> np.ndarray:
        """Return a copy of the float buffer, shape (height, width, 3)."""
        return self._pixels.copy()

    def to_ldr(self, gamma: float = 1.0) -> np.ndarray:
        """Convert the buffer to 8-bit with optional gamma correction.

        Args:
            gamma: Display gamma (1.0 keeps the linear values)

        Returns:
            LDR image as uint8 array
        """
        corrected = np.power(np.clip(self._pixels, 0.0, 1.0), 1.0 / gamma)
        return np.clip(np.round(corrected * 255), 0, 255).astype(np.uint8)

    @property
    def path(self) -> Path:
        filename = self.name if Path(self.name).suffix else f"{self.name}.png"
        return self.output_dir / filename

    def save_image(self, gamma: float = 1.0) -> Path:
        """Save the buffer to `output_dir/name`.

        Returns:
            The path of the written file

        Raises:
            ImageWriteError: If the directory or file cannot be written, or
                the file suffix is not a format Pillow can encode
        """
        from PIL import Image as PILImage

        path = self.path
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            PILImage.fromarray(self.to_ldr(gamma)).save(path)
        except (OSError, ValueError) as e:
            logger.error("I/O error writing %s", path, exc_info=True)
            raise ImageWriteError(f"Could not write image to {path}") from e

        logger.info("Saved %dx%d image to %s", self.width, self.height, path)
        return path

    def __repr__(self) -> str:
        return f"ImageWriter(name={self.name!r}, resolution={self.width}x{self.height})"
