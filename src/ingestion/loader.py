"""
Image Loader - Decodes image files into pixel buffers for the core pipeline
"""
from pathlib import Path
from typing import Union, Optional, Tuple
from dataclasses import dataclass
from enum import Enum
import io
import logging
import math

import numpy as np
from PIL import Image, UnidentifiedImageError

from ..exceptions import InvalidInputError, DecodeError
from ..vectorization.buffers import PixelBuffer

logger = logging.getLogger(__name__)

DEFAULT_MAX_DIMENSION = 2000
DEFAULT_MAX_BYTES = 10 * 1024 * 1024


class InputFormat(Enum):
    PNG = "png"
    JPG = "jpg"
    JPEG = "jpeg"
    GIF = "gif"
    BMP = "bmp"
    WEBP = "webp"
    TIFF = "tiff"
    UNKNOWN = "unknown"


@dataclass
class LoadedImage:
    """Container for a decoded image"""
    buffer: PixelBuffer
    original_size: Tuple[int, int]
    scale_factor: float
    format: InputFormat
    filepath: Optional[Path] = None

    @property
    def was_scaled(self) -> bool:
        return self.scale_factor != 1.0


def fit_within(width: int, height: int, max_dimension: int) -> Tuple[int, int, float]:
    """
    Compute dimensions that fit inside a max_dimension square.

    Returns (width, height, ratio). Aspect ratio is kept and both sides are
    floored, never below 1 pixel.
    """
    if width <= max_dimension and height <= max_dimension:
        return width, height, 1.0
    ratio = min(max_dimension / width, max_dimension / height)
    return (
        max(1, math.floor(width * ratio)),
        max(1, math.floor(height * ratio)),
        ratio,
    )


class ImageLoader:
    """
    Loads raster images and hands them to the core as RGBA pixel buffers.

    Supported formats: anything Pillow decodes, restricted to the common
    raster extensions below. Images larger than `max_dimension` on either
    side are downscaled to fit, keeping the aspect ratio.
    """

    SUPPORTED_EXTENSIONS = {'.png', '.jpg', '.jpeg', '.gif', '.bmp', '.webp', '.tiff', '.tif'}

    def __init__(
        self,
        max_dimension: int = DEFAULT_MAX_DIMENSION,
        max_bytes: int = DEFAULT_MAX_BYTES,
    ):
        self.max_dimension = max_dimension
        self.max_bytes = max_bytes

    def load(self, filepath: Union[str, Path]) -> LoadedImage:
        """Load an image from file path"""
        if filepath is None:
            raise InvalidInputError("No image file provided")
        filepath = Path(filepath)

        if not filepath.exists():
            raise FileNotFoundError(f"File not found: {filepath}")

        ext = filepath.suffix.lower()
        if ext not in self.SUPPORTED_EXTENSIONS:
            raise InvalidInputError(f"Unsupported format: {ext}")

        logger.info(f"Loading image: {filepath}")
        loaded = self.load_bytes(filepath.read_bytes())
        loaded.filepath = filepath
        return loaded

    def load_bytes(self, content: bytes, content_type: Optional[str] = None) -> LoadedImage:
        """Decode raw image bytes, e.g. an HTTP upload"""
        self.validate(content, content_type)

        try:
            with Image.open(io.BytesIO(content)) as image:
                image.load()
                format_type = self._detect_format(image.format)
                rgba = image.convert("RGBA") if image.mode != "RGBA" else image.copy()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            raise DecodeError(
                "Failed to load image. Please ensure it's a valid image file"
            ) from e

        original_size = rgba.size
        width, height, ratio = fit_within(*original_size, self.max_dimension)
        if ratio != 1.0:
            logger.info(
                f"Scaling {original_size[0]}x{original_size[1]} image to {width}x{height}"
            )
            rgba = rgba.resize((width, height), Image.Resampling.LANCZOS)

        buffer = PixelBuffer.from_array(np.asarray(rgba))
        return LoadedImage(
            buffer=buffer,
            original_size=original_size,
            scale_factor=ratio,
            format=format_type,
        )

    def validate(self, content: Optional[bytes], content_type: Optional[str] = None):
        """Reject missing, non-image or oversized payloads"""
        if not content:
            raise InvalidInputError("No image file provided")
        if content_type is not None and not content_type.startswith("image/"):
            raise InvalidInputError("Invalid file type. Please upload an image file")
        if len(content) > self.max_bytes:
            limit_mb = self.max_bytes // (1024 * 1024)
            raise InvalidInputError(f"Image file is too large. Maximum size is {limit_mb}MB")

    def _detect_format(self, pil_format: Optional[str]) -> InputFormat:
        """Map Pillow's format name to InputFormat"""
        name = (pil_format or "").lower()
        try:
            return InputFormat(name)
        except ValueError:
            return InputFormat.UNKNOWN
