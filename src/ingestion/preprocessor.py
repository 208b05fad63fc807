"""
Image Preprocessor - Prepares decoded images for edge detection
"""
from typing import Optional, Tuple
from dataclasses import dataclass
from enum import Enum
import logging

import numpy as np

from ..vectorization.buffers import PixelBuffer, RGB, luminance

logger = logging.getLogger(__name__)


# Discrete Gaussian approximation, normalised by 16
SMOOTHING_KERNEL = np.array(
    [
        [1, 2, 1],
        [2, 4, 2],
        [1, 2, 1],
    ],
    dtype=np.int64,
)
SMOOTHING_DIVISOR = 16


class ColorMode(str, Enum):
    ORIGINAL = "original"
    MONO = "mono"


@dataclass
class PreprocessingConfig:
    """Configuration for image preprocessing"""
    denoise: bool = True
    color_mode: ColorMode = ColorMode.ORIGINAL
    mono_color: RGB = (0, 0, 255)


@dataclass
class PreprocessedImage:
    """Container for preprocessed image data"""
    smoothed: PixelBuffer  # Input to the edge detector
    reference: PixelBuffer  # Unblurred colors used for sampling
    applied_transforms: list


class ImagePreprocessor:
    """
    Prepares a decoded image for the edge detector.

    Operations:
    - Denoising with a fixed 3x3 weighted average (interior pixels only)
    - Optional monochrome tint of the color reference buffer

    Every operation returns a new buffer; inputs are never modified.
    """

    def __init__(self, config: Optional[PreprocessingConfig] = None):
        self.config = config or PreprocessingConfig()

    def process(self, image: PixelBuffer, config: Optional[PreprocessingConfig] = None) -> PreprocessedImage:
        """Apply preprocessing pipeline to image"""
        cfg = config or self.config
        transforms = []

        reference = image
        if cfg.color_mode == ColorMode.MONO:
            reference = self.tint(image, cfg.mono_color)
            transforms.append("mono_tint")

        smoothed = image
        if cfg.denoise:
            smoothed = self.denoise(image)
            transforms.append("denoise")

        logger.debug(f"Preprocessed {image.width}x{image.height} image: {transforms}")
        return PreprocessedImage(
            smoothed=smoothed,
            reference=reference,
            applied_transforms=transforms,
        )

    def denoise(self, image: PixelBuffer) -> PixelBuffer:
        """Smooth interior pixels; border pixels and alpha pass through"""
        return smooth(image)

    def tint(self, image: PixelBuffer, color: RGB) -> PixelBuffer:
        """Replace each pixel by `color` scaled with the pixel's brightness"""
        return tint(image, color)


def smooth(image: PixelBuffer) -> PixelBuffer:
    """
    Apply the 3x3 smoothing kernel to each color channel.

    Rows and columns on the border are copied unchanged, as is any channel
    past the color channels (alpha).
    """
    out = image.data.copy()
    height, width = image.height, image.width
    if height < 3 or width < 3:
        return PixelBuffer(data=out, width=width, height=height, channels=image.channels)

    n = image.color_channels
    src = image.data[:, :, :n].astype(np.int64)
    acc = np.zeros((height - 2, width - 2, n), dtype=np.int64)
    for ky in range(3):
        for kx in range(3):
            weight = SMOOTHING_KERNEL[ky, kx]
            acc += weight * src[ky:ky + height - 2, kx:kx + width - 2]

    blurred = np.rint(acc / SMOOTHING_DIVISOR)
    out[1:-1, 1:-1, :n] = np.clip(blurred, 0, 255).astype(np.uint8)
    return PixelBuffer(data=out, width=width, height=height, channels=image.channels)


def tint(image: PixelBuffer, color: Tuple[int, int, int]) -> PixelBuffer:
    if image.channels < 3:
        raise ValueError("Monochrome tint requires an RGB buffer")
    brightness = np.rint(luminance(image)) / 255.0
    out = image.data.copy()
    for c in range(3):
        out[:, :, c] = np.clip(np.rint(color[c] * brightness), 0, 255).astype(np.uint8)
    return PixelBuffer(data=out, width=image.width, height=image.height, channels=image.channels)
