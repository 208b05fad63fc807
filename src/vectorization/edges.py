"""
Edge Detector - Sobel gradient magnitude over intensity and color
"""
from typing import Optional
import logging

import numpy as np

from .buffers import PixelBuffer, EdgeMap, luminance

logger = logging.getLogger(__name__)


SOBEL_X = np.array(
    [
        [-1, 0, 1],
        [-2, 0, 2],
        [-1, 0, 1],
    ],
    dtype=np.float64,
)

SOBEL_Y = np.array(
    [
        [-1, -2, -1],
        [0, 0, 0],
        [1, 2, 1],
    ],
    dtype=np.float64,
)

MAX_STRENGTH = 255.0


def convolve3x3(channel: np.ndarray, kernel: np.ndarray) -> np.ndarray:
    """
    Correlate a 2D array with a 3x3 kernel.

    Returns an array of the same shape; the one-pixel border is left at 0.
    """
    height, width = channel.shape
    out = np.zeros((height, width), dtype=np.float64)
    if height < 3 or width < 3:
        return out
    inner = out[1:-1, 1:-1]
    for ky in range(3):
        for kx in range(3):
            weight = kernel[ky, kx]
            if weight:
                inner += weight * channel[ky:ky + height - 2, kx:kx + width - 2]
    return out


def sobel_gradients(channel: np.ndarray):
    """Horizontal and vertical Sobel responses of a 2D array"""
    channel = np.asarray(channel, dtype=np.float64)
    return convolve3x3(channel, SOBEL_X), convolve3x3(channel, SOBEL_Y)


def sobel_magnitude(channel: np.ndarray) -> np.ndarray:
    """Unclamped gradient magnitude sqrt(gx^2 + gy^2)"""
    gx, gy = sobel_gradients(channel)
    return np.sqrt(gx * gx + gy * gy)


def color_magnitude(image: PixelBuffer) -> np.ndarray:
    """
    Joint gradient magnitude over the three color channels.

    Squared x and y responses are summed across channels, rooted, then
    divided by 3.
    """
    rgb = image.rgb().astype(np.float64)
    total = np.zeros((image.height, image.width), dtype=np.float64)
    for c in range(3):
        gx, gy = sobel_gradients(rgb[:, :, c])
        total += gx * gx + gy * gy
    return np.sqrt(total) / 3.0


class EdgeDetector:
    """
    Computes an edge-strength map from a (smoothed) image.

    Strength is the Sobel magnitude of the intensity channel. With
    `color_aware` enabled it is averaged with the joint color-channel
    magnitude of the color buffer and clamped to 255. Border pixels are
    always 0.
    """

    def __init__(self, color_aware: bool = True):
        self.color_aware = color_aware

    def detect(
        self,
        image: PixelBuffer,
        color_source: Optional[PixelBuffer] = None,
    ) -> EdgeMap:
        """
        Build the EdgeMap for an image.

        Args:
            image: Preprocessed image, read for intensity gradients
            color_source: Buffer used for color gradients and later sampling;
                defaults to `image`

        Returns:
            EdgeMap of the same dimensions, borrowing `color_source`
        """
        source = color_source if color_source is not None else image
        if source.size != image.size:
            raise ValueError(
                f"Color buffer {source.width}x{source.height} does not match "
                f"image {image.width}x{image.height}"
            )

        strength = self.strength(image, source)
        logger.debug(
            f"Edge detection on {image.width}x{image.height}: "
            f"max strength {strength.max() if strength.size else 0:.1f}"
        )
        return EdgeMap.from_strength(strength, source=source)

    def strength(self, image: PixelBuffer, color_source: Optional[PixelBuffer] = None) -> np.ndarray:
        """Float edge strength in [0, 255], shape (H, W)"""
        gray = sobel_magnitude(luminance(image))
        if not self.color_aware:
            return np.minimum(MAX_STRENGTH, gray)

        source = color_source if color_source is not None else image
        combined = (gray + color_magnitude(source)) / 2.0
        return np.minimum(MAX_STRENGTH, combined)
