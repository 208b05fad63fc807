"""
Pixel buffers shared by every pipeline stage
"""
from typing import Optional, Tuple
from dataclasses import dataclass, field
import re

import numpy as np


RGB = Tuple[int, int, int]

_HEX_COLOR = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


@dataclass(frozen=True, eq=False)
class PixelBuffer:
    """
    Dense 8-bit image with interleaved channels.

    `data` has shape (height, width, channels), so its flattened form is the
    usual row-major interleaved layout of length width * height * channels.
    The array is marked read-only on construction; stages that need to
    change pixels work on a copy and return a new buffer.
    """
    data: np.ndarray
    width: int
    height: int
    channels: int = 4

    def __post_init__(self):
        expected = (self.height, self.width, self.channels)
        if self.data.shape != expected:
            raise ValueError(
                f"Buffer shape {self.data.shape} does not match {expected}"
            )
        if self.data.dtype != np.uint8:
            raise ValueError(f"Buffer must be uint8, got {self.data.dtype}")
        self.data.setflags(write=False)

    @classmethod
    def from_array(cls, array: np.ndarray) -> "PixelBuffer":
        """Wrap an (H, W, C) or (H, W) array, copying it"""
        array = np.asarray(array)
        if array.ndim == 2:
            array = array[:, :, np.newaxis]
        if array.ndim != 3:
            raise ValueError(f"Expected a 2D or 3D array, got {array.ndim}D")
        height, width, channels = array.shape
        data = np.clip(array, 0, 255).astype(np.uint8, copy=True)
        return cls(data=data, width=width, height=height, channels=channels)

    @classmethod
    def from_bytes(cls, raw: bytes, width: int, height: int, channels: int = 4) -> "PixelBuffer":
        """Build a buffer from a flat interleaved byte sequence"""
        if len(raw) != width * height * channels:
            raise ValueError(
                f"Expected {width * height * channels} bytes, got {len(raw)}"
            )
        data = np.frombuffer(raw, dtype=np.uint8).reshape(height, width, channels).copy()
        return cls(data=data, width=width, height=height, channels=channels)

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def color_channels(self) -> int:
        """Number of leading color channels (alpha excluded)"""
        return 3 if self.channels >= 3 else 1

    def rgb(self) -> np.ndarray:
        """(H, W, 3) view of the color channels"""
        if self.channels >= 3:
            return self.data[:, :, :3]
        return np.repeat(self.data[:, :, :1], 3, axis=2)

    def pixel(self, x: int, y: int) -> RGB:
        r, g, b = (int(v) for v in self.rgb()[y, x])
        return r, g, b

    def tobytes(self) -> bytes:
        return self.data.tobytes()


@dataclass(frozen=True, eq=False)
class EdgeMap:
    """
    Edge-strength image.

    `buffer` has the same dimensions as the source image: channels 0-2 hold
    the broadcast strength, channel 3 is always 255. `source` is the color
    buffer used later for dominant-color sampling; it is borrowed, never
    modified.
    """
    buffer: PixelBuffer
    source: Optional[PixelBuffer] = field(default=None, compare=False)

    @property
    def width(self) -> int:
        return self.buffer.width

    @property
    def height(self) -> int:
        return self.buffer.height

    @property
    def strength(self) -> np.ndarray:
        """(H, W) view of the edge strength"""
        return self.buffer.data[:, :, 0]

    @classmethod
    def from_strength(
        cls,
        strength: np.ndarray,
        source: Optional[PixelBuffer] = None,
    ) -> "EdgeMap":
        """Broadcast a 2D strength array into an opaque RGBA buffer"""
        values = np.clip(np.rint(strength), 0, 255).astype(np.uint8)
        height, width = values.shape
        data = np.empty((height, width, 4), dtype=np.uint8)
        data[:, :, 0] = values
        data[:, :, 1] = values
        data[:, :, 2] = values
        data[:, :, 3] = 255
        return cls(
            buffer=PixelBuffer(data=data, width=width, height=height, channels=4),
            source=source,
        )


def parse_hex_color(value: str) -> RGB:
    """Parse '#rgb' or '#rrggbb' into an RGB triple"""
    match = _HEX_COLOR.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise ValueError(f"Invalid color: {value!r}")
    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)


def to_hex(color: RGB) -> str:
    r, g, b = color
    return f"#{r:02x}{g:02x}{b:02x}"


LUMA_WEIGHTS = (0.299, 0.587, 0.114)


def luminance(image: PixelBuffer) -> np.ndarray:
    """Per-pixel brightness as float64, shape (H, W)"""
    rgb = image.rgb().astype(np.float64)
    r, g, b = LUMA_WEIGHTS
    return r * rgb[:, :, 0] + g * rgb[:, :, 1] + b * rgb[:, :, 2]
