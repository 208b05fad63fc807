# Vectorization module
# Converts raster images to vector representations:
# - Sobel edge detection
# - Greedy edge tracing into polylines
# - Dominant color sampling

from .buffers import PixelBuffer, EdgeMap
from .edges import EdgeDetector
from .tracer import EdgeTracer, Trace
from .vectorizer import RasterToVector, ColoredPath, VectorDocument

__all__ = [
    "PixelBuffer",
    "EdgeMap",
    "EdgeDetector",
    "EdgeTracer",
    "Trace",
    "RasterToVector",
    "ColoredPath",
    "VectorDocument",
]
