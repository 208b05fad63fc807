"""
Raster to Vector Converter - Turns edge maps into colored polylines
"""
from typing import List, Optional, Tuple
from dataclasses import dataclass, field
import logging

from .buffers import PixelBuffer, EdgeMap, RGB, to_hex
from .color import dominant_color
from .edges import EdgeDetector
from .tracer import EdgeTracer, Trace, MAX_TRACE_POINTS

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD_SCALE = 0.3
DEFAULT_MIN_PATH_LENGTH = 10


@dataclass(frozen=True)
class ColoredPath:
    """A traced polyline with its stroke color"""
    points: Tuple[Tuple[int, int], ...]
    color: RGB

    @property
    def hex_color(self) -> str:
        return to_hex(self.color)


@dataclass
class VectorDocument:
    """Container for all vectorized data"""
    width: int
    height: int
    paths: List[ColoredPath] = field(default_factory=list)

    @property
    def point_count(self) -> int:
        return sum(len(p.points) for p in self.paths)


class RasterToVector:
    """
    Converts a preprocessed image to colored polylines.

    Pipeline:
    1. Edge detection (Sobel, optionally color-aware)
    2. Greedy edge tracing above `threshold * threshold_scale`
    3. Short-trace filtering (`min_path_length`)
    4. Dominant color sampling from the unblurred color buffer
    """

    def __init__(
        self,
        threshold: int = 128,
        color_aware: bool = True,
        stroke_color: Optional[RGB] = None,
        threshold_scale: float = DEFAULT_THRESHOLD_SCALE,
        min_path_length: int = DEFAULT_MIN_PATH_LENGTH,
        max_trace_length: int = MAX_TRACE_POINTS,
    ):
        self.threshold = threshold
        self.color_aware = color_aware
        self.stroke_color = stroke_color
        self.threshold_scale = threshold_scale
        self.min_path_length = min_path_length
        self.max_trace_length = max_trace_length

    @property
    def edge_threshold(self) -> float:
        return self.threshold * self.threshold_scale

    def vectorize(self, image: PixelBuffer, color_source: Optional[PixelBuffer] = None) -> VectorDocument:
        """Convert a smoothed image to a VectorDocument"""
        logger.info(f"Starting vectorization of {image.width}x{image.height} image...")

        edge_map = self.detect_edges(image, color_source)
        traces = self.trace_edges(edge_map)
        paths = self.colorize(traces, edge_map.source)

        logger.info(f"Vectorized {len(paths)} paths from {len(traces)} traces")
        return VectorDocument(width=image.width, height=image.height, paths=paths)

    def detect_edges(self, image: PixelBuffer, color_source: Optional[PixelBuffer] = None) -> EdgeMap:
        """Sobel edge strength of the image"""
        return EdgeDetector(color_aware=self.color_aware).detect(image, color_source)

    def trace_edges(self, edge_map: EdgeMap) -> List[Trace]:
        """Trace and drop paths shorter than min_path_length"""
        tracer = EdgeTracer(self.edge_threshold, max_points=self.max_trace_length)
        traces = tracer.trace(edge_map)
        kept = [t for t in traces if len(t) >= self.min_path_length]
        logger.debug(f"Kept {len(kept)}/{len(traces)} traces of >= {self.min_path_length} points")
        return kept

    def colorize(self, traces: List[Trace], source: Optional[PixelBuffer]) -> List[ColoredPath]:
        """Pair each trace with its dominant color, or the stroke override"""
        paths = []
        for trace in traces:
            if self.stroke_color is not None:
                color = self.stroke_color
            elif source is not None:
                color = dominant_color(trace.points, source)
            else:
                raise ValueError("No color buffer to sample and no stroke color set")
            paths.append(ColoredPath(points=trace.points, color=color))
        return paths
