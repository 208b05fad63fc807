"""
Edge Tracer - Greedy walks through connected edge pixels
"""
from typing import List, Set, Tuple
from dataclasses import dataclass
import logging

import numpy as np

from .buffers import EdgeMap

logger = logging.getLogger(__name__)


Point = Tuple[int, int]

# Neighbor priority: E, SE, S, SW, W, NW, N, NE (y grows downwards).
# Output depends on this order; do not reorder.
DIRECTIONS: Tuple[Point, ...] = (
    (1, 0),
    (1, 1),
    (0, 1),
    (-1, 1),
    (-1, 0),
    (-1, -1),
    (0, -1),
    (1, -1),
)

MIN_TRACE_POINTS = 3
MAX_TRACE_POINTS = 1000


@dataclass(frozen=True)
class Trace:
    """Ordered walk of pixel coordinates"""
    points: Tuple[Point, ...]

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self):
        return iter(self.points)

    @property
    def start(self) -> Point:
        return self.points[0]


class EdgeTracer:
    """
    Turns an EdgeMap into polylines.

    Pixels are scanned left to right, top to bottom. Every unvisited pixel
    stronger than the threshold starts a walk that repeatedly steps to the
    first unvisited qualifying neighbor in DIRECTIONS order. A walk ends when
    no neighbor qualifies or `max_points` is reached. Each pixel ends up in
    at most one trace.
    """

    def __init__(
        self,
        threshold: float,
        max_points: int = MAX_TRACE_POINTS,
        min_points: int = MIN_TRACE_POINTS,
    ):
        if max_points < 1:
            raise ValueError(f"max_points must be positive, got {max_points}")
        self.threshold = threshold
        self.max_points = max_points
        self.min_points = min_points

    def trace(self, edge_map: EdgeMap) -> List[Trace]:
        """Trace all edges; traces come back in discovery order"""
        strength = edge_map.strength
        height, width = strength.shape
        strong = strength > self.threshold
        visited: Set[Point] = set()
        traces: List[Trace] = []

        ys, xs = np.nonzero(strong)
        for y, x in zip(ys.tolist(), xs.tolist()):
            if (x, y) in visited:
                continue
            points = self._walk(x, y, strong, width, height, visited)
            if len(points) >= self.min_points:
                traces.append(Trace(points=tuple(points)))

        logger.debug(
            f"Traced {len(traces)} paths above threshold {self.threshold:.1f} "
            f"({len(visited)} pixels visited)"
        )
        return traces

    def _walk(
        self,
        x: int,
        y: int,
        strong: np.ndarray,
        width: int,
        height: int,
        visited: Set[Point],
    ) -> List[Point]:
        points = [(x, y)]
        while True:
            visited.add((x, y))
            if len(points) >= self.max_points:
                break

            for dx, dy in DIRECTIONS:
                nx, ny = x + dx, y + dy
                if 0 <= nx < width and 0 <= ny < height:
                    if strong[ny, nx] and (nx, ny) not in visited:
                        points.append((nx, ny))
                        x, y = nx, ny
                        break
            else:
                break
        return points
